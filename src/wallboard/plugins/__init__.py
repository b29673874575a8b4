from .base import WallboardPlugin
from .revolver import Revolver
from .refresher import Refresher
from .tab_opener import TabOpener, ReconcilePlan

__all__ = ["WallboardPlugin", "Revolver", "Refresher", "TabOpener", "ReconcilePlan"]
