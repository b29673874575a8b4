"""
Wallboard: a scheduled tab rotator for a single display window.

Wallboard keeps one browser window's tabs in sync with a list of configured
entries: entries are opened and closed on their day/time schedules, the
visible tab rotates after each entry's dwell time, and stale tabs are
reloaded after their refresh interval.
"""

__version__ = "0.1.0"

from .core.entry import ConfigEntry, Schedule
from .core.wallboard import Wallboard, build_wallboard
from .core.coordinator import WallboardCoordinator

__all__ = [
    "ConfigEntry",
    "Schedule",
    "Wallboard",
    "build_wallboard",
    "WallboardCoordinator",
    "__version__",
]
