from .window_adapter import DisplayWindow, TabInfo

__all__ = ["DisplayWindow", "TabInfo"]
