"""
Wallboard 自定义异常类

定义了系统中使用的异常类型：配置错误在启动时直接失败，
窗口（宿主浏览器）调用错误则被视为暂时性错误，由调用方记录后跳过。
"""


class WallboardError(Exception):
    """Wallboard 异常基类"""
    pass


class ConfigError(WallboardError):
    """配置错误

    当配置文件缺失、格式错误或取值非法时抛出（例如无法解析的时间 "25:99"）。
    只在加载配置时抛出，不会出现在 tick 循环中。
    """

    def __init__(self, message: str, path: str = None):
        super().__init__(f"{path}: {message}" if path else message)
        self.path = path


class WindowError(WallboardError):
    """窗口调用异常（基类）

    宿主窗口的任何操作失败时抛出，例如在查询和操作之间标签页已被关闭。
    属于暂时性错误：当前步骤被跳过，下一次 tick 自然重试。
    """

    def __init__(self, message: str, tab_id: str = None):
        super().__init__(message)
        self.tab_id = tab_id


class WindowClosedError(WindowError):
    """窗口已关闭异常

    当窗口（浏览器进程）已经不存在时抛出。
    """
    pass
