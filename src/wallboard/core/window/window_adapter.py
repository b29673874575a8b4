'''
DisplayWindow 抽象层骨架。

它定义了**调度层（Wallboard 的三个插件）**与**宿主层（浏览器窗口）**之间的契约。
调度层只拿着 TabInfo 和不透明的 tab_id 说话，不需要知道背后是 DrissionPage 还是别的实现。

所有操作都是异步的，并且都可能失败：实现类应当把库自己的异常转换成 WindowError，
调用方把它当作暂时性错误记录下来，跳过当前步骤，等下一次 tick。
'''
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterable, List, Optional


# ==========================================
# 1. 数据载体 (Data Carriers)
# ==========================================

@dataclass(frozen=True)
class TabInfo:
    """
    [Output] 一次查询时某个标签页的快照。
    列表顺序即标签页顺序，轮播按这个顺序前进。
    """
    id: str
    url: str
    active: bool = False


# ==========================================
# 2. 窗口适配器接口 (The Interface)
# ==========================================

class DisplayWindow(ABC):
    """
    展示窗口的统一接口。
    负责屏蔽具体库 (DrissionPage / CDP) 的实现细节。
    """

    # --- Lifecycle (生命周期管理) ---

    @abstractmethod
    async def open(self):
        """创建窗口（启动浏览器进程）"""
        pass

    @abstractmethod
    async def close(self):
        """关闭窗口并清理资源"""
        pass

    @abstractmethod
    async def is_alive(self) -> bool:
        """窗口是否仍然存在（用户可能直接把窗口关掉了）"""
        pass

    @property
    @abstractmethod
    def window_id(self) -> Optional[str]:
        """窗口标识，open() 之前为 None"""
        pass

    @abstractmethod
    async def focus_window(self):
        """把窗口带到前台"""
        pass

    # --- Tab Management (标签页管理) ---

    @abstractmethod
    async def get_open_tabs(self) -> List[TabInfo]:
        """查询当前窗口的全部标签页（一次查询）"""
        pass

    @abstractmethod
    async def new_tab(self, url: str) -> str:
        """打开一个新的标签页，返回它的 tab_id"""
        pass

    @abstractmethod
    async def close_tabs(self, tab_ids: Iterable[str]):
        """关闭指定的标签页"""
        pass

    @abstractmethod
    async def focus_tab(self, tab_id: str):
        """把指定标签页切换为当前可见的标签页"""
        pass

    @abstractmethod
    async def reload_tab(self, tab_id: str):
        """强制重新加载指定标签页"""
        pass
