"""
测试公共设施：内存中的 FakeWindow，以及把日志写到临时目录
"""

import asyncio
import os
import sys
from datetime import datetime
from typing import Iterable, List, Optional

import pytest

# 添加 src 到路径
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from wallboard.core.exceptions import WindowClosedError, WindowError
from wallboard.core.log_util import LogFactory
from wallboard.core.window import DisplayWindow, TabInfo


@pytest.fixture(autouse=True, scope="session")
def _log_dir(tmp_path_factory):
    LogFactory.set_log_dir(str(tmp_path_factory.mktemp("logs")))


class FakeWindow(DisplayWindow):
    """模拟展示窗口：按列表顺序保存标签页，记录每一次调用"""

    def __init__(self, urls: Iterable[str] = ("chrome://newtab/",), window_id: str = "fake-window"):
        self._window_id = window_id
        self._counter = 0
        self.tabs: List[List[str]] = []  # [[id, url], ...]
        self.active_id: Optional[str] = None
        self.calls = []
        self.reloads = []
        self.alive = True
        self.opened = False
        self.focus_window_count = 0

        self.fail_urls = set()
        self.fail_list = False
        self.fail_focus = False
        self.fail_reload = False
        self.fail_close = False
        self.list_gate: Optional[asyncio.Event] = None
        self.on_close = None

        for url in urls:
            self.add_tab(url)

    # --- 测试辅助 ---

    def add_tab(self, url: str, activate: bool = True) -> str:
        self._counter += 1
        tab_id = f"tab-{self._counter}"
        self.tabs.append([tab_id, url])
        if activate or self.active_id is None:
            self.active_id = tab_id
        return tab_id

    def remove_tab(self, tab_id: str):
        self.tabs = [t for t in self.tabs if t[0] != tab_id]
        if self.active_id == tab_id:
            self.active_id = self.tabs[-1][0] if self.tabs else None

    @property
    def tab_ids(self) -> List[str]:
        return [t[0] for t in self.tabs]

    @property
    def urls(self) -> List[str]:
        return [t[1] for t in self.tabs]

    # --- DisplayWindow ---

    @property
    def window_id(self):
        return self._window_id

    async def open(self):
        self.opened = True

    async def close(self):
        if self.on_close:
            self.on_close()
        self.alive = False
        self.tabs = []

    async def is_alive(self) -> bool:
        return self.alive

    async def focus_window(self):
        self.focus_window_count += 1

    async def get_open_tabs(self) -> List[TabInfo]:
        if self.list_gate is not None:
            await self.list_gate.wait()
        if not self.alive:
            raise WindowClosedError("window closed")
        if self.fail_list:
            raise WindowError("list failed")
        return [TabInfo(id=i, url=u, active=(i == self.active_id)) for i, u in self.tabs]

    async def new_tab(self, url: str) -> str:
        await asyncio.sleep(0)
        if url in self.fail_urls:
            raise WindowError(f"cannot open {url}")
        self.calls.append(("new", url))
        return self.add_tab(url)

    async def close_tabs(self, tab_ids):
        await asyncio.sleep(0)
        tab_ids = list(tab_ids)
        if self.fail_close:
            raise WindowError("close failed")
        self.calls.append(("close", tuple(tab_ids)))
        for tab_id in tab_ids:
            self.remove_tab(tab_id)

    async def focus_tab(self, tab_id: str):
        if self.fail_focus or tab_id not in self.tab_ids:
            raise WindowError("focus failed", tab_id=tab_id)
        self.calls.append(("focus", tab_id))
        self.active_id = tab_id

    async def reload_tab(self, tab_id: str):
        if self.fail_reload:
            raise WindowError("reload failed", tab_id=tab_id)
        self.reloads.append(tab_id)


@pytest.fixture
def window():
    return FakeWindow()


@pytest.fixture
def monday_noon():
    # 2024-01-01 是周一
    return datetime(2024, 1, 1, 12, 0, 0)
