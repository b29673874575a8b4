"""
基于 DrissionPage 库的 DisplayWindow 实现类。

该实现使用 DrissionPage 的 ChromiumPage 来驱动一个 Chrome 窗口作为展示窗口。
DrissionPage 的调用都是阻塞的，统一放进线程池 (asyncio.to_thread) 执行。

标签页列表直接读取浏览器调试端口的 /json 接口（一次 HTTP 请求拿到全部 id + url）：
- /json 按"最近激活"排序，第一个 page 类型的目标就是当前可见的标签页
- 这个顺序会随用户切换而变化，所以对外的标签页顺序使用适配器记录的"首次出现顺序"，
  保证轮播总是按固定顺序前进
"""

import asyncio
import hashlib
import os
from typing import Dict, Iterable, List, Optional

import requests
from DrissionPage import ChromiumOptions, ChromiumPage

from .window_adapter import DisplayWindow, TabInfo
from ..exceptions import WindowClosedError, WindowError
from ..log_util import AutoLoggerMixin

PAGE_TARGET_TYPES = ("page", "webview")


class DrissionWindow(DisplayWindow, AutoLoggerMixin):
    """
    基于 DrissionPage 的展示窗口。

    支持指定 Chrome profile 路径启动浏览器，不同 profile 使用不同调试端口。
    """

    def __init__(self, profile_path: Optional[str] = None, port: Optional[int] = None,
                 headless: bool = False, request_timeout: float = 5.0):
        """
        初始化 DrissionPage 窗口。

        Args:
            profile_path: Chrome profile 的路径。如果提供，将以该路径为 profile 启动 Chrome。
            port: 调试端口。为 None 时根据 profile_path 生成。
            headless: 是否以无头模式启动浏览器
            request_timeout: 访问 /json 接口的超时时间（秒）
        """
        self.profile_path = profile_path
        self.headless = headless
        self.request_timeout = request_timeout
        if port is None and profile_path:
            port = self._hash_path_to_port(profile_path)
        self.port = port

        self.page: Optional[ChromiumPage] = None
        self._address: Optional[str] = None
        # tab_id -> 首次出现的序号
        self._first_seen: Dict[str, int] = {}
        self._seen_counter = 0

    def _hash_path_to_port(self, profile_path: str) -> int:
        """
        根据 profile_path 生成唯一端口号（9200-9500 范围）

        相同的 profile_path 总是生成相同的端口 → 浏览器复用
        不同的 profile_path 生成不同的端口 → 真正隔离
        """
        hash_val = int(hashlib.md5(profile_path.encode()).hexdigest(), 16)
        return 9200 + (hash_val % 300)

    @property
    def window_id(self) -> Optional[str]:
        return self._address

    # --- Lifecycle (生命周期管理) ---

    async def open(self):
        """启动浏览器进程"""
        os.environ["no_proxy"] = "localhost,127.0.0.1"

        co = ChromiumOptions()
        if self.profile_path:
            os.makedirs(self.profile_path, exist_ok=True)
            co.set_user_data_path(self.profile_path)
        if self.port:
            co.set_local_port(self.port)
        else:
            co.auto_port()
        if self.headless:
            co.headless()

        try:
            self.page = await asyncio.to_thread(ChromiumPage, addr_or_opts=co)
        except Exception as e:
            raise WindowError(f"Failed to start browser: {e}") from e

        self._address = self.page.address
        self.echo(f"Display window started at {self._address}")

    async def close(self):
        """关闭浏览器进程并清理资源"""
        if self.page:
            try:
                await asyncio.to_thread(self.page.quit)
            except Exception:
                # 窗口可能已经被用户关掉了
                self.logger.exception("Error closing browser")
            finally:
                self.page = None
                self._first_seen.clear()

    async def is_alive(self) -> bool:
        if not self.page:
            return False
        try:
            targets = await asyncio.to_thread(self._fetch_targets)
        except WindowClosedError:
            return False
        except WindowError as e:
            # 超时、5xx 之类只算一次失败的探测，浏览器进程还在
            self.logger.warning(f"Liveness check failed, assuming window is alive: {e}")
            return True
        return len(targets) > 0

    async def focus_window(self):
        page = self._require_page()
        try:
            await asyncio.to_thread(page.set.window.normal)
        except Exception as e:
            raise WindowError(f"Failed to focus window: {e}") from e

    # --- Tab Management (标签页管理) ---

    def _require_page(self) -> ChromiumPage:
        if not self.page:
            raise WindowClosedError("Browser not started. Call open() first.")
        return self.page

    def _fetch_targets(self) -> List[dict]:
        """读取 /json，返回 page 类型的目标（按最近激活排序）"""
        try:
            response = requests.get(f"http://{self._address}/json", timeout=self.request_timeout)
            response.raise_for_status()
            targets = response.json()
        except requests.ConnectionError as e:
            raise WindowClosedError(f"Browser at {self._address} is gone: {e}") from e
        except (requests.RequestException, ValueError) as e:
            raise WindowError(f"Failed to list tabs: {e}") from e
        if not isinstance(targets, list):
            raise WindowError(f"Unexpected /json payload: {type(targets).__name__}")
        return [t for t in targets if isinstance(t, dict) and t.get("type") in PAGE_TARGET_TYPES]

    def _order(self, tab_id: str) -> int:
        if tab_id not in self._first_seen:
            self._first_seen[tab_id] = self._seen_counter
            self._seen_counter += 1
        return self._first_seen[tab_id]

    async def get_open_tabs(self) -> List[TabInfo]:
        self._require_page()
        targets = await asyncio.to_thread(self._fetch_targets)
        if not targets:
            return []

        active_id = targets[0]["id"]
        alive = {t["id"] for t in targets}
        for tab_id in [t for t in self._first_seen if t not in alive]:
            del self._first_seen[tab_id]

        tabs = [
            TabInfo(id=t["id"], url=t.get("url", ""), active=(t["id"] == active_id))
            for t in targets
        ]
        tabs.sort(key=lambda t: self._order(t.id))
        return tabs

    async def new_tab(self, url: str) -> str:
        page = self._require_page()
        try:
            tab = await asyncio.to_thread(page.new_tab, url)
        except Exception as e:
            raise WindowError(f"Failed to open tab {url}: {e}") from e
        self._order(tab.tab_id)
        self.logger.info(f"Created new tab {tab.tab_id} with URL: {url}")
        return tab.tab_id

    async def close_tabs(self, tab_ids: Iterable[str]):
        tab_ids = list(tab_ids)
        if not tab_ids:
            return
        page = self._require_page()
        try:
            await asyncio.to_thread(page.close_tabs, tab_ids)
        except Exception as e:
            raise WindowError(f"Failed to close tabs {tab_ids}: {e}") from e
        for tab_id in tab_ids:
            self._first_seen.pop(tab_id, None)
        self.logger.info(f"Closed tabs {tab_ids}")

    async def focus_tab(self, tab_id: str):
        page = self._require_page()
        try:
            await asyncio.to_thread(page.activate_tab, tab_id)
        except Exception as e:
            raise WindowError(f"Failed to focus tab {tab_id}: {e}", tab_id=tab_id) from e

    async def reload_tab(self, tab_id: str):
        page = self._require_page()

        def _reload():
            page.get_tab(tab_id).refresh()

        try:
            await asyncio.to_thread(_reload)
        except Exception as e:
            raise WindowError(f"Failed to reload tab {tab_id}: {e}", tab_id=tab_id) from e
