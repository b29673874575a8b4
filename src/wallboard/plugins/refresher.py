"""
Refresher - 定时刷新插件

每个打开的标签页独立计时，超过对应条目的 refresh_after 后强制重新加载。
第一次看到某个标签页时只记录基准时间，不会立即刷新。
"""

import logging
from datetime import datetime, timedelta
from typing import Dict, Iterable, Optional

from .base import WallboardPlugin
from ..core.entry import DEFAULT_REFRESH_AFTER, effective_value
from ..core.exceptions import WindowError
from ..core.log_config import LogConfig
from ..core.registry import RegistryView
from ..core.window import DisplayWindow, TabInfo


class Refresher(WallboardPlugin):

    def __init__(
        self,
        window: DisplayWindow,
        registry: RegistryView,
        default_refresh: float = DEFAULT_REFRESH_AFTER,
        log_config: Optional[LogConfig] = None,
    ):
        super().__init__(window, log_config)
        self.registry = registry
        self.default_refresh = default_refresh
        self.tabs_last_refreshed: Dict[str, datetime] = {}

    async def tick(self, now: datetime):
        try:
            tabs = await self.window.get_open_tabs()
        except WindowError as e:
            self.logger.warning(f"Could not list tabs: {e}")
            return

        self.cleanup_timers(t.id for t in tabs)
        for tab in tabs:
            await self.maybe_refresh_tab(tab, now)

    def cleanup_timers(self, tab_ids: Iterable[str]):
        """删除已经不存在的标签页的计时状态"""
        alive = set(tab_ids)
        for tab_id in [t for t in self.tabs_last_refreshed if t not in alive]:
            del self.tabs_last_refreshed[tab_id]

    async def maybe_refresh_tab(self, tab: TabInfo, now: datetime):
        last_refreshed = self.tabs_last_refreshed.get(tab.id)
        if last_refreshed is None:
            self.tabs_last_refreshed[tab.id] = now
            return

        refresh_after = effective_value(self.registry.get(tab.id), "refresh_after", self.default_refresh)
        if last_refreshed + timedelta(seconds=refresh_after) > now:
            return

        self.tabs_last_refreshed[tab.id] = now
        self._log(logging.DEBUG, f"Reloading tab {tab.id} ({tab.url}) after {refresh_after}s")
        try:
            await self.window.reload_tab(tab.id)
        except WindowError as e:
            self.logger.warning(f"Could not reload tab {tab.id}: {e}")
