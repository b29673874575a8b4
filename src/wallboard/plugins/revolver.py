"""
Revolver - 轮播插件

当前可见标签页停留的时间超过它对应条目的 rotate_after 后，切换到下一个标签页。

计时器是全局的（不是按标签页计）：last_rotate_time 只在轮播发生时重置。
用户手动切换标签页不会重置计时，但下一次 tick 会按新的可见标签页的间隔来判断。
"""

import logging
from datetime import datetime, timedelta
from typing import Optional

from .base import WallboardPlugin
from ..core.entry import DEFAULT_ROTATE_AFTER, effective_value
from ..core.exceptions import WindowError
from ..core.log_config import LogConfig
from ..core.registry import RegistryView
from ..core.window import DisplayWindow


class Revolver(WallboardPlugin):

    def __init__(
        self,
        window: DisplayWindow,
        registry: RegistryView,
        default_rotate: float = DEFAULT_ROTATE_AFTER,
        start_time: Optional[datetime] = None,
        log_config: Optional[LogConfig] = None,
    ):
        super().__init__(window, log_config)
        self.registry = registry
        self.default_rotate = default_rotate
        self.last_rotate_time = start_time or datetime.now()

    async def tick(self, now: datetime):
        try:
            tabs = await self.window.get_open_tabs()
        except WindowError as e:
            self.logger.warning(f"Could not list tabs: {e}")
            return

        if not tabs:
            return

        active_index = next((i for i, t in enumerate(tabs) if t.active), None)
        if active_index is None:
            self._log(logging.DEBUG, "No active tab reported, skipping")
            return

        active = tabs[active_index]
        rotate_after = effective_value(self.registry.get(active.id), "rotate_after", self.default_rotate)
        if self.last_rotate_time + timedelta(seconds=rotate_after) > now:
            return

        self.last_rotate_time = now
        next_tab = tabs[(active_index + 1) % len(tabs)]
        self._log(logging.DEBUG, f"Rotating {active.id} -> {next_tab.id} after {rotate_after}s")
        try:
            await self.window.focus_tab(next_tab.id)
        except WindowError as e:
            self.logger.warning(f"Could not focus tab {next_tab.id}: {e}")
