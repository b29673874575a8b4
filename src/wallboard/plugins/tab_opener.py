"""
TabOpener - 按时间表打开/关闭标签页

负责让"打开的标签页集合"始终等于"当前可用的条目集合"：
- 缺少的条目 → 打开新标签页并登记到注册表
- 多余的标签页（没有条目，或条目当前不可用）→ 关闭并从注册表删除

先开后关：打开失败一半时，不会提前销毁还开着的旧标签页，窗口也不会出现零标签页的中间状态。

占位标签页 (placeholder)：浏览器自带的空白页（chrome://newtab 等），
或者为了防止窗口因为关掉最后一个标签页而消失而临时打开的空白页。
它们在每次读取时都被过滤掉，不参与 to_open / to_close 的计算，
真正的条目打开后再把它们关掉。
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Sequence, Tuple

from .base import WallboardPlugin
from ..core.entry import ConfigEntry
from ..core.exceptions import WindowError
from ..core.log_config import LogConfig
from ..core.registry import TabRegistry
from ..core.schedule import is_applicable
from ..core.window import DisplayWindow, TabInfo

DEFAULT_PLACEHOLDER_URL = "chrome://newtab/"
DEFAULT_PLACEHOLDER_PREFIXES = ("chrome://", "about:blank")


@dataclass
class ReconcilePlan:
    """一次 tick 计算出来的差异"""
    to_open: List[ConfigEntry] = field(default_factory=list)
    to_close: List[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.to_open and not self.to_close


class TabOpener(WallboardPlugin):

    def __init__(
        self,
        window: DisplayWindow,
        registry: TabRegistry,
        entries: Sequence[ConfigEntry],
        placeholder_url: str = DEFAULT_PLACEHOLDER_URL,
        placeholder_prefixes: Tuple[str, ...] = DEFAULT_PLACEHOLDER_PREFIXES,
        log_config: Optional[LogConfig] = None,
    ):
        super().__init__(window, log_config)
        self.registry = registry
        self.entries = list(entries)
        self.placeholder_url = placeholder_url
        self.placeholder_prefixes = tuple(placeholder_prefixes)
        self.last_plan: Optional[ReconcilePlan] = None

    def applicable_entries(self, now: datetime) -> List[ConfigEntry]:
        return [entry for entry in self.entries if is_applicable(entry, now)]

    def is_placeholder(self, tab: TabInfo) -> bool:
        # 已登记的标签页永远不是占位页（例如刚打开、URL 还是 about:blank 的条目）
        if tab.id in self.registry:
            return False
        return tab.url.startswith(self.placeholder_prefixes)

    async def start(self, now: datetime):
        """初始化：打开所有当前可用的条目"""
        async with self._tick_lock:
            entries = self.applicable_entries(now)
            self.echo(f"Opening {len(entries)} of {len(self.entries)} entries")
            try:
                tabs = await self.window.get_open_tabs()
            except WindowError as e:
                self.logger.warning(f"Could not list tabs before initial open: {e}")
                tabs = []
            await self.open_entries(entries, tabs)

    async def tick(self, now: datetime) -> Optional[ReconcilePlan]:
        applicable = self.applicable_entries(now)
        try:
            tabs = await self.window.get_open_tabs()
        except WindowError as e:
            self.logger.warning(f"Could not list tabs: {e}")
            return None

        stale = self.registry.prune(t.id for t in tabs)
        if stale:
            self.logger.info(f"Dropped registry entries for vanished tabs {stale}")

        plan = self.plan(applicable, [t for t in tabs if not self.is_placeholder(t)])
        self.last_plan = plan
        if plan.is_empty:
            return plan

        self._log(logging.DEBUG, f"to_open={plan.to_open} to_close={plan.to_close}")
        if plan.to_open:
            await self.open_entries(plan.to_open, tabs)
        if plan.to_close:
            await self.close_tabs(plan.to_close)
        return plan

    def plan(self, applicable: List[ConfigEntry], content_tabs: List[TabInfo]) -> ReconcilePlan:
        """
        计算差异（条目按身份比较）：
            to_close: 没有条目，或条目当前不可用的标签页
            to_open:  可用但没有任何标签页对应的条目
        """
        applicable_set = set(applicable)
        mapped = [(tab.id, self.registry.get(tab.id)) for tab in content_tabs]

        to_close = [tab_id for tab_id, entry in mapped if entry is None or entry not in applicable_set]
        open_entries = {entry for _, entry in mapped if entry is not None}
        to_open = [entry for entry in applicable if entry not in open_entries]
        return ReconcilePlan(to_open=to_open, to_close=to_close)

    async def open_entries(self, entries: List[ConfigEntry], tabs: List[TabInfo]) -> int:
        """
        逐个打开条目（保持配置顺序，也就是轮播顺序），然后关闭已有的占位页。

        Returns:
            成功打开的数量
        """
        if not entries:
            return 0

        placeholders = [t.id for t in tabs if self.is_placeholder(t)]
        opened = 0
        for entry in entries:
            if await self.open_entry(entry):
                opened += 1

        if opened:
            self.echo(f"Opened {opened} tab(s)")
        if opened and placeholders:
            try:
                await self.window.close_tabs(placeholders)
            except WindowError as e:
                self.logger.warning(f"Could not close placeholder tabs {placeholders}: {e}")
        return opened

    async def open_entry(self, entry: ConfigEntry) -> bool:
        try:
            tab_id = await self.window.new_tab(entry.url)
        except WindowError as e:
            self.logger.warning(f"Could not open {entry.url}: {e}")
            return False
        self.registry.register(tab_id, entry)
        return True

    async def open_placeholder(self) -> Optional[str]:
        try:
            return await self.window.new_tab(self.placeholder_url)
        except WindowError as e:
            self.logger.warning(f"Could not open placeholder tab: {e}")
            return None

    async def close_tabs(self, tab_ids: List[str]) -> bool:
        """
        关闭标签页并在同一步里从注册表删除。

        如果关闭之后窗口里一个标签页都不剩，先打开一个占位页，防止窗口被浏览器销毁。
        关闭失败时不动注册表，下一次 tick 会通过 prune 自愈。
        """
        closing = set(tab_ids)
        try:
            tabs = await self.window.get_open_tabs()
        except WindowError as e:
            self.logger.warning(f"Could not list tabs before closing: {e}")
            return False

        if not any(t.id not in closing for t in tabs):
            if await self.open_placeholder() is None:
                return False

        try:
            await self.window.close_tabs(tab_ids)
        except WindowError as e:
            self.logger.warning(f"Could not close tabs {tab_ids}: {e}")
            return False
        self.registry.unregister(tab_ids)
        self.echo(f"Closed {len(tab_ids)} tab(s)")
        return True
