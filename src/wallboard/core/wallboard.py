"""
Wallboard - 固定周期驱动器

负责：
- start(): 先让插件做一次初始化（TabOpener 立即打开当前可用的条目），再启动周期循环
- 每个周期把每个插件的 tick 作为独立的任务派发出去：
  某个插件卡在窗口调用上，不会挡住其他插件的下一次触发；
  同一插件上一次 tick 没结束时，本次直接跳过
- stop(): 先停掉周期循环和正在跑的 tick，再通知插件；之后调用方才可以销毁窗口
"""

import asyncio
from datetime import datetime
from typing import Callable, List, Optional, Sequence, Set

from .entry import ConfigEntry, DEFAULT_REFRESH_AFTER, DEFAULT_ROTATE_AFTER
from .log_config import LogConfig
from .log_util import AutoLoggerMixin
from .registry import TabRegistry
from .window import DisplayWindow
from ..plugins import Refresher, Revolver, TabOpener, WallboardPlugin
from ..plugins.tab_opener import DEFAULT_PLACEHOLDER_PREFIXES, DEFAULT_PLACEHOLDER_URL

Clock = Callable[[], datetime]


class Wallboard(AutoLoggerMixin):

    def __init__(
        self,
        window: DisplayWindow,
        plugins: Sequence[WallboardPlugin],
        registry: Optional[TabRegistry] = None,
        tick_interval: float = 1.0,
        clock: Clock = datetime.now,
    ):
        """
        Args:
            window: 展示窗口
            plugins: 按顺序派发的插件
            registry: 插件共享的注册表（只用于状态查询）
            tick_interval: 周期（秒），默认 1 秒
            clock: 当前时间来源
        """
        self.window = window
        self.plugins = list(plugins)
        self.registry = registry
        self.tick_interval = tick_interval
        self.clock = clock

        self._running = False
        self._ticker_task: Optional[asyncio.Task] = None
        self._inflight: Set[asyncio.Task] = set()
        self.tick_count = 0

    @property
    def running(self) -> bool:
        return self._running

    async def start(self):
        """初始化插件并启动周期循环"""
        if self._running:
            self.logger.warning("Wallboard is already running")
            return

        self._running = True
        now = self.clock()
        for plugin in self.plugins:
            try:
                await plugin.start(now)
            except Exception as e:
                self.logger.error(f"{plugin.__class__.__name__} failed to start: {e}", exc_info=True)

        self._ticker_task = asyncio.create_task(self._tick_loop())
        self.echo(f"✓ Wallboard started (interval: {self.tick_interval}s, plugins: "
                  f"{[p.__class__.__name__ for p in self.plugins]})")

    async def stop(self):
        """停止周期循环，取消正在进行的 tick，再停止插件"""
        if not self._running:
            return

        self._running = False

        if self._ticker_task:
            self._ticker_task.cancel()
            try:
                await self._ticker_task
            except asyncio.CancelledError:
                pass
            self._ticker_task = None

        pending = list(self._inflight)
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
        self._inflight.clear()

        for plugin in self.plugins:
            try:
                await plugin.stop()
            except Exception as e:
                self.logger.error(f"{plugin.__class__.__name__} failed to stop: {e}", exc_info=True)

        self.echo("✓ Wallboard stopped")

    def dispatch(self, now: Optional[datetime] = None) -> List[asyncio.Task]:
        """
        把每个插件的一次 tick 派发成独立任务（不等待完成）。
        上一次 tick 还没结束的插件本轮跳过。
        """
        now = now or self.clock()
        self.tick_count += 1
        tasks = []
        for plugin in self.plugins:
            if plugin.busy:
                plugin.skipped_ticks += 1
                self.logger.debug(f"{plugin.__class__.__name__} still busy, skipped")
                continue
            task = asyncio.create_task(plugin.run_tick(now))
            self._inflight.add(task)
            task.add_done_callback(self._inflight.discard)
            tasks.append(task)
        return tasks

    async def tick(self, now: Optional[datetime] = None):
        """执行一轮 tick 并等待本轮所有插件完成"""
        tasks = self.dispatch(now)
        if tasks:
            await asyncio.gather(*tasks)

    async def _tick_loop(self):
        """周期主循环"""
        self.logger.info(f"Starting tick loop (interval: {self.tick_interval}s)")

        while self._running:
            try:
                self.dispatch()
            except Exception as e:
                self.logger.error(f"Tick dispatch failed: {e}", exc_info=True)

            try:
                await asyncio.sleep(self.tick_interval)
            except asyncio.CancelledError:
                self.logger.info("Tick loop cancelled during sleep")
                break

        self.logger.info("Tick loop stopped")


def build_wallboard(
    window: DisplayWindow,
    entries: Sequence[ConfigEntry],
    tick_interval: float = 1.0,
    default_rotate: float = DEFAULT_ROTATE_AFTER,
    default_refresh: float = DEFAULT_REFRESH_AFTER,
    placeholder_url: str = DEFAULT_PLACEHOLDER_URL,
    placeholder_prefixes=DEFAULT_PLACEHOLDER_PREFIXES,
    log_config: Optional[LogConfig] = None,
    clock: Clock = datetime.now,
) -> Wallboard:
    """
    组装一个 Wallboard：一个注册表 + 三个插件。

    TabOpener 拿到可写注册表，Revolver / Refresher 只拿到只读视图。
    """
    registry = TabRegistry()
    revolver = Revolver(window, registry.view(), default_rotate=default_rotate,
                        start_time=clock(), log_config=log_config)
    refresher = Refresher(window, registry.view(), default_refresh=default_refresh,
                          log_config=log_config)
    opener = TabOpener(window, registry, entries, placeholder_url=placeholder_url,
                       placeholder_prefixes=placeholder_prefixes, log_config=log_config)
    return Wallboard(window, [revolver, opener, refresher], registry=registry,
                     tick_interval=tick_interval, clock=clock)
