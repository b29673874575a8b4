"""
全局协调层

同一时间最多只有一个 Wallboard：
- activate(): 已有 Wallboard 就把窗口带到前台，否则创建窗口并启动 Wallboard
- on_window_removed(): 窗口被关掉时停止对应的 Wallboard
- watch(): 轮询窗口是否还活着，窗口消失时触发 on_window_removed
- shutdown(): 先停驱动器，再销毁窗口
"""

import asyncio
from datetime import datetime
from typing import Callable, Optional

from .exceptions import WindowError
from .loader import WallboardConfig
from .log_util import AutoLoggerMixin
from .wallboard import Clock, Wallboard, build_wallboard
from .window import DisplayWindow

WindowFactory = Callable[[], DisplayWindow]


class WallboardCoordinator(AutoLoggerMixin):

    def __init__(self, config: WallboardConfig, window_factory: WindowFactory, clock: Clock = datetime.now):
        self.config = config
        self.window_factory = window_factory
        self.clock = clock

        self.active: Optional[Wallboard] = None
        self.window_closed = asyncio.Event()
        self._activate_lock = asyncio.Lock()

    async def activate(self) -> Wallboard:
        """用户触发：没有 Wallboard 就新建，有就聚焦"""
        async with self._activate_lock:
            if self.active:
                try:
                    await self.active.window.focus_window()
                except WindowError as e:
                    self.logger.warning(f"Could not focus window: {e}")
                return self.active

            window = self.window_factory()
            await window.open()
            wallboard = build_wallboard(
                window,
                self.config.entries,
                tick_interval=self.config.tick_interval,
                default_rotate=self.config.default_rotate,
                default_refresh=self.config.default_refresh,
                placeholder_url=self.config.placeholder_url,
                placeholder_prefixes=self.config.placeholder_prefixes,
                log_config=self.config.log_config,
                clock=self.clock,
            )
            self.active = wallboard
            self.window_closed.clear()
            await wallboard.start()
            self.echo(f">>> Wallboard active on window {window.window_id}")
            return wallboard

    async def on_window_removed(self, window_id: Optional[str]):
        if self.active and self.active.window.window_id == window_id:
            self.echo(f">>> Window {window_id} removed, stopping wallboard")
            wallboard = self.active
            await wallboard.stop()
            # 窗口看起来没了，但浏览器进程可能还在，统一释放
            await wallboard.window.close()
            self.active = None
            self.window_closed.set()

    async def watch(self, interval: Optional[float] = None):
        """轮询当前窗口是否还存在，直到被取消"""
        interval = interval or self.config.watch_interval
        while True:
            await asyncio.sleep(interval)
            wallboard = self.active
            if wallboard and not await wallboard.window.is_alive():
                await self.on_window_removed(wallboard.window.window_id)

    async def shutdown(self):
        """停止 Wallboard（驱动器先停），然后关闭窗口"""
        wallboard = self.active
        if not wallboard:
            return
        await wallboard.stop()
        await wallboard.window.close()
        self.active = None
        self.window_closed.set()
        self.echo(">>> Wallboard shut down")
