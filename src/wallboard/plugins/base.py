"""
Wallboard 插件基类

Wallboard 每个周期调用一次每个插件的 run_tick()。
run_tick() 负责两件事：
- 同一插件的 tick 不重入：上一次 tick 还在等待窗口响应时，本次触发直接跳过
- 异常隔离：tick 内的任何异常都只记录日志，不影响其他插件和下一次 tick
"""

import asyncio
import logging
from datetime import datetime
from typing import Optional

from ..core.log_config import LogConfig
from ..core.log_util import AutoLoggerMixin
from ..core.window import DisplayWindow


class WallboardPlugin(AutoLoggerMixin):

    def __init__(self, window: DisplayWindow, log_config: Optional[LogConfig] = None):
        self.window = window
        self._log_config = log_config
        if log_config is not None:
            self._custom_log_level = log_config.level
        self._tick_lock = asyncio.Lock()
        self.skipped_ticks = 0

    def _get_log_context(self) -> dict:
        return {"plugin": self.__class__.__name__}

    @property
    def busy(self) -> bool:
        return self._tick_lock.locked()

    async def start(self, now: datetime):
        pass

    async def stop(self):
        pass

    async def tick(self, now: datetime):
        raise NotImplementedError

    async def run_tick(self, now: datetime) -> bool:
        """
        执行一次 tick。

        Returns:
            bool: 本次是否真正执行了（False 表示因上一次 tick 未结束而跳过）
        """
        if self._tick_lock.locked():
            self.skipped_ticks += 1
            self._log(logging.DEBUG, "Previous tick still running, skipping")
            return False

        async with self._tick_lock:
            try:
                await self.tick(now)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                self.logger.error(f"{self.__class__.__name__} tick failed: {e}", exc_info=True)
        return True
