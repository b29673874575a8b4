import os
import logging
from logging.handlers import RotatingFileHandler
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .log_config import LogConfig


# 1. 定义过滤器：决定什么能上控制台
class ConsoleDisplayFilter(logging.Filter):
    def filter(self, record):
        # 规则 A: 错误(ERROR/CRITICAL) 必须显示
        if record.levelno >= logging.ERROR:
            return True

        # 规则 B: 如果日志携带了 'echo' 标记且为 True，则显示
        if getattr(record, 'echo', False):
            return True

        # 其他（普通的 INFO/DEBUG，以及 tick 里的 WARNING）都不显示
        return False

# ==========================================
# 1. LogFactory: 负责干活（创建 Logger 和 Handler）
# ==========================================
class LogFactory:
    _log_dir = "./logs"
    _formatter = logging.Formatter(
        '%(asctime)s - %(levelname)s - %(message)s'
    )
    _default_level = logging.INFO  # 全局默认日志级别

    @classmethod
    def set_log_dir(cls, path: str):
        cls._log_dir = path
        os.makedirs(cls._log_dir, exist_ok=True)

    @classmethod
    def set_level(cls, level: int):
        """设置全局默认日志级别"""
        cls._default_level = level

    @classmethod
    def get_logger(cls, logger_name: str, filename: str, level: int = None) -> logging.Logger:
        if not os.path.exists(cls._log_dir):
            os.makedirs(cls._log_dir, exist_ok=True)

        logger = logging.getLogger(logger_name)
        target_level = level if level is not None else cls._default_level
        logger.setLevel(target_level)
        logger.propagate = False

        if logger.handlers:
            return logger

        # --- 1. 文件 Handler: 收录所有级别 ---
        file_path = os.path.join(cls._log_dir, filename)
        file_handler = RotatingFileHandler(
            file_path, maxBytes=10*1024*1024, backupCount=5, encoding='utf-8'
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(cls._formatter)
        logger.addHandler(file_handler)

        # --- 2. 控制台 Handler: 级别放到 INFO，由过滤器把关谁能显示 ---
        console_handler = logging.StreamHandler()
        console_handler.setLevel(logging.INFO)
        console_handler.addFilter(ConsoleDisplayFilter())
        console_handler.setFormatter(cls._formatter)
        logger.addHandler(console_handler)

        return logger


# ==========================================
# 2. AutoLoggerMixin: 每个组件一个日志文件（类名.log）
# ==========================================
class AutoLoggerMixin:
    """
    日志 Mixin。

    - self.logger: 懒加载，第一次访问时才创建 "类名.log"，
      所以 LogFactory.set_log_dir() 必须在组件第一次写日志之前调用
    - _custom_log_level: 覆盖全局默认级别（插件用 LogConfig.level 设置）
    - _log_config: 给 _log() 用的开关、级别门槛和前缀
    """

    _custom_log_level: Optional[int] = None
    _log_config: Optional['LogConfig'] = None

    @property
    def logger(self) -> logging.Logger:
        if not hasattr(self, '_internal_logger'):
            filename = f"{self.__class__.__name__}.log"
            self._internal_logger = LogFactory.get_logger(
                f"wallboard.{self.__class__.__name__}",
                filename,
                level=self._custom_log_level
            )
        return self._internal_logger

    def _get_log_prefix(self) -> str:
        """获取当前日志前缀（支持动态变量）"""
        if not self._log_config:
            return ""
        return self._log_config.format_prefix(**self._get_log_context())

    def _get_log_context(self) -> dict:
        """收集日志上下文变量（子类可覆盖）"""
        return {}

    def _log(self, level: int, msg: str, *args, **kwargs):
        """增强的日志方法

        支持：
        1. 检查是否启用（通过 _log_config.enabled）
        2. 检查级别（通过 _log_config.level）
        3. 自动添加前缀（通过 _log_config.prefix）
        """
        if self._log_config and not self._log_config.enabled:
            return

        if self._log_config and level < self._log_config.level:
            return

        prefix = self._get_log_prefix()
        prefixed_msg = f"{prefix} {msg}" if prefix else msg

        self.logger.log(level, prefixed_msg, *args, **kwargs)

    def echo(self, msg: str, *args, **kwargs):
        """
        专用方法：既写日志文件，也输出到控制台。
        用法: self.echo("Opened %d tab(s)", 3)
        """
        # 自动注入 extra={'echo': True}
        if 'extra' not in kwargs:
            kwargs['extra'] = {}
        kwargs['extra']['echo'] = True

        self.logger.info(msg, *args, **kwargs)
