"""
插件日志配置

配置文件里 logging.plugins 一段，对 Revolver / Refresher / TabOpener 同时生效：
- enabled: 关掉后插件的 _log 调用全部丢弃（echo 和错误日志不受影响）
- level:   插件 logger 的级别，同时也是 _log 的过滤门槛
- prefix:  每条 _log 消息的前缀模板，可用 {plugin}
"""
import logging
from dataclasses import dataclass
from typing import Optional, Union

_LEVEL_NAMES = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class LogConfig:
    enabled: bool = True
    level: int = logging.DEBUG
    prefix: str = ""

    @classmethod
    def from_dict(cls, config_dict: Optional[dict] = None) -> 'LogConfig':
        """从 logging.plugins 字典创建；格式不对时抛 ValueError"""
        if config_dict is None:
            return cls()
        if not isinstance(config_dict, dict):
            raise ValueError(f"expected a mapping, got {config_dict!r}")

        enabled = config_dict.get("enabled", True)
        if not isinstance(enabled, bool):
            raise ValueError(f"'enabled' must be true or false, got {enabled!r}")
        prefix = config_dict.get("prefix") or ""
        if not isinstance(prefix, str):
            raise ValueError(f"'prefix' must be a string, got {prefix!r}")

        return cls(
            enabled=enabled,
            level=cls.parse_level(config_dict.get("level", "DEBUG")),
            prefix=prefix,
        )

    @staticmethod
    def parse_level(level: Union[int, str]) -> int:
        """把 "debug" / "INFO" / 10 之类解析成 logging 级别，未知名称抛 ValueError"""
        if isinstance(level, int) and not isinstance(level, bool):
            return level
        name = str(level).strip().upper()
        if name not in _LEVEL_NAMES:
            raise ValueError(f"unknown log level {level!r}")
        return getattr(logging, name)

    def format_prefix(self, **kwargs) -> str:
        """
        >>> LogConfig(prefix="[{plugin}]").format_prefix(plugin="Revolver")
        '[Revolver]'
        """
        if not self.prefix:
            return ""
        return self.prefix.format(**kwargs)
