"""
配置加载

从 YAML 文件读取静态配置（同目录下如果有 .env 会先加载）。
所有校验都在这里完成：配置有问题时启动直接失败 (ConfigError)，而不是在每次 tick 时才暴露。
"""

import logging
import os
import re
from dataclasses import dataclass, field
from datetime import time
from typing import Any, FrozenSet, List, Optional, Tuple

import yaml
from dotenv import load_dotenv

from .entry import (
    ConfigEntry,
    DEFAULT_REFRESH_AFTER,
    DEFAULT_ROTATE_AFTER,
    HOUR,
    MINUTE,
    SECOND,
    Schedule,
)
from .exceptions import ConfigError
from .log_config import LogConfig
from .log_util import AutoLoggerMixin, LogFactory
from ..plugins.tab_opener import DEFAULT_PLACEHOLDER_PREFIXES, DEFAULT_PLACEHOLDER_URL

WEEKDAYS = {
    "mon": 0, "monday": 0,
    "tue": 1, "tues": 1, "tuesday": 1,
    "wed": 2, "wednesday": 2,
    "thu": 3, "thur": 3, "thurs": 3, "thursday": 3,
    "fri": 4, "friday": 4,
    "sat": 5, "saturday": 5,
    "sun": 6, "sunday": 6,
}

DURATION_UNITS = {"s": SECOND, "m": MINUTE, "h": HOUR}
_DURATION_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*([smh]?)\s*$")
_TIME_RE = re.compile(r"^(\d{1,2}):(\d{2})$")


@dataclass
class WallboardConfig:
    entries: List[ConfigEntry]
    tick_interval: float = 1.0
    watch_interval: float = 2.0
    default_rotate: float = DEFAULT_ROTATE_AFTER
    default_refresh: float = DEFAULT_REFRESH_AFTER
    placeholder_url: str = DEFAULT_PLACEHOLDER_URL
    placeholder_prefixes: Tuple[str, ...] = DEFAULT_PLACEHOLDER_PREFIXES
    profile_path: Optional[str] = None
    port: Optional[int] = None
    headless: bool = False
    log_dir: str = "./logs"
    log_level: int = logging.INFO
    log_config: LogConfig = field(default_factory=LogConfig)


def parse_duration(value: Any, path: str) -> float:
    """解析时长：数字（秒）或带 s/m/h 后缀的字符串，必须为正数"""
    if isinstance(value, bool):
        raise ConfigError(f"invalid duration {value!r}", path)
    if isinstance(value, (int, float)):
        seconds = float(value)
    elif isinstance(value, str):
        match = _DURATION_RE.match(value)
        if not match:
            raise ConfigError(f"invalid duration {value!r}", path)
        seconds = float(match.group(1)) * DURATION_UNITS.get(match.group(2) or "s")
    else:
        raise ConfigError(f"invalid duration {value!r}", path)

    if seconds <= 0:
        raise ConfigError(f"duration must be positive, got {value!r}", path)
    return seconds


def parse_time_of_day(value: Any, path: str) -> time:
    """解析 HH:MM（24 小时制）"""
    match = _TIME_RE.match(str(value).strip()) if value is not None else None
    if not match:
        raise ConfigError(f"invalid time {value!r}, expected HH:MM", path)
    hour, minute = int(match.group(1)), int(match.group(2))
    if hour > 23 or minute > 59:
        raise ConfigError(f"invalid time {value!r}, expected HH:MM", path)
    return time(hour, minute)


def parse_days(value: Any, path: str) -> FrozenSet[int]:
    if not isinstance(value, (list, tuple)) or not value:
        raise ConfigError(f"days must be a non-empty list, got {value!r}", path)
    days = set()
    for day in value:
        key = str(day).strip().lower()
        if key not in WEEKDAYS:
            raise ConfigError(f"unknown weekday {day!r}", path)
        days.add(WEEKDAYS[key])
    return frozenset(days)


def parse_schedule(raw: Any, path: str) -> Optional[Schedule]:
    if raw is None:
        return None
    if not isinstance(raw, dict):
        raise ConfigError("schedule must be a mapping", path)

    days = parse_days(raw["days"], f"{path}.days") if raw.get("days") is not None else None
    open_at = parse_time_of_day(raw["open"], f"{path}.open") if raw.get("open") is not None else None
    close_at = parse_time_of_day(raw["close"], f"{path}.close") if raw.get("close") is not None else None
    return Schedule(days=days, open=open_at, close=close_at)


def parse_entry(raw: Any, path: str) -> ConfigEntry:
    if not isinstance(raw, dict):
        raise ConfigError("entry must be a mapping", path)
    url = raw.get("url")
    if not url or not isinstance(url, str):
        raise ConfigError("entry requires a 'url'", path)

    rotate_after = raw.get("rotate_after")
    refresh_after = raw.get("refresh_after")
    return ConfigEntry(
        url=url,
        rotate_after=parse_duration(rotate_after, f"{path}.rotate_after") if rotate_after is not None else None,
        refresh_after=parse_duration(refresh_after, f"{path}.refresh_after") if refresh_after is not None else None,
        schedule=parse_schedule(raw.get("schedule"), f"{path}.schedule"),
    )


def parse_section(raw: dict, key: str) -> dict:
    """取出一个可选的子配置段，必须是映射"""
    section = raw.get(key)
    if section is None:
        return {}
    if not isinstance(section, dict):
        raise ConfigError(f"'{key}' must be a mapping, got {section!r}", key)
    return section


def parse_prefixes(value: Any, path: str) -> Tuple[str, ...]:
    # 必须是列表，单个字符串不接受
    if not isinstance(value, (list, tuple)) or not value:
        raise ConfigError(f"expected a non-empty list of URL prefixes, got {value!r}", path)
    if not all(isinstance(p, str) and p for p in value):
        raise ConfigError(f"URL prefixes must be non-empty strings, got {value!r}", path)
    return tuple(value)


def parse_config(raw: Any) -> WallboardConfig:
    """把 YAML 解析出的字典转换为 WallboardConfig"""
    if not isinstance(raw, dict):
        raise ConfigError("configuration root must be a mapping")

    raw_entries = raw.get("entries")
    if not isinstance(raw_entries, list) or not raw_entries:
        raise ConfigError("'entries' must be a non-empty list")
    entries = [parse_entry(item, f"entries[{i}]") for i, item in enumerate(raw_entries)]

    defaults = parse_section(raw, "defaults")
    browser = parse_section(raw, "browser")
    logging_cfg = parse_section(raw, "logging")

    config = WallboardConfig(entries=entries)
    if raw.get("tick_interval") is not None:
        config.tick_interval = parse_duration(raw["tick_interval"], "tick_interval")
    if raw.get("watch_interval") is not None:
        config.watch_interval = parse_duration(raw["watch_interval"], "watch_interval")
    if defaults.get("rotate_after") is not None:
        config.default_rotate = parse_duration(defaults["rotate_after"], "defaults.rotate_after")
    if defaults.get("refresh_after") is not None:
        config.default_refresh = parse_duration(defaults["refresh_after"], "defaults.refresh_after")
    if raw.get("placeholder_url") is not None:
        if not isinstance(raw["placeholder_url"], str) or not raw["placeholder_url"]:
            raise ConfigError(f"invalid URL {raw['placeholder_url']!r}", "placeholder_url")
        config.placeholder_url = raw["placeholder_url"]
    if raw.get("placeholder_prefixes") is not None:
        config.placeholder_prefixes = parse_prefixes(raw["placeholder_prefixes"], "placeholder_prefixes")

    config.profile_path = os.getenv("WALLBOARD_PROFILE_PATH") or browser.get("profile_path")
    if config.profile_path:
        config.profile_path = os.path.expanduser(str(config.profile_path))
    if browser.get("port") is not None:
        try:
            config.port = int(browser["port"])
        except (TypeError, ValueError):
            raise ConfigError(f"invalid port {browser['port']!r}", "browser.port")
    config.headless = bool(browser.get("headless", False))

    config.log_dir = os.getenv("WALLBOARD_LOG_DIR") or str(logging_cfg.get("log_dir", config.log_dir))
    try:
        config.log_level = LogConfig.parse_level(logging_cfg.get("level", config.log_level))
    except ValueError as e:
        raise ConfigError(str(e), "logging.level") from e
    try:
        config.log_config = LogConfig.from_dict(logging_cfg.get("plugins"))
    except ValueError as e:
        raise ConfigError(str(e), "logging.plugins") from e
    return config


class ConfigLoader(AutoLoggerMixin):

    def __init__(self, config_path: str):
        self.config_path = config_path
        env_file = os.path.join(os.path.dirname(os.path.abspath(config_path)), ".env")
        if os.path.exists(env_file) and os.access(env_file, os.R_OK):
            load_dotenv(env_file)

    def load(self) -> WallboardConfig:
        if not os.path.exists(self.config_path):
            raise ConfigError("configuration file not found", self.config_path)

        with open(self.config_path, 'r', encoding='utf-8') as f:
            try:
                raw = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ConfigError(f"invalid YAML: {e}", self.config_path) from e

        return parse_config(raw)

    def configure_logging(self, config: WallboardConfig):
        """
        按配置设置日志目录和全局级别。
        logger 是懒加载的，所以在这之前本类不写任何日志，否则文件会落到默认目录。
        """
        LogFactory.set_log_dir(config.log_dir)
        LogFactory.set_level(config.log_level)
        self.logger.info(f">>> Loaded {len(config.entries)} entries from {self.config_path}")
