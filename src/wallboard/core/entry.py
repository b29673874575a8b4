"""
配置条目 (Config Entry) 数据结构

一个条目描述一个"期望打开"的标签页：URL + 可见时间表 + 轮播/刷新策略。
条目在启动时由 loader 创建，之后不可变。

注意：条目按对象身份比较（eq=False），两个 URL 完全相同的条目也是不同的条目。
"""

from dataclasses import dataclass
from datetime import time
from typing import FrozenSet, Optional

SECOND = 1
MINUTE = 60 * SECOND
HOUR = 60 * MINUTE

DEFAULT_ROTATE_AFTER = 30 * SECOND
DEFAULT_REFRESH_AFTER = 6 * HOUR


@dataclass(frozen=True, eq=False)
class Schedule:
    """
    可见时间表。

    days 为 None 表示每天；open/close 任意一个为 None 表示不限制时间段。
    days 使用 Python 的 weekday 编号（周一 = 0 ... 周日 = 6）。
    """
    days: Optional[FrozenSet[int]] = None
    open: Optional[time] = None
    close: Optional[time] = None


@dataclass(frozen=True, eq=False)
class ConfigEntry:
    url: str
    rotate_after: Optional[float] = None   # 秒，None 表示使用默认值
    refresh_after: Optional[float] = None  # 秒，None 表示使用默认值
    schedule: Optional[Schedule] = None

    def __repr__(self):
        return f"ConfigEntry(url={self.url!r})"


def effective_value(entry: Optional[ConfigEntry], field: str, default):
    """
    读取条目字段的生效值。

    条目不存在（未知标签页）或字段未配置时返回 default。
    所有"字段或默认值"的回退逻辑都走这里。
    """
    if entry is None:
        return default
    value = getattr(entry, field)
    return default if value is None else value
