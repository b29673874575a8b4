"""
时间表判定 (Schedule Evaluator)

纯函数，无状态，无缓存：每次调用都基于传入的 now 重新计算，
这样条目的可用性能精确跟随墙钟时间变化。
"""

from datetime import datetime

from .entry import ConfigEntry


def is_applicable(entry: ConfigEntry, now: datetime) -> bool:
    """条目在 now 时刻是否应该被打开"""
    return applicable_for_day(entry, now) and applicable_for_time(entry, now)


def applicable_for_day(entry: ConfigEntry, now: datetime) -> bool:
    schedule = entry.schedule
    if schedule is None or schedule.days is None:
        return True
    return now.weekday() in schedule.days


def applicable_for_time(entry: ConfigEntry, now: datetime) -> bool:
    """
    时间段判定，两端都包含。

    open/close 时刻由 now 的日期替换时、分得到（秒保持 now 的值），
    因此 close = 14:43 时整个 14:43 这一分钟都算在内。

    close 早于 open 的跨午夜时间段不做特殊处理：这样的条目在任何时刻都不可用。
    """
    schedule = entry.schedule
    if schedule is None or schedule.open is None or schedule.close is None:
        return True

    open_instant = now.replace(hour=schedule.open.hour, minute=schedule.open.minute)
    if now < open_instant:
        return False

    close_instant = now.replace(hour=schedule.close.hour, minute=schedule.close.minute)
    if now > close_instant:
        return False

    return True
