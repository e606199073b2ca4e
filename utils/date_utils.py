"""
Date and time utilities for the QOD service.
Provides the epoch-day arithmetic behind the quote of the day.
"""

from datetime import datetime, date, timezone
from typing import Optional, Union

# 纪元日的参考日期
EPOCH = date(1970, 1, 1)


def ensure_date(dt: Union[date, datetime, None]) -> Optional[date]:
    """确保日期为 date 类型"""
    if dt is None:
        return None
    return dt.date() if isinstance(dt, datetime) else dt


def parse_date(value: Union[str, date, datetime]) -> date:
    """解析 ISO-8601 日期 (YYYY-MM-DD)"""
    if isinstance(value, (date, datetime)):
        return ensure_date(value)
    return date.fromisoformat(value.strip())


def utc_now() -> datetime:
    """获取当前 UTC 时间"""
    return datetime.now(timezone.utc)


def local_today() -> date:
    """服务所在时区的今天"""
    return date.today()


def epoch_day(value: Union[date, datetime]) -> int:
    """Number of days between 1970-01-01 and ``value``; negative before the epoch."""
    return ensure_date(value).toordinal() - EPOCH.toordinal()


def day_offset(value: Union[date, datetime], count: int) -> int:
    """
    Map a calendar date onto a position in a collection of ``count`` items.

    The result always lies in ``[0, count)``. Python's ``%`` takes the sign of
    the divisor, so pre-epoch dates wrap the same way post-epoch dates do.
    """
    if count <= 0:
        raise ZeroDivisionError("cannot map a date onto an empty collection")
    return epoch_day(value) % count
