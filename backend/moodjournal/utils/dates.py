from __future__ import annotations

import calendar
from collections.abc import Iterator
from datetime import date, datetime, timedelta, timezone


def utc_now() -> datetime:
    """当前 UTC 时间（naive 表示 UTC）。

    SQLite 会丢失 tzinfo；统一存 naive UTC，避免读回后与写入值比较时出现差异。
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)


def local_today() -> date:
    # 日记日期是“本地日历日期”，不做时区换算
    return date.today()


def iter_days(start: date, end: date) -> Iterator[date]:
    """按天枚举 [start, end]（两端都包含）；start > end 时不产出任何日期。"""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def month_bounds(year: int, month: int) -> tuple[date, date]:
    """返回某月的第一天与最后一天；month 不在 1..12 时抛 ValueError。"""
    if not 1 <= int(month) <= 12:
        raise ValueError("month must be between 1 and 12")
    last_day = calendar.monthrange(int(year), int(month))[1]
    return date(int(year), int(month), 1), date(int(year), int(month), last_day)
