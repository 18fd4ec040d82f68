"""连续写作天数（streak）与漏写日期。

纯函数只依赖“有日记的日期集合”，方便单测；StreakService 负责取数并包成 ServiceResult。
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import MAXYEAR, MINYEAR, date, timedelta

from ..schemas.analytics import CalendarDataResponse, StreakResponse
from ..session import SessionContext
from ..utils.dates import iter_days, local_today, month_bounds
from ..utils.errors import ValidationFailure
from .base import BaseService, service_operation

_ONE_DAY = timedelta(days=1)


def current_streak(dates: Iterable[date], as_of: date) -> int:
    """截至 as_of 的连续天数。

    as_of 当天还没写时允许从前一天开始往回数（宽限一天）；前一天也没有则为 0。
    """
    days = set(dates)
    if as_of in days:
        cursor = as_of
    elif (as_of - _ONE_DAY) in days:
        cursor = as_of - _ONE_DAY
    else:
        return 0

    streak = 0
    while cursor in days:
        streak += 1
        cursor -= _ONE_DAY
    return streak


def longest_streak(dates: Iterable[date]) -> int:
    ordered = sorted(set(dates))
    if not ordered:
        return 0

    longest = run = 1
    for prev, cur in zip(ordered, ordered[1:]):
        if cur - prev == _ONE_DAY:
            run += 1
            longest = max(longest, run)
        else:
            run = 1
    return longest


def missed_days(dates: Iterable[date], start: date, end: date) -> list[date]:
    """[start, end] 内没有日记的日期（升序）；start > end 时为空。"""
    days = set(dates)
    return [d for d in iter_days(start, end) if d not in days]


class StreakService(BaseService):
    @service_operation("STREAK")
    async def get_streak_info(self, session: SessionContext, as_of: date | None = None) -> StreakResponse:
        day = as_of or local_today()
        dates = await self.store.list_entry_dates(session.user_id)
        total = await self.store.count_user_entries(session.user_id)
        return StreakResponse(
            current_streak=current_streak(dates, day),
            longest_streak=longest_streak(dates),
            total_entries=total,
            as_of=day,
        )

    @service_operation("STREAK")
    async def get_missed_days(self, session: SessionContext, date_from: date, date_to: date) -> list[date]:
        if date_to < date_from:
            raise ValidationFailure("date_to must not be earlier than date_from.")
        dates = await self.store.list_entry_dates(session.user_id)
        return missed_days(dates, date_from, date_to)

    @service_operation("CALENDAR")
    async def get_calendar_data(self, session: SessionContext, year: int, month: int) -> CalendarDataResponse:
        if not 1 <= month <= 12:
            raise ValidationFailure("Month must be between 1 and 12.")
        if not MINYEAR <= year <= MAXYEAR:
            raise ValidationFailure(f"Year must be between {MINYEAR} and {MAXYEAR}.")
        first, last = month_bounds(year, month)

        dates = await self.store.list_entry_dates(session.user_id, year=year, month=month)
        # 只统计到今天为止；未来月份没有漏写
        end = min(local_today(), last)
        return CalendarDataResponse(
            year=year,
            month=month,
            dates_with_entries=dates,
            missed_days=missed_days(dates, first, end),
        )

    @service_operation("CALENDAR")
    async def has_entry_for_date(self, session: SessionContext, day: date) -> bool:
        return await self.store.has_entry_for_date(session.user_id, day)
