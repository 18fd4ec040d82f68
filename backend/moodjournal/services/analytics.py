from __future__ import annotations

import logging
from datetime import date

from ..config import settings
from ..moods import Mood, MoodCategory, category_of
from ..models import count_words
from ..schemas.analytics import (
    MoodDistributionResponse,
    TagUsageItem,
    TagUsageResponse,
    WordCountTrendResponse,
)
from ..session import SessionContext
from ..utils.errors import ValidationFailure
from .base import BaseService, service_operation

logger = logging.getLogger(__name__)


def _check_range(date_from: date | None, date_to: date | None) -> None:
    if date_from is not None and date_to is not None and date_to < date_from:
        raise ValidationFailure("date_to must not be earlier than date_from.")


def build_mood_distribution(counts: dict[Mood, int]) -> MoodDistributionResponse:
    """补齐全部心情 / 分组的 0 值，并选出出现最多的心情（并列按心情值字母序）。"""
    mood_counts = {mood: int(counts.get(mood, 0)) for mood in Mood}
    category_counts = {category: 0 for category in MoodCategory}
    for mood, count in mood_counts.items():
        category_counts[category_of(mood)] += count

    most_frequent = None
    ranked = sorted(
        ((mood, count) for mood, count in mood_counts.items() if count > 0),
        key=lambda item: (-item[1], item[0].value),
    )
    if ranked:
        most_frequent = ranked[0][0]

    return MoodDistributionResponse(
        mood_counts=mood_counts,
        category_counts=category_counts,
        most_frequent_mood=most_frequent,
        total=sum(mood_counts.values()),
    )


class AnalyticsAggregator(BaseService):
    """统计：心情分布 / 标签使用 / 字数趋势（每次都是全量重新计算）"""

    @service_operation("ANALYTICS")
    async def mood_distribution(
        self,
        session: SessionContext,
        date_from: date | None = None,
        date_to: date | None = None,
    ) -> MoodDistributionResponse:
        _check_range(date_from, date_to)
        rows = await self.store.mood_counts(session.user_id, date_from, date_to)
        return build_mood_distribution(dict(rows))

    @service_operation("ANALYTICS")
    async def tag_usage(
        self,
        session: SessionContext,
        date_from: date | None = None,
        date_to: date | None = None,
        top_n: int | None = None,
    ) -> TagUsageResponse:
        _check_range(date_from, date_to)
        n = settings.tag_usage_default_top_n if top_n is None else int(top_n)
        if n < 1:
            raise ValidationFailure("top_n must be at least 1.")

        rows = await self.store.tag_usage_counts(session.user_id, date_from, date_to, top_n=n)
        return TagUsageResponse(
            top_n=n,
            items=[TagUsageItem(name=name, count=count) for name, count in rows],
        )

    @service_operation("ANALYTICS")
    async def word_count_trend(
        self,
        session: SessionContext,
        date_from: date,
        date_to: date,
    ) -> WordCountTrendResponse:
        _check_range(date_from, date_to)
        rows = await self.store.list_entry_bodies(session.user_id, date_from, date_to)

        daily: dict[date, int] = {}
        for day, body in rows:
            daily[day] = daily.get(day, 0) + count_words(body)

        total = sum(daily.values())
        days_with_entries = len(daily)
        average = total / max(days_with_entries, 1)
        logger.debug(
            "[ANALYTICS] word trend user=%s days=%s total=%s", session.user_id, days_with_entries, total
        )
        return WordCountTrendResponse(
            daily_word_counts=daily,
            total_words=total,
            average_words_per_day=average,
        )
