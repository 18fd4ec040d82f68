from __future__ import annotations

from datetime import date

from pydantic import BaseModel, Field

from ..moods import Mood, MoodCategory


class StreakResponse(BaseModel):
    """连续写作天数统计"""

    current_streak: int = 0
    longest_streak: int = 0
    total_entries: int = 0
    as_of: date | None = None


class CalendarDataResponse(BaseModel):
    """月历：当月有日记的日期 + 截至今天漏写的日期"""

    year: int
    month: int
    dates_with_entries: list[date] = Field(default_factory=list)
    missed_days: list[date] = Field(default_factory=list)


class MoodDistributionResponse(BaseModel):
    """心情分布。

    说明：
    - mood_counts 始终包含全部 15 种心情（无记录为 0）；
    - category_counts 是按分组（positive/neutral/negative）汇总后的结果；
    - most_frequent_mood：次数最多的心情，并列时按心情值字母序取第一个；无记录为 None。
    """

    mood_counts: dict[Mood, int] = Field(default_factory=dict)
    category_counts: dict[MoodCategory, int] = Field(default_factory=dict)
    most_frequent_mood: Mood | None = None
    total: int = 0


class TagUsageItem(BaseModel):
    name: str
    count: int


class TagUsageResponse(BaseModel):
    """标签使用次数 Top-N（次数倒序，并列按名称升序）。"""

    top_n: int = 10
    items: list[TagUsageItem] = Field(default_factory=list)

    @property
    def tag_counts(self) -> dict[str, int]:
        return {item.name: item.count for item in self.items}


class WordCountTrendResponse(BaseModel):
    """字数趋势：只包含有日记的日期（没写的日子不出现，而不是记 0）。"""

    daily_word_counts: dict[date, int] = Field(default_factory=dict)
    total_words: int = 0
    average_words_per_day: float = 0.0
