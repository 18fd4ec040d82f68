"""心情枚举与分组（Positive / Neutral / Negative）。

分组映射是统计口径的基础：必须覆盖全部心情且保持稳定。
"""

from __future__ import annotations

from enum import Enum


class MoodCategory(str, Enum):
    POSITIVE = "positive"
    NEUTRAL = "neutral"
    NEGATIVE = "negative"


class Mood(str, Enum):
    # Positive
    HAPPY = "happy"
    EXCITED = "excited"
    RELAXED = "relaxed"
    GRATEFUL = "grateful"
    CONFIDENT = "confident"
    # Neutral
    CALM = "calm"
    THOUGHTFUL = "thoughtful"
    CURIOUS = "curious"
    NOSTALGIC = "nostalgic"
    BORED = "bored"
    # Negative
    SAD = "sad"
    ANGRY = "angry"
    STRESSED = "stressed"
    LONELY = "lonely"
    ANXIOUS = "anxious"


_MOOD_CATEGORIES: dict[Mood, MoodCategory] = {
    Mood.HAPPY: MoodCategory.POSITIVE,
    Mood.EXCITED: MoodCategory.POSITIVE,
    Mood.RELAXED: MoodCategory.POSITIVE,
    Mood.GRATEFUL: MoodCategory.POSITIVE,
    Mood.CONFIDENT: MoodCategory.POSITIVE,
    Mood.CALM: MoodCategory.NEUTRAL,
    Mood.THOUGHTFUL: MoodCategory.NEUTRAL,
    Mood.CURIOUS: MoodCategory.NEUTRAL,
    Mood.NOSTALGIC: MoodCategory.NEUTRAL,
    Mood.BORED: MoodCategory.NEUTRAL,
    Mood.SAD: MoodCategory.NEGATIVE,
    Mood.ANGRY: MoodCategory.NEGATIVE,
    Mood.STRESSED: MoodCategory.NEGATIVE,
    Mood.LONELY: MoodCategory.NEGATIVE,
    Mood.ANXIOUS: MoodCategory.NEGATIVE,
}


def category_of(mood: Mood | str) -> MoodCategory:
    """返回心情所属分组；传入字符串时按枚举值解析（未知值抛 ValueError）。"""
    return _MOOD_CATEGORIES[Mood(mood)]


def moods_in(category: MoodCategory) -> list[Mood]:
    return [m for m in Mood if _MOOD_CATEGORIES[m] is category]
