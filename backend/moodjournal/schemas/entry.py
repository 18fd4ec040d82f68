from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, Field

from ..moods import Mood, MoodCategory, category_of
from .tag import TagResponse


class EntryInput(BaseModel):
    """写入（upsert）某一天日记的请求体。

    说明：
    - entry_date 是日历日期，同一用户同一天只会有一条日记；
    - tag_ids 为“期望的标签集合”：每项先按标签 id 匹配，找不到再按标签名匹配。
    """

    entry_date: date
    title: str = Field("", max_length=255)
    body: str = ""
    is_markdown: bool = True
    primary_mood: Mood
    secondary_moods: list[Mood] = Field(default_factory=list)
    category_id: str | None = None
    tag_ids: list[str] = Field(default_factory=list)


class EntryResponse(BaseModel):
    """日记响应模型（word_count 由正文现算）"""

    id: str
    user_id: str
    entry_date: date
    title: str
    body: str
    is_markdown: bool
    primary_mood: Mood
    primary_mood_category: MoodCategory
    secondary_moods: list[Mood] = Field(default_factory=list)
    category_id: str | None = None
    category_name: str | None = None
    tags: list[TagResponse] = Field(default_factory=list)
    word_count: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_entry(cls, entry) -> "EntryResponse":
        category = getattr(entry, "category", None)
        return cls(
            id=entry.id,
            user_id=entry.user_id,
            entry_date=entry.entry_date,
            title=entry.title or "",
            body=entry.body or "",
            is_markdown=bool(entry.is_markdown),
            primary_mood=entry.primary_mood,
            primary_mood_category=category_of(entry.primary_mood),
            secondary_moods=entry.secondary_moods,
            category_id=entry.category_id,
            category_name=category.name if category is not None else None,
            tags=[TagResponse.model_validate(t) for t in entry.tags],
            word_count=entry.word_count,
            created_at=entry.created_at,
            updated_at=entry.updated_at,
        )
