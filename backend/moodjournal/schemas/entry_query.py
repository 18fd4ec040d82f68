from __future__ import annotations

import math
from datetime import date

from pydantic import BaseModel, Field, computed_field

from ..moods import Mood
from .entry import EntryResponse


class EntrySearchRequest(BaseModel):
    """日记搜索条件。

    说明：
    - 不同条件之间是 AND；同一条件内的多个值是 OR（moods / tag_ids）；
    - 空字符串 / 空列表 / None 都视为“不过滤”。
    """

    text: str | None = None
    date_from: date | None = None
    date_to: date | None = None
    moods: list[Mood] | None = None
    tag_ids: list[str] | None = None
    category_id: str | None = None
    page: int = 1
    page_size: int = 10


class EntrySearchResponse(BaseModel):
    """搜索结果：当前页 entries + 过滤后的总数（分页前）。"""

    entries: list[EntryResponse] = Field(default_factory=list)
    total_count: int = 0
    page: int = 1
    page_size: int = 10

    @computed_field
    @property
    def total_pages(self) -> int:
        if self.page_size <= 0:
            return 0
        return math.ceil(self.total_count / self.page_size)

    @computed_field
    @property
    def has_more(self) -> bool:
        return self.page < self.total_pages
