import uuid

from sqlalchemy import Boolean, Column, Date, DateTime, Enum, ForeignKey, String, Text
from sqlalchemy.orm import relationship

from ..database import Base
from ..moods import Mood
from ..utils.dates import utc_now


def _mood_column_type() -> Enum:
    # 存枚举值（"happy"）而不是枚举名（"HAPPY"），便于直接查看数据库
    return Enum(
        Mood,
        name="mood",
        native_enum=False,
        length=20,
        values_callable=lambda enum_cls: [m.value for m in enum_cls],
    )


def count_words(text: str | None) -> int:
    """按空白切分后的非空 token 数；空串 / 纯空白为 0。"""
    if not text:
        return 0
    return len(str(text).split())


class Entry(Base):
    """日记表 - 每个用户每个日历日期最多一条（由 upsert 写路径保证）"""
    __tablename__ = "entries"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    entry_date = Column(Date, nullable=False, index=True)
    title = Column(String(255), nullable=False, default="")
    body = Column(Text, nullable=False, default="")
    is_markdown = Column(Boolean, nullable=False, default=True)
    primary_mood = Column(_mood_column_type(), nullable=False, index=True)
    category_id = Column(String(36), ForeignKey("categories.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)

    category = relationship("Category", lazy="selectin")
    tag_links = relationship(
        "EntryTag",
        back_populates="entry",
        cascade="all, delete-orphan",
        lazy="selectin",
    )
    secondary_mood_rows = relationship(
        "EntrySecondaryMood",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    @property
    def word_count(self) -> int:
        # 每次读取时现算，不落库
        return count_words(self.body)

    @property
    def secondary_moods(self) -> list[Mood]:
        moods = {Mood(row.mood) for row in self.secondary_mood_rows}
        return [m for m in Mood if m in moods]

    @property
    def tags(self) -> list:
        return sorted((link.tag for link in self.tag_links if link.tag is not None), key=lambda t: t.name)


class EntrySecondaryMood(Base):
    """日记的次要心情（无序集合，独立于标签存储）"""
    __tablename__ = "entry_secondary_moods"

    entry_id = Column(String(36), ForeignKey("entries.id", ondelete="CASCADE"), primary_key=True)
    mood = Column(_mood_column_type(), primary_key=True)
