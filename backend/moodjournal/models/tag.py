import uuid

from sqlalchemy import Boolean, Column, ForeignKey, String
from sqlalchemy.orm import relationship

from ..database import Base

# 预置标签：首次启动时写入，不允许删除
PREBUILT_TAGS: tuple[str, ...] = (
    "Work", "Career", "Studies", "Family", "Friends", "Relationships",
    "Health", "Fitness", "Personal Growth", "Self-care", "Hobbies", "Travel", "Nature",
    "Finance", "Spirituality", "Birthday", "Holiday", "Vacation", "Celebration", "Exercise",
    "Reading", "Writing", "Cooking", "Meditation", "Yoga", "Music", "Shopping", "Parenting",
    "Projects", "Planning", "Reflection",
)


class Tag(Base):
    """标签表 - 名称唯一（存储层区分大小写）"""
    __tablename__ = "tags"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(100), unique=True, nullable=False, index=True)
    is_prebuilt = Column(Boolean, nullable=False, default=False)


class EntryTag(Base):
    """日记-标签关联表

    说明：
    - 不单独对外创建，只会在日记 upsert / 标签同步时增删；
    - (entry_id, tag_id) 作为联合主键，天然去重。
    """
    __tablename__ = "entry_tags"

    entry_id = Column(String(36), ForeignKey("entries.id", ondelete="CASCADE"), primary_key=True)
    tag_id = Column(String(36), ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True)

    entry = relationship("Entry", back_populates="tag_links")
    tag = relationship("Tag", lazy="selectin")
