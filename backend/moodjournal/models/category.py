import uuid

from sqlalchemy import Column, String

from ..database import Base


class Category(Base):
    """分类表 - 每条日记最多引用一个分类"""
    __tablename__ = "categories"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(200), nullable=False, index=True)
