import uuid

from sqlalchemy import Column, DateTime, String

from ..database import Base
from ..utils.dates import utc_now


class User(Base):
    """用户表 - 本地日记的拥有者（PIN 登录）"""
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    username = Column(String(100), unique=True, nullable=False, index=True)
    pin_hash = Column(String(255))
    created_at = Column(DateTime(timezone=True), default=utc_now)
