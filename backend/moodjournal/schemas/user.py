from pydantic import BaseModel, Field
from datetime import datetime


class UserResponse(BaseModel):
    """用户响应模型（不包含 PIN hash）"""
    id: str
    username: str
    created_at: datetime | None = None

    class Config:
        from_attributes = True


class UserLogin(BaseModel):
    """登录/注册请求体"""
    username: str = Field("", max_length=100)
    pin: str = Field("", max_length=128)
