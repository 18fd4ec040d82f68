from pydantic import BaseModel, Field


class CategoryResponse(BaseModel):
    """分类响应模型"""
    id: str
    name: str

    class Config:
        from_attributes = True


class CategoryInput(BaseModel):
    name: str = Field("", max_length=200)
