from pydantic import BaseModel, Field


class TagResponse(BaseModel):
    """标签响应模型"""
    id: str
    name: str
    is_prebuilt: bool = False

    class Config:
        from_attributes = True


class TagCreate(BaseModel):
    name: str = Field("", max_length=100)
    is_prebuilt: bool = False


class TagSyncEffect(BaseModel):
    """一次标签同步的实际变更（tag id 列表，按 id 排序）。

    两个列表都为空表示“已是目标状态，无需变更”。
    """

    added: list[str] = Field(default_factory=list)
    removed: list[str] = Field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.added or self.removed)
