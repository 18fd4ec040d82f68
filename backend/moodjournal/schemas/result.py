from __future__ import annotations

from typing import Any, Generic, TypeVar

from pydantic import BaseModel

from ..utils.errors import ErrorKind

T = TypeVar("T")


class ServiceResult(BaseModel, Generic[T]):
    """统一的操作结果：成功携带 data，失败携带可读的 error + error_kind。

    说明：
    - 所有核心操作都返回它，可预期的失败（不存在/校验/冲突）不会以异常形式抛出；
    - 意外异常在操作边界被转换为 error_kind=fatal。
    """

    success: bool
    data: T | None = None
    error: str | None = None
    error_kind: ErrorKind | None = None

    @classmethod
    def ok(cls, data: Any = None) -> "ServiceResult[Any]":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, message: str, kind: ErrorKind = ErrorKind.VALIDATION) -> "ServiceResult[Any]":
        return cls(success=False, error=message, error_kind=kind)
