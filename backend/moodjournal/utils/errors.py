from __future__ import annotations

import re
from enum import Enum


_CONTROL_RE = re.compile(r"[\r\n\t]+")


class ErrorKind(str, Enum):
    NOT_FOUND = "not_found"
    VALIDATION = "validation"
    CONFLICT = "conflict"
    FATAL = "fatal"


class ServiceError(Exception):
    """可预期的业务失败（不存在 / 校验失败 / 冲突），在操作边界转换为失败结果。"""

    kind = ErrorKind.VALIDATION

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(ServiceError):
    # 归属不匹配也按“不存在”处理，不单独暴露 forbidden
    kind = ErrorKind.NOT_FOUND


class ValidationFailure(ServiceError):
    kind = ErrorKind.VALIDATION


class ConflictError(ServiceError):
    kind = ErrorKind.CONFLICT


def _sanitize_text(text: str, *, max_len: int) -> str:
    """把异常文本压缩成更适合日志/落盘的短字符串（避免换行、控制字符、超长）。"""
    if max_len <= 0:
        return ""
    cleaned = _CONTROL_RE.sub(" ", text).strip()
    if len(cleaned) > max_len:
        return f"{cleaned[:max_len]}…"
    return cleaned


def exception_summary(exc: BaseException, *, max_len: int = 200) -> str:
    """生成对外更安全的异常摘要：默认仅保留异常类型 + 截断后的消息。"""
    name = type(exc).__name__
    msg = _sanitize_text(str(exc), max_len=max_len)
    return f"{name}: {msg}" if msg else name
