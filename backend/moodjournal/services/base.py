"""服务层公共部分：统一的操作边界（异常 -> ServiceResult）。"""

from __future__ import annotations

import functools
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from ..schemas.result import ServiceResult
from ..utils.errors import ErrorKind, ServiceError, exception_summary
from .entry_store import EntryStore

logger = logging.getLogger(__name__)


def service_operation(tag: str) -> Callable[[Callable[..., Awaitable[Any]]], Callable[..., Awaitable[ServiceResult]]]:
    """把一个 async 业务方法包装成“永远返回 ServiceResult”的操作。

    - 正常返回值 -> ServiceResult.ok(data)
    - ServiceError（不存在 / 校验 / 冲突）-> 对应 error_kind 的失败结果
    - 其他异常 -> 记录完整堆栈，回滚会话，返回 fatal（只暴露异常摘要）
    """

    def decorator(func: Callable[..., Awaitable[Any]]) -> Callable[..., Awaitable[ServiceResult]]:
        @functools.wraps(func)
        async def wrapper(self: "BaseService", *args: Any, **kwargs: Any) -> ServiceResult:
            try:
                data = await func(self, *args, **kwargs)
            except ServiceError as exc:
                await self._rollback()
                logger.info("[%s] %s rejected kind=%s: %s", tag, func.__name__, exc.kind.value, exc.message)
                return ServiceResult.fail(exc.message, exc.kind)
            except Exception as exc:
                logger.exception("[%s] %s failed", tag, func.__name__)
                await self._rollback()
                return ServiceResult.fail(exception_summary(exc), ErrorKind.FATAL)
            return ServiceResult.ok(data)

        return wrapper

    return decorator


class BaseService:
    """所有核心服务的基类：持有 AsyncSession 与 EntryStore。"""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.store = EntryStore(db)

    async def _rollback(self) -> None:
        try:
            await self.db.rollback()
        except Exception:
            logger.exception("[DB] rollback failed")
