from __future__ import annotations

import logging

from ..config import settings
from ..models import User
from ..schemas.user import UserResponse
from ..session import SessionContext
from ..utils.errors import ConflictError, NotFoundError, ValidationFailure
from ..utils.pin_hash import hash_pin, verify_pin
from .base import BaseService, service_operation

logger = logging.getLogger(__name__)


class UserService(BaseService):
    """本地用户：用户名 + PIN 登录"""

    def _validate(self, username: str, pin: str) -> str:
        clean = (username or "").strip()
        if not clean:
            raise ValidationFailure("Username is required.")
        if len(pin or "") < settings.pin_min_length:
            raise ValidationFailure(f"PIN must be at least {settings.pin_min_length} characters.")
        return clean

    @service_operation("USER")
    async def register(self, username: str, pin: str) -> UserResponse:
        clean = self._validate(username, pin)
        if await self.store.get_user_by_username(clean) is not None:
            raise ConflictError("Username already exists.")

        user = await self.store.add_user(
            User(username=clean, pin_hash=hash_pin(pin, iterations=settings.pin_hash_iterations))
        )
        await self.db.commit()
        logger.info("[USER] registered user=%s", user.id)
        return UserResponse.model_validate(user)

    @service_operation("USER")
    async def login(self, username: str, pin: str) -> UserResponse:
        clean = (username or "").strip()
        if not clean:
            raise ValidationFailure("Username is required.")

        user = await self.store.get_user_by_username(clean)
        if user is None:
            raise NotFoundError("User not found.")
        if not verify_pin(pin or "", user.pin_hash):
            logger.warning("[USER] invalid PIN user=%s", user.id)
            raise ValidationFailure("Invalid PIN.")
        return UserResponse.model_validate(user)

    @service_operation("USER")
    async def get_user(self, user_id: str) -> UserResponse:
        user = await self.store.get_user_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found.")
        return UserResponse.model_validate(user)

    @service_operation("USER")
    async def list_users(self) -> list[UserResponse]:
        return [UserResponse.model_validate(u) for u in await self.store.list_users()]

    @service_operation("USER")
    async def delete_user(self, session: SessionContext) -> bool:
        """删除当前用户及其全部日记。"""
        user = await self.store.get_user_by_id(session.user_id)
        if user is None:
            raise NotFoundError("User not found.")

        await self.store.delete_user(user.id)
        await self.db.commit()
        logger.info("[USER] deleted user=%s", session.user_id)
        return True
