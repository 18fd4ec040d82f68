"""日记写入（按日 upsert）/ 读取 / 删除，以及标签、分类管理。"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import date

from ..models import PREBUILT_TAGS, Category, Entry, Tag
from ..schemas.category import CategoryResponse
from ..schemas.entry import EntryInput, EntryResponse
from ..schemas.tag import TagResponse
from ..session import SessionContext
from ..utils.errors import ConflictError, NotFoundError, ValidationFailure
from .base import BaseService, service_operation
from .tag_reconciler import TagReconciler

# 同一进程内，同一用户同一天的 upsert 串行执行（跨进程仍是后写覆盖）
# 锁按引用计数回收：没人持有也没人等待时从表里删除
_ENTRY_DATE_LOCKS: dict[tuple[str, date], asyncio.Lock] = {}
_ENTRY_DATE_LOCK_USERS: dict[tuple[str, date], int] = {}
logger = logging.getLogger(__name__)


@asynccontextmanager
async def _entry_date_lock(user_id: str, day: date) -> AsyncIterator[None]:
    key = (user_id, day)
    lock = _ENTRY_DATE_LOCKS.get(key)
    if lock is None:
        lock = asyncio.Lock()
        _ENTRY_DATE_LOCKS[key] = lock
    _ENTRY_DATE_LOCK_USERS[key] = _ENTRY_DATE_LOCK_USERS.get(key, 0) + 1
    try:
        async with lock:
            yield
    finally:
        remaining = _ENTRY_DATE_LOCK_USERS[key] - 1
        if remaining:
            _ENTRY_DATE_LOCK_USERS[key] = remaining
        else:
            del _ENTRY_DATE_LOCK_USERS[key]
            del _ENTRY_DATE_LOCKS[key]


def _clean_name(value: str | None) -> str:
    return (value or "").strip()


class JournalService(BaseService):
    """日记与标签 / 分类相关的操作"""

    def __init__(self, db):
        super().__init__(db)
        self.tags = TagReconciler(self.store)

    async def _owned_entry(self, session: SessionContext, entry_id: str) -> Entry:
        entry = await self.store.get_entry_by_id(entry_id)
        # 别人的日记也按“不存在”处理
        if entry is None or entry.user_id != session.user_id:
            raise NotFoundError("Entry not found.")
        return entry

    # ---- Entry ----

    @service_operation("ENTRY")
    async def upsert_entry(self, session: SessionContext, data: EntryInput) -> EntryResponse:
        """写入某一天的日记：当天已有则更新，否则新建（唯一写路径）。"""
        async with _entry_date_lock(session.user_id, data.entry_date):
            # 会话 cookie 可能比用户活得久（用户已删除）
            if await self.store.get_user_by_id(session.user_id) is None:
                raise NotFoundError("User not found.")

            category = None
            if data.category_id:
                category = await self.store.get_category_by_id(data.category_id)
                if category is None:
                    raise NotFoundError("Category not found.")

            # 先解析标签：任一标签不存在则整体失败，不改动任何数据
            desired_tags = await self.tags.resolve(data.tag_ids)

            entry = await self.store.get_entry_by_date(session.user_id, data.entry_date)
            created = entry is None
            if created:
                entry = Entry(
                    user_id=session.user_id,
                    entry_date=data.entry_date,
                    tag_links=[],
                    secondary_mood_rows=[],
                )

            entry.title = data.title or ""
            entry.body = data.body or ""
            entry.is_markdown = bool(data.is_markdown)
            entry.primary_mood = data.primary_mood
            entry.category = category
            self.store.set_secondary_moods(entry, data.secondary_moods)
            effect = self.tags.apply(entry, desired_tags)

            if created:
                await self.store.add_entry(entry)
            else:
                await self.store.update_entry(entry)
            await self.db.commit()

            logger.info(
                "[ENTRY] %s user=%s date=%s entry=%s tags_added=%s tags_removed=%s",
                "created" if created else "updated",
                session.user_id,
                data.entry_date.isoformat(),
                entry.id,
                len(effect.added),
                len(effect.removed),
            )
            return EntryResponse.from_entry(entry)

    @service_operation("ENTRY")
    async def get_entry(self, session: SessionContext, entry_id: str) -> EntryResponse:
        entry = await self._owned_entry(session, entry_id)
        return EntryResponse.from_entry(entry)

    @service_operation("ENTRY")
    async def get_entry_by_date(self, session: SessionContext, day: date) -> EntryResponse:
        entry = await self.store.get_entry_by_date(session.user_id, day)
        if entry is None:
            raise NotFoundError("Entry not found.")
        return EntryResponse.from_entry(entry)

    @service_operation("ENTRY")
    async def delete_entry(self, session: SessionContext, entry_id: str) -> bool:
        entry = await self._owned_entry(session, entry_id)
        await self.store.delete_entry(entry.id)
        await self.db.commit()
        logger.info("[ENTRY] deleted user=%s entry=%s", session.user_id, entry_id)
        return True

    # ---- Tag ----

    @service_operation("TAGS")
    async def list_tags(self) -> list[TagResponse]:
        return [TagResponse.model_validate(t) for t in await self.store.list_tags()]

    @service_operation("TAGS")
    async def list_prebuilt_tags(self) -> list[TagResponse]:
        return [TagResponse.model_validate(t) for t in await self.store.list_prebuilt_tags()]

    @service_operation("TAGS")
    async def add_tag(self, name: str, is_prebuilt: bool = False) -> TagResponse:
        clean = _clean_name(name)
        if not clean:
            raise ValidationFailure("Tag name is required.")
        if await self.store.tag_exists(clean):
            raise ConflictError("Tag already exists.")

        tag = await self.store.add_tag(Tag(name=clean, is_prebuilt=bool(is_prebuilt)))
        await self.db.commit()
        logger.info("[TAGS] added tag=%s prebuilt=%s", tag.id, tag.is_prebuilt)
        return TagResponse.model_validate(tag)

    @service_operation("TAGS")
    async def get_or_create_tag(self, name: str) -> TagResponse:
        clean = _clean_name(name)
        if not clean:
            raise ValidationFailure("Tag name is required.")
        tag = await self.store.get_or_create_tag(clean)
        await self.db.commit()
        return TagResponse.model_validate(tag)

    @service_operation("TAGS")
    async def delete_tag(self, tag_id: str) -> bool:
        tag = await self.store.get_tag_by_id(tag_id)
        if tag is None:
            raise NotFoundError("Tag not found.")
        if tag.is_prebuilt:
            raise ValidationFailure("Prebuilt tags cannot be deleted.")

        await self.store.delete_tag(tag.id)
        await self.db.commit()
        logger.info("[TAGS] deleted tag=%s", tag_id)
        return True

    @service_operation("TAGS")
    async def ensure_prebuilt_tags(self) -> int:
        """补齐预置标签（名称不区分大小写比较；幂等），返回本次新建数量。"""
        existing = {t.name.casefold() for t in await self.store.list_tags()}
        created = 0
        for name in PREBUILT_TAGS:
            if name.casefold() in existing:
                continue
            await self.store.add_tag(Tag(name=name, is_prebuilt=True))
            existing.add(name.casefold())
            created += 1

        if created:
            await self.db.commit()
            logger.info("[TAGS] seeded prebuilt tags created=%s", created)
        return created

    # ---- Category ----

    @service_operation("CATEGORY")
    async def list_categories(self) -> list[CategoryResponse]:
        return [CategoryResponse.model_validate(c) for c in await self.store.list_categories()]

    @service_operation("CATEGORY")
    async def add_category(self, name: str) -> CategoryResponse:
        clean = _clean_name(name)
        if not clean:
            raise ValidationFailure("Category name is required.")

        category = await self.store.get_category_by_name(clean)
        if category is None:
            category = await self.store.add_category(Category(name=clean))
            await self.db.commit()
            logger.info("[CATEGORY] added category=%s", category.id)
        return CategoryResponse.model_validate(category)

    @service_operation("CATEGORY")
    async def update_category(self, category_id: str, name: str) -> CategoryResponse:
        clean = _clean_name(name)
        if not clean:
            raise ValidationFailure("Category name is required.")
        category = await self.store.get_category_by_id(category_id)
        if category is None:
            raise NotFoundError("Category not found.")

        category.name = clean
        await self.store.update_category(category)
        await self.db.commit()
        return CategoryResponse.model_validate(category)

    @service_operation("CATEGORY")
    async def delete_category(self, category_id: str) -> bool:
        category = await self.store.get_category_by_id(category_id)
        if category is None:
            raise NotFoundError("Category not found.")

        await self.store.delete_category(category.id)
        await self.db.commit()
        logger.info("[CATEGORY] deleted category=%s", category_id)
        return True
