"""TagReconciler：把日记当前的标签集合同步到“期望集合”（最小增删）。"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from ..models import Entry, EntryTag, Tag
from ..schemas.tag import TagSyncEffect
from ..utils.errors import NotFoundError
from .entry_store import EntryStore

logger = logging.getLogger(__name__)


class TagReconciler:
    def __init__(self, store: EntryStore):
        self.store = store

    async def resolve(self, refs: Iterable[str] | None) -> dict[str, Tag]:
        """把引用解析为 {tag_id: Tag}：先按 id 找，找不到再按名称找。

        任一引用无法解析时整体失败（抛 NotFoundError），此时尚未改动任何数据。
        """
        resolved: dict[str, Tag] = {}
        missing: list[str] = []
        for raw in refs or []:
            ref = str(raw or "").strip()
            if not ref:
                continue
            tag = await self.store.get_tag_by_id(ref)
            if tag is None:
                tag = await self.store.get_tag_by_name(ref)
            if tag is None:
                missing.append(ref)
                continue
            resolved[tag.id] = tag

        if missing:
            raise NotFoundError(f"Tag not found: {', '.join(dict.fromkeys(missing))}")
        return resolved

    def apply(self, entry: Entry, desired: dict[str, Tag]) -> TagSyncEffect:
        current = {link.tag_id: link for link in entry.tag_links}

        removed = sorted(tag_id for tag_id in current if tag_id not in desired)
        added = sorted(tag_id for tag_id in desired if tag_id not in current)

        for tag_id in removed:
            entry.tag_links.remove(current[tag_id])
        for tag_id in added:
            entry.tag_links.append(EntryTag(tag_id=tag_id, tag=desired[tag_id]))

        if added or removed:
            logger.debug("[TAGS] entry=%s added=%s removed=%s", entry.id, len(added), len(removed))
        return TagSyncEffect(added=added, removed=removed)

    async def reconcile(self, entry: Entry, refs: Iterable[str] | None) -> TagSyncEffect:
        desired = await self.resolve(refs)
        return self.apply(entry, desired)
