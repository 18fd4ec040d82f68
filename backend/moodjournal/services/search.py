from __future__ import annotations

import logging

from ..config import settings
from ..schemas.entry import EntryResponse
from ..schemas.entry_query import EntrySearchRequest, EntrySearchResponse
from ..session import SessionContext
from ..utils.errors import ValidationFailure
from .base import BaseService, service_operation
from .entry_store import build_entry_filters

logger = logging.getLogger(__name__)


def validate_search_request(request: EntrySearchRequest) -> None:
    if request.page < 1:
        raise ValidationFailure("Page must be at least 1.")
    if request.page_size < 1:
        raise ValidationFailure("Page size must be at least 1.")
    if request.page_size > settings.max_page_size:
        raise ValidationFailure(f"Page size must not exceed {settings.max_page_size}.")
    if request.date_from and request.date_to and request.date_to < request.date_from:
        raise ValidationFailure("date_to must not be earlier than date_from.")


class SearchFilterEngine(BaseService):
    """日记多条件搜索 + 分页（始终限定在当前用户）"""

    @service_operation("SEARCH")
    async def search(self, session: SessionContext, request: EntrySearchRequest) -> EntrySearchResponse:
        validate_search_request(request)

        filters = build_entry_filters(
            user_id=session.user_id,
            text=request.text,
            date_from=request.date_from,
            date_to=request.date_to,
            moods=request.moods,
            tag_ids=request.tag_ids,
            category_id=request.category_id,
        )
        skip = (request.page - 1) * request.page_size

        total = await self.store.count_entries(filters)
        entries = await self.store.list_entries(filters, skip=skip, take=request.page_size)

        logger.debug(
            "[SEARCH] user=%s page=%s size=%s total=%s returned=%s",
            session.user_id,
            request.page,
            request.page_size,
            total,
            len(entries),
        )
        return EntrySearchResponse(
            entries=[EntryResponse.from_entry(e) for e in entries],
            total_count=total,
            page=request.page,
            page_size=request.page_size,
        )
