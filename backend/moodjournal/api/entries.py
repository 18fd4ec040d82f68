"""Entry API"""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import settings
from ..database import get_db
from ..moods import Mood
from ..schemas.entry import EntryInput
from ..schemas.entry_query import EntrySearchRequest
from ..services import JournalService, SearchFilterEngine
from ..session import SessionContext
from .deps import envelope_response, get_session_context

router = APIRouter(prefix="/entries", tags=["entries"])


@router.put("")
async def upsert_entry(
    body: EntryInput,
    session: SessionContext = Depends(get_session_context),
    db: AsyncSession = Depends(get_db),
):
    """写入某一天的日记（当天已有则更新）"""
    return envelope_response(await JournalService(db).upsert_entry(session, body))


@router.get("/query")
async def query_entries(
    q: str | None = Query(None, description="关键字（标题/正文包含，不区分大小写）"),
    date_from: date | None = Query(None, description="起始日期（含）"),
    date_to: date | None = Query(None, description="结束日期（含）"),
    moods: list[Mood] | None = Query(None, description="主心情（多值 OR）"),
    tag_ids: list[str] | None = Query(None, description="标签 id（命中任一即可）"),
    category_id: str | None = Query(None, description="分类 id"),
    page: int = Query(1, description="页码（从 1 开始）"),
    page_size: int = Query(settings.default_page_size, description="分页大小"),
    session: SessionContext = Depends(get_session_context),
    db: AsyncSession = Depends(get_db),
):
    request = EntrySearchRequest(
        text=q,
        date_from=date_from,
        date_to=date_to,
        moods=moods,
        tag_ids=tag_ids,
        category_id=category_id,
        page=page,
        page_size=page_size,
    )
    return envelope_response(await SearchFilterEngine(db).search(session, request))


@router.get("/by-date/{day}")
async def get_entry_by_date(
    day: date,
    session: SessionContext = Depends(get_session_context),
    db: AsyncSession = Depends(get_db),
):
    return envelope_response(await JournalService(db).get_entry_by_date(session, day))


@router.get("/{entry_id}")
async def get_entry(
    entry_id: str,
    session: SessionContext = Depends(get_session_context),
    db: AsyncSession = Depends(get_db),
):
    return envelope_response(await JournalService(db).get_entry(session, entry_id))


@router.delete("/{entry_id}")
async def delete_entry(
    entry_id: str,
    session: SessionContext = Depends(get_session_context),
    db: AsyncSession = Depends(get_db),
):
    return envelope_response(await JournalService(db).delete_entry(session, entry_id))
