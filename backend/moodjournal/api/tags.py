from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db
from ..schemas.tag import TagCreate
from ..services import JournalService
from .deps import envelope_response, get_session_context

# 标签是全局共享的，但仍要求已登录
router = APIRouter(prefix="/tags", tags=["tags"], dependencies=[Depends(get_session_context)])


@router.get("")
async def list_tags(db: AsyncSession = Depends(get_db)):
    return envelope_response(await JournalService(db).list_tags())


@router.get("/prebuilt")
async def list_prebuilt_tags(db: AsyncSession = Depends(get_db)):
    return envelope_response(await JournalService(db).list_prebuilt_tags())


@router.post("")
async def add_tag(body: TagCreate, db: AsyncSession = Depends(get_db)):
    return envelope_response(await JournalService(db).add_tag(body.name, body.is_prebuilt))


@router.delete("/{tag_id}")
async def delete_tag(tag_id: str, db: AsyncSession = Depends(get_db)):
    return envelope_response(await JournalService(db).delete_tag(tag_id))
