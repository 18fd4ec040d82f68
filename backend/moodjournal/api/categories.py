from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db
from ..schemas.category import CategoryInput
from ..services import JournalService
from .deps import envelope_response, get_session_context

router = APIRouter(prefix="/categories", tags=["categories"], dependencies=[Depends(get_session_context)])


@router.get("")
async def list_categories(db: AsyncSession = Depends(get_db)):
    return envelope_response(await JournalService(db).list_categories())


@router.post("")
async def add_category(body: CategoryInput, db: AsyncSession = Depends(get_db)):
    return envelope_response(await JournalService(db).add_category(body.name))


@router.put("/{category_id}")
async def update_category(category_id: str, body: CategoryInput, db: AsyncSession = Depends(get_db)):
    return envelope_response(await JournalService(db).update_category(category_id, body.name))


@router.delete("/{category_id}")
async def delete_category(category_id: str, db: AsyncSession = Depends(get_db)):
    return envelope_response(await JournalService(db).delete_category(category_id))
