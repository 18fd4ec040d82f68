"""统计 API：连续天数 / 月历 / 心情分布 / 标签使用 / 字数趋势"""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db
from ..services import AnalyticsAggregator, StreakService
from ..session import SessionContext
from .deps import envelope_response, get_session_context

router = APIRouter(prefix="/analytics", tags=["analytics"])


@router.get("/streaks")
async def get_streaks(
    as_of: date | None = Query(None, description="统计截止日期（默认今天）"),
    session: SessionContext = Depends(get_session_context),
    db: AsyncSession = Depends(get_db),
):
    return envelope_response(await StreakService(db).get_streak_info(session, as_of))


@router.get("/missed-days")
async def get_missed_days(
    date_from: date = Query(..., description="起始日期（含）"),
    date_to: date = Query(..., description="结束日期（含）"),
    session: SessionContext = Depends(get_session_context),
    db: AsyncSession = Depends(get_db),
):
    return envelope_response(await StreakService(db).get_missed_days(session, date_from, date_to))


@router.get("/calendar/{year}/{month}")
async def get_calendar(
    year: int,
    month: int,
    session: SessionContext = Depends(get_session_context),
    db: AsyncSession = Depends(get_db),
):
    return envelope_response(await StreakService(db).get_calendar_data(session, year, month))


@router.get("/moods")
async def get_mood_distribution(
    date_from: date | None = Query(None),
    date_to: date | None = Query(None),
    session: SessionContext = Depends(get_session_context),
    db: AsyncSession = Depends(get_db),
):
    return envelope_response(await AnalyticsAggregator(db).mood_distribution(session, date_from, date_to))


@router.get("/tags")
async def get_tag_usage(
    date_from: date | None = Query(None),
    date_to: date | None = Query(None),
    top_n: int | None = Query(None, description="返回前 N 个标签（默认见配置）"),
    session: SessionContext = Depends(get_session_context),
    db: AsyncSession = Depends(get_db),
):
    return envelope_response(
        await AnalyticsAggregator(db).tag_usage(session, date_from, date_to, top_n=top_n)
    )


@router.get("/word-counts")
async def get_word_count_trend(
    date_from: date = Query(...),
    date_to: date = Query(...),
    session: SessionContext = Depends(get_session_context),
    db: AsyncSession = Depends(get_db),
):
    return envelope_response(await AnalyticsAggregator(db).word_count_trend(session, date_from, date_to))
