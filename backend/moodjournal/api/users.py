"""用户 API：注册 / 登录（写会话 Cookie）/ 当前用户。"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.responses import Response

from ..config import settings
from ..database import get_db
from ..schemas.result import ServiceResult
from ..schemas.user import UserLogin
from ..services import UserService
from ..session import SessionContext
from ..utils.session_token import issue_token
from .deps import envelope_response, get_session_context, resolve_cookie_secure

router = APIRouter(prefix="/users", tags=["users"])


def _with_session_cookie(result: ServiceResult, request: Request) -> JSONResponse:
    response = envelope_response(result)
    if not result.success or result.data is None:
        return response

    user = result.data
    token = issue_token(
        secret=settings.session_secret or "",
        user_id=user.id,
        username=user.username,
        days=settings.session_days,
    )
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        max_age=int(settings.session_days) * 24 * 60 * 60,
        httponly=True,
        samesite=settings.session_cookie_samesite,
        secure=resolve_cookie_secure(request),
        path="/",
    )
    return response


@router.post("/register")
async def register(body: UserLogin, request: Request, db: AsyncSession = Depends(get_db)):
    result = await UserService(db).register(body.username, body.pin)
    return _with_session_cookie(result, request)


@router.post("/login")
async def login(body: UserLogin, request: Request, db: AsyncSession = Depends(get_db)):
    result = await UserService(db).login(body.username, body.pin)
    return _with_session_cookie(result, request)


@router.post("/logout")
async def logout() -> Response:
    response = Response(status_code=204)
    response.delete_cookie(key=settings.session_cookie_name, path="/")
    return response


@router.get("/me")
async def me(
    session: SessionContext = Depends(get_session_context),
    db: AsyncSession = Depends(get_db),
):
    return envelope_response(await UserService(db).get_user(session.user_id))


@router.delete("/me")
async def delete_me(
    session: SessionContext = Depends(get_session_context),
    db: AsyncSession = Depends(get_db),
):
    result = await UserService(db).delete_user(session)
    response = envelope_response(result)
    if result.success:
        response.delete_cookie(key=settings.session_cookie_name, path="/")
    return response
