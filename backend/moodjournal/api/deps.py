"""路由公共依赖：会话解析 + ServiceResult -> HTTP 响应。"""

from __future__ import annotations

from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse

from ..config import settings
from ..schemas.result import ServiceResult
from ..session import SessionContext
from ..utils.errors import ErrorKind
from ..utils.session_token import verify_token

_STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.VALIDATION: 422,
    ErrorKind.CONFLICT: 409,
    ErrorKind.FATAL: 500,
}


async def get_session_context(request: Request) -> SessionContext:
    """从会话 Cookie 解析当前调用者；缺失或无效统一返回 401。"""
    token = request.cookies.get(settings.session_cookie_name)
    ok, _reason, payload = verify_token(token, secret=settings.session_secret or "")
    if not ok or payload is None:
        raise HTTPException(status_code=401, detail="SESSION_REQUIRED")
    return SessionContext(user_id=str(payload["uid"]), username=str(payload.get("name") or ""))


def status_for(result: ServiceResult) -> int:
    if result.success:
        return 200
    return _STATUS_BY_KIND.get(result.error_kind or ErrorKind.FATAL, 500)


def envelope_response(result: ServiceResult) -> JSONResponse:
    """成功 200；失败按 error_kind 映射状态码，body 始终是完整的 envelope。"""
    return JSONResponse(result.model_dump(mode="json"), status_code=status_for(result))


def _is_https(request: Request) -> bool:
    if (request.url.scheme or "").lower() == "https":
        return True

    xf_proto = request.headers.get("x-forwarded-proto")
    if xf_proto:
        first = xf_proto.split(",")[0].strip().lower()
        if first == "https":
            return True
    return False


def resolve_cookie_secure(request: Request) -> bool:
    raw = settings.session_cookie_secure
    if raw == "true":
        return True
    if raw == "false":
        return False
    return _is_https(request)
