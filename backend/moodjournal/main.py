"""FastAPI application entry point"""
import logging
import time
import uuid
from pathlib import Path
import tomllib

from fastapi import FastAPI, HTTPException, Request
from fastapi.exception_handlers import (
    http_exception_handler as fastapi_http_exception_handler,
    request_validation_exception_handler,
)
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text

from .config import settings
from .database import AsyncSessionLocal, engine, init_db
from .api import (
    analytics_router,
    categories_router,
    entries_router,
    tags_router,
    users_router,
)
from .services import JournalService
from .utils.access_log import log_request
from .utils.errors import exception_summary

logger = logging.getLogger(__name__)

# SQLAlchemy 日志默认只保留 WARNING；排查 SQL 时用 SQL_ECHO=true 打开
if not settings.sql_echo:
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.pool").setLevel(logging.WARNING)

_FALLBACK_VERSION = "0.1.0"


def _read_app_version() -> str:
    """从仓库根目录的 pyproject.toml 读取版本，读取失败时退回默认值。"""
    repo_root = Path(__file__).resolve().parents[2]
    pyproject = repo_root / "pyproject.toml"
    if not pyproject.exists():
        return _FALLBACK_VERSION
    try:
        data = tomllib.loads(pyproject.read_text(encoding="utf-8"))
    except (OSError, tomllib.TOMLDecodeError):
        return _FALLBACK_VERSION
    version = str((data.get("project") or {}).get("version") or "").strip()
    return version or _FALLBACK_VERSION


APP_VERSION = _read_app_version()

app = FastAPI(
    title="MoodJournal API",
    description="Personal daily journal with moods, tags, streaks and analytics",
    version=APP_VERSION,
)


def _split_csv(value: str) -> list[str]:
    return [v.strip() for v in (value or "").split(",") if v.strip()]


cors_origins = _split_csv(settings.cors_allow_origins)
if not cors_origins or cors_origins == ["*"]:
    cors_origins = ["*"]
    cors_allow_credentials = False
else:
    cors_allow_credentials = bool(settings.cors_allow_credentials)

cors_methods = _split_csv(settings.cors_allow_methods)
if not cors_methods or cors_methods == ["*"]:
    cors_methods = ["*"]

cors_headers = _split_csv(settings.cors_allow_headers)
if not cors_headers or cors_headers == ["*"]:
    cors_headers = ["*"]

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=cors_allow_credentials,
    allow_methods=cors_methods,
    allow_headers=cors_headers,
)


# Access log middleware（按天写入本地 logs/）
@app.middleware("http")
async def access_log_middleware(request: Request, call_next):
    started = time.perf_counter()
    status_code = 500
    error: str | None = None

    try:
        response = await call_next(request)
        status_code = getattr(response, "status_code", 200) or 200
        return response
    except Exception as e:
        error = exception_summary(e, max_len=200 if settings.debug else 0)
        raise
    finally:
        # 写访问日志失败不影响请求本身
        try:
            request_id = getattr(getattr(request, "state", None), "request_id", None)
            await log_request(
                request,
                status_code=status_code,
                duration_ms=int((time.perf_counter() - started) * 1000),
                error=error,
                request_id=request_id,
            )
        except Exception:
            logger.debug("[ACCESS_LOG] Failed to write access log", exc_info=True)


def _normalize_request_id(value: str | None) -> str | None:
    """外部传入的 request id：去空白，拒绝过长或含控制字符的值。"""
    if not value or not isinstance(value, str):
        return None
    s = value.strip()
    if not s or len(s) > 64:
        return None
    if any(ord(ch) < 32 for ch in s):
        return None
    return s


@app.middleware("http")
async def request_id_middleware(request: Request, call_next):
    """为每个请求生成/透传 X-Request-Id，并写入响应头。"""
    incoming = request.headers.get("x-request-id") or request.headers.get("x-correlation-id")
    rid = _normalize_request_id(incoming) or uuid.uuid4().hex
    request.state.request_id = rid

    response = await call_next(request)
    response.headers["X-Request-Id"] = rid
    return response


@app.exception_handler(HTTPException)
async def http_exception_handler_with_request_id(request: Request, exc: HTTPException):
    response = await fastapi_http_exception_handler(request, exc)
    rid = getattr(getattr(request, "state", None), "request_id", None)
    if rid:
        response.headers["X-Request-Id"] = rid
    return response


@app.exception_handler(RequestValidationError)
async def validation_exception_handler_with_request_id(request: Request, exc: RequestValidationError):
    response = await request_validation_exception_handler(request, exc)
    rid = getattr(getattr(request, "state", None), "request_id", None)
    if rid:
        response.headers["X-Request-Id"] = rid
    return response


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    rid = getattr(getattr(request, "state", None), "request_id", None)
    logger.exception("[UNHANDLED] request_id=%s", rid or "-")

    detail = "INTERNAL_ERROR"
    if settings.debug:
        detail = exception_summary(exc, max_len=200)

    payload: dict[str, object] = {"detail": detail}
    if rid:
        payload["request_id"] = rid

    headers = {"X-Request-Id": rid} if rid else None
    return JSONResponse(payload, status_code=500, headers=headers)


app.include_router(users_router, prefix=settings.api_prefix)
app.include_router(entries_router, prefix=settings.api_prefix)
app.include_router(analytics_router, prefix=settings.api_prefix)
app.include_router(tags_router, prefix=settings.api_prefix)
app.include_router(categories_router, prefix=settings.api_prefix)


@app.on_event("startup")
async def startup_event():
    """建表 + 补齐预置标签"""
    await init_db()

    if settings.seed_prebuilt_tags_on_startup:
        async with AsyncSessionLocal() as session:
            result = await JournalService(session).ensure_prebuilt_tags()
        if result.success:
            logger.info("[STARTUP] Prebuilt tags ready (created=%s)", result.data)
        else:
            logger.warning("[STARTUP] Prebuilt tag seeding failed: %s", result.error)


@app.get("/")
async def root():
    """Root endpoint"""
    return {"message": "MoodJournal API", "version": APP_VERSION}


@app.get("/health")
async def health_check():
    """Health check endpoint（包含 DB 可用性探测）。"""
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        logger.exception("[HEALTH] Database check failed: %s", exception_summary(e))
        raise HTTPException(status_code=503, detail="DB_UNAVAILABLE") from e

    return {"status": "healthy", "db": "ok"}
