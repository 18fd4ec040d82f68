"""HTTP 访问日志：每个请求一行 logfmt，按天追加到 `<repo>/logs/YYYY-MM-DD.logs`。

只记路由模板（如 `/api/entries/{entry_id}`）和会话用户 id，
不记具体路径、querystring、请求体：日记 id、日期、搜索词都属于用户内容。
"""

from __future__ import annotations

import threading
from datetime import datetime
from pathlib import Path

from starlette.concurrency import run_in_threadpool
from starlette.requests import Request
from starlette.routing import Match

from .. import config as config_module
from ..config import settings
from .session_token import verify_token

_WRITE_LOCK = threading.Lock()


def format_access_line(fields: dict[str, object]) -> str:
    """渲染 logfmt：None 省略；含空白 / 引号 / 等号的值加引号转义。"""
    parts = []
    for key, value in fields.items():
        if value is None:
            continue
        text = str(value).replace("\r", "\\r").replace("\n", "\\n")
        if not text or any(ch.isspace() or ch in '"=' for ch in text):
            text = '"' + text.replace("\\", "\\\\").replace('"', '\\"') + '"'
        parts.append(f"{key}={text}")
    return " ".join(parts)


def route_template(request: Request) -> str:
    """匹配到的路由模板；未匹配（404）记 `-`。"""
    route = request.scope.get("route")
    if route is None:
        for candidate in getattr(request.app, "routes", []):
            match, _ = candidate.matches(request.scope)
            if match == Match.FULL:
                route = candidate
                break
    return getattr(route, "path", None) or "-"


def session_user_id(request: Request) -> str | None:
    token = request.cookies.get(settings.session_cookie_name)
    if not token:
        return None
    ok, _reason, payload = verify_token(token, secret=settings.session_secret or "")
    if not ok or payload is None:
        return None
    return str(payload["uid"])


def log_path(now: datetime) -> Path:
    log_dir = Path(settings.access_log_dir)
    if not log_dir.is_absolute():
        log_dir = (config_module._REPO_ROOT / log_dir).resolve()
    return log_dir / f"{now.strftime('%Y-%m-%d')}.logs"


def _append_sync(path: Path, line: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with _WRITE_LOCK:
        with path.open("a", encoding="utf-8", newline="\n") as f:
            f.write(line + "\n")


async def log_request(
    request: Request,
    *,
    status_code: int,
    duration_ms: int,
    request_id: str | None = None,
    error: str | None = None,
) -> None:
    if not settings.access_log_enabled:
        return
    ignored = {p.strip() for p in (settings.access_log_ignore_paths or "").split(",") if p.strip()}
    if request.url.path in ignored:
        return

    now = datetime.now().astimezone()
    line = format_access_line(
        {
            "ts": now.isoformat(timespec="seconds"),
            "rid": request_id,
            "method": request.method,
            "route": route_template(request),
            "status": status_code,
            "dur_ms": duration_ms,
            "uid": session_user_id(request),
            "ip": request.client.host if request.client else None,
            "error": error,
        }
    )
    await run_in_threadpool(_append_sync, log_path(now), line)
