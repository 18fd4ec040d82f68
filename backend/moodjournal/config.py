from __future__ import annotations

import secrets
from pathlib import Path

from dotenv import load_dotenv
from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


_APP_DIR = Path(__file__).resolve().parent
_BACKEND_DIR = _APP_DIR.parent
_REPO_ROOT = _BACKEND_DIR.parent


def _load_root_dotenv() -> None:
    """
    统一从仓库根目录读取 `.env`（并保证其优先级最高）。

    说明：
    - 启动脚本通常会 `cd backend`，导致工具默认只会找子目录下的 `.env`。
    - 这里显式加载：先加载 `backend/.env`，再加载根目录 `.env`，并且 `override=True`。
    """

    backend_env = _BACKEND_DIR / ".env"
    root_env = _REPO_ROOT / ".env"

    for env_file in (backend_env, root_env):
        if env_file.exists():
            load_dotenv(env_file, override=True, encoding="utf-8")


class Settings(BaseSettings):
    """Application settings"""

    # Server（供 run.py 使用）
    backend_host: str = "127.0.0.1"
    backend_port: int = 31012
    backend_reload: bool = True

    # Database
    # 优先使用 DATABASE_URL；不配置时再使用 SQLITE_DB_PATH 生成 sqlite URL
    database_url: str | None = None
    sqlite_db_path: str = "moodjournal.db"

    # API
    api_prefix: str = "/api"
    debug: bool = True
    # 是否输出 SQLAlchemy 的 SQL 日志；排查 SQL/事务时再临时打开
    sql_echo: bool = False

    # CORS（逗号分隔；"*" 表示允许所有来源，此时会强制关闭 allow_credentials）
    cors_allow_origins: str = "*"
    cors_allow_credentials: bool = False
    cors_allow_methods: str = "*"
    cors_allow_headers: str = "*"

    # 会话 Cookie（登录后写入，携带 user_id）
    session_secret: str | None = None
    session_days: int = 30
    session_cookie_name: str = "moodjournal_session"
    session_cookie_samesite: str = "lax"  # lax | strict | none
    session_cookie_secure: str = "auto"  # auto | true | false

    # PIN
    pin_min_length: int = 4
    pin_hash_iterations: int = 210_000

    # 查询 / 统计
    default_page_size: int = 10
    max_page_size: int = 200
    tag_usage_default_top_n: int = 10

    # Startup：启动时补齐预置标签（幂等）
    seed_prebuilt_tags_on_startup: bool = True

    # Access Log（按天落盘 <repo>/logs/YYYY-MM-DD.logs；只记路由模板和会话用户 id）
    access_log_enabled: bool = True
    access_log_dir: str = "logs"
    access_log_ignore_paths: str = "/health"

    @model_validator(mode="after")
    def _build_database_url_if_missing(self) -> "Settings":
        if self.database_url and self.database_url.strip():
            return self

        db_path = Path(self.sqlite_db_path)
        if not db_path.is_absolute():
            db_path = (_REPO_ROOT / db_path).resolve()

        self.database_url = f"sqlite+aiosqlite:///{db_path.as_posix()}"
        return self

    @model_validator(mode="after")
    def _normalize_session(self) -> "Settings":
        secret = (self.session_secret or "").strip()
        if not secret:
            # 未配置时每次启动随机生成：重启后旧会话全部失效（本地单用户工具可以接受）
            self.session_secret = secrets.token_urlsafe(32)

        if int(self.session_days or 0) <= 0:
            self.session_days = 30

        if not (self.session_cookie_name or "").strip():
            self.session_cookie_name = "moodjournal_session"

        samesite = (self.session_cookie_samesite or "lax").strip().lower()
        if samesite not in {"lax", "strict", "none"}:
            samesite = "lax"
        self.session_cookie_samesite = samesite

        secure = (self.session_cookie_secure or "auto").strip().lower()
        if secure not in {"auto", "true", "false"}:
            secure = "auto"
        self.session_cookie_secure = secure
        return self

    @model_validator(mode="after")
    def _normalize_limits(self) -> "Settings":
        if self.pin_min_length <= 0:
            self.pin_min_length = 4
        if self.pin_hash_iterations <= 0:
            self.pin_hash_iterations = 210_000
        if self.max_page_size <= 0:
            self.max_page_size = 200
        if self.default_page_size <= 0 or self.default_page_size > self.max_page_size:
            self.default_page_size = min(10, self.max_page_size)
        if self.tag_usage_default_top_n <= 0:
            self.tag_usage_default_top_n = 10
        return self

    model_config = SettingsConfigDict(
        case_sensitive=False
    )


_load_root_dotenv()
settings = Settings()
