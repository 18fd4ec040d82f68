from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import declarative_base
from sqlalchemy import event, text
from .config import settings

# 针对 SQLite 的默认优化：
# - busy_timeout：降低并发写入下的 “database is locked”
# - WAL：读写并行（API 查询 + 写入）
# - foreign_keys：打开外键约束（SQLite 默认关闭）
_is_sqlite = str(settings.database_url or "").startswith("sqlite")
_connect_args = {"timeout": 30} if _is_sqlite else {}

engine = create_async_engine(
    settings.database_url,
    echo=settings.sql_echo,
    pool_pre_ping=True,
    future=True,
    connect_args=_connect_args,
)

if _is_sqlite:
    @event.listens_for(engine.sync_engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, _connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA journal_mode=WAL;")
        cursor.execute("PRAGMA synchronous=NORMAL;")
        cursor.execute("PRAGMA foreign_keys=ON;")
        cursor.execute("PRAGMA busy_timeout=30000;")
        cursor.close()

AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False
)

# Base class for models
Base = declarative_base()


async def get_db():
    """Dependency for getting database session"""
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def init_db():
    """Initialize database tables"""
    # 确保所有模型都已被导入，从而注册到 Base.metadata
    from . import models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
        await _ensure_schema(conn)


async def _ensure_schema(conn) -> None:
    """补齐常用查询索引（IF NOT EXISTS 同时兼容 SQLite / PostgreSQL）。"""

    # 按日查找（upsert 的 find-or-create）+ 列表默认排序（entry_date 倒序）
    await conn.execute(
        text("CREATE INDEX IF NOT EXISTS idx_entries_user_date_id ON entries (user_id, entry_date, id)")
    )
    # 分类筛选
    await conn.execute(
        text("CREATE INDEX IF NOT EXISTS idx_entries_user_category ON entries (user_id, category_id)")
    )
    # 标签筛选（EXISTS 子查询按 tag_id 反查）与标签使用统计
    await conn.execute(
        text("CREATE INDEX IF NOT EXISTS idx_entry_tags_tag_entry ON entry_tags (tag_id, entry_id)")
    )
