"""Database initialization script（建表 + 预置标签）"""
import asyncio

from moodjournal.database import AsyncSessionLocal, init_db
from moodjournal.services import JournalService


async def main():
    print("Initializing database...")
    await init_db()
    async with AsyncSessionLocal() as session:
        result = await JournalService(session).ensure_prebuilt_tags()
    if not result.success:
        raise SystemExit(f"Seeding prebuilt tags failed: {result.error}")
    print(f"Database initialized successfully! (prebuilt tags created: {result.data})")


if __name__ == "__main__":
    asyncio.run(main())
