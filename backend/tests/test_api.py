from __future__ import annotations

import sys
from datetime import date
from pathlib import Path
from typing import override
from unittest.mock import patch

import httpx

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from _support import DatabaseTestCase
from moodjournal.config import settings
from moodjournal.database import get_db
from moodjournal.main import app


class ApiTests(DatabaseTestCase):
    @override
    async def asyncSetUp(self):
        await super().asyncSetUp()
        for name, value in (("access_log_enabled", False), ("pin_hash_iterations", 1000)):
            patcher = patch.object(settings, name, value)
            patcher.start()
            self.addCleanup(patcher.stop)

        async def _override_get_db():
            async with self.db() as session:
                yield session
                await session.commit()

        app.dependency_overrides[get_db] = _override_get_db
        self.addCleanup(app.dependency_overrides.clear)

        self.client = httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://testserver")
        self.addAsyncCleanup(self.client.aclose)

    def url(self, path: str) -> str:
        return f"{settings.api_prefix}{path}"

    async def _register(self, username: str = "alice") -> dict:
        response = await self.client.post(self.url("/users/register"), json={"username": username, "pin": "1234"})
        self.assertEqual(response.status_code, 200, response.text)
        self.assertIn(settings.session_cookie_name, response.cookies)
        return response.json()["data"]

    async def test_requests_without_session_are_rejected(self):
        response = await self.client.get(self.url("/entries/query"))
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()["detail"], "SESSION_REQUIRED")
        self.assertIn("X-Request-Id", response.headers)

    async def test_entry_roundtrip(self):
        await self._register()
        tag = await self.client.post(self.url("/tags"), json={"name": "Work"})
        self.assertEqual(tag.status_code, 200)
        tag_id = tag.json()["data"]["id"]

        written = await self.client.put(
            self.url("/entries"),
            json={
                "entry_date": "2024-08-01",
                "title": "First",
                "body": "hello there world",
                "primary_mood": "happy",
                "secondary_moods": ["calm", "calm"],
                "tag_ids": [tag_id],
            },
        )
        self.assertEqual(written.status_code, 200, written.text)
        entry = written.json()["data"]
        self.assertEqual(entry["word_count"], 3)
        self.assertEqual(entry["primary_mood_category"], "positive")
        self.assertEqual(entry["secondary_moods"], ["calm"])

        by_date = await self.client.get(self.url("/entries/by-date/2024-08-01"))
        self.assertEqual(by_date.json()["data"]["id"], entry["id"])

        query = await self.client.get(
            self.url("/entries/query"), params={"q": "HELLO", "moods": ["happy", "sad"], "page_size": 5}
        )
        body = query.json()["data"]
        self.assertEqual(body["total_count"], 1)
        self.assertEqual(body["total_pages"], 1)
        self.assertFalse(body["has_more"])

        deleted = await self.client.delete(self.url(f"/entries/{entry['id']}"))
        self.assertEqual(deleted.status_code, 200)
        missing = await self.client.get(self.url(f"/entries/{entry['id']}"))
        self.assertEqual(missing.status_code, 404)
        self.assertEqual(
            missing.json(),
            {"success": False, "data": None, "error": "Entry not found.", "error_kind": "not_found"},
        )

    async def test_failure_kinds_map_to_status_codes(self):
        await self._register()
        await self.client.post(self.url("/tags"), json={"name": "Dup"})
        conflict = await self.client.post(self.url("/tags"), json={"name": "Dup"})
        self.assertEqual(conflict.status_code, 409)

        invalid = await self.client.get(self.url("/entries/query"), params={"page": 0})
        self.assertEqual(invalid.status_code, 422)
        self.assertEqual(invalid.json()["error_kind"], "validation")

        duplicate_user = await self.client.post(
            self.url("/users/register"), json={"username": "alice", "pin": "9999"}
        )
        self.assertEqual(duplicate_user.status_code, 409)

    async def test_analytics_endpoints(self):
        await self._register()
        today = date(2024, 9, 2)
        for day, mood in ((date(2024, 9, 1), "sad"), (today, "happy")):
            await self.client.put(
                self.url("/entries"),
                json={"entry_date": day.isoformat(), "primary_mood": mood, "body": "a b"},
            )

        streaks = await self.client.get(self.url("/analytics/streaks"), params={"as_of": today.isoformat()})
        self.assertEqual(streaks.json()["data"]["current_streak"], 2)

        moods = await self.client.get(self.url("/analytics/moods"))
        self.assertEqual(moods.json()["data"]["mood_counts"]["happy"], 1)
        self.assertEqual(moods.json()["data"]["category_counts"]["negative"], 1)

        words = await self.client.get(
            self.url("/analytics/word-counts"), params={"date_from": "2024-09-01", "date_to": "2024-09-03"}
        )
        self.assertEqual(words.json()["data"]["daily_word_counts"], {"2024-09-01": 2, "2024-09-02": 2})

        calendar = await self.client.get(self.url("/analytics/calendar/2024/9"))
        self.assertEqual(calendar.json()["data"]["dates_with_entries"], ["2024-09-01", "2024-09-02"])

        bad_month = await self.client.get(self.url("/analytics/calendar/2024/0"))
        self.assertEqual(bad_month.status_code, 422)

    async def test_login_logout_and_delete_me(self):
        user = await self._register("erin")
        await self.client.post(self.url("/users/logout"))
        self.client.cookies.clear()

        bad = await self.client.post(self.url("/users/login"), json={"username": "erin", "pin": "0000"})
        self.assertEqual(bad.status_code, 422)

        ok = await self.client.post(self.url("/users/login"), json={"username": "erin", "pin": "1234"})
        self.assertEqual(ok.status_code, 200)
        me = await self.client.get(self.url("/users/me"))
        self.assertEqual(me.json()["data"]["id"], user["id"])

        removed = await self.client.delete(self.url("/users/me"))
        self.assertEqual(removed.status_code, 200)
        self.client.cookies.clear()
        again = await self.client.post(self.url("/users/login"), json={"username": "erin", "pin": "1234"})
        self.assertEqual(again.status_code, 404)

    async def test_session_of_deleted_user_cannot_write(self):
        await self._register("frank")
        token = self.client.cookies.get(settings.session_cookie_name)

        removed = await self.client.delete(self.url("/users/me"))
        self.assertEqual(removed.status_code, 200)
        self.client.cookies.clear()

        written = await self.client.put(
            self.url("/entries"),
            json={"entry_date": "2024-08-01", "primary_mood": "happy"},
            headers={"Cookie": f"{settings.session_cookie_name}={token}"},
        )
        self.assertEqual(written.status_code, 404)
        self.assertEqual(written.json()["error"], "User not found.")
