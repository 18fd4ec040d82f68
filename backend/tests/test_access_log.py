from __future__ import annotations

import sys
import tempfile
import unittest
from pathlib import Path
from typing import override
from unittest.mock import patch

import httpx

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from _support import DatabaseTestCase
from moodjournal.config import settings
from moodjournal.database import get_db
from moodjournal.main import app
from moodjournal.utils.access_log import format_access_line


class FormatAccessLineTests(unittest.TestCase):
    def test_quotes_only_when_needed_and_skips_none(self):
        line = format_access_line(
            {
                "method": "GET",
                "route": "/api/entries/{entry_id}",
                "status": 200,
                "uid": None,
                "error": 'ValueError: bad "x"\nnext',
            }
        )
        self.assertEqual(
            line,
            'method=GET route=/api/entries/{entry_id} status=200 '
            'error="ValueError: bad \\"x\\"\\\\nnext"',
        )

    def test_empty_value_is_quoted(self):
        self.assertEqual(format_access_line({"rid": ""}), 'rid=""')


class AccessLogRequestTests(DatabaseTestCase):
    @override
    async def asyncSetUp(self):
        await super().asyncSetUp()
        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        self.log_dir = Path(tmp.name)

        for name, value in (
            ("access_log_enabled", True),
            ("access_log_dir", str(self.log_dir)),
            ("access_log_ignore_paths", "/health"),
            ("pin_hash_iterations", 1000),
        ):
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

    def _lines(self) -> list[str]:
        lines: list[str] = []
        for path in sorted(self.log_dir.glob("*.logs")):
            lines.extend(path.read_text(encoding="utf-8").splitlines())
        return lines

    async def test_logs_route_template_and_session_user(self):
        registered = await self.client.post(
            f"{settings.api_prefix}/users/register", json={"username": "alice", "pin": "1234"}
        )
        user_id = registered.json()["data"]["id"]
        written = await self.client.put(
            f"{settings.api_prefix}/entries",
            json={"entry_date": "2024-08-01", "primary_mood": "happy", "body": "secret words"},
        )
        entry_id = written.json()["data"]["id"]
        fetched = await self.client.get(f"{settings.api_prefix}/entries/{entry_id}")
        self.assertEqual(fetched.status_code, 200)

        lines = self._lines()
        self.assertEqual(len(lines), 3)
        self.assertIn(f"route={settings.api_prefix}/entries/{{entry_id}}", lines[2])
        self.assertIn(f"uid={user_id}", lines[2])
        self.assertIn("status=200", lines[2])
        self.assertNotIn(entry_id, "\n".join(lines))
        self.assertNotIn("secret", "\n".join(lines))
        self.assertNotIn("uid=", lines[0])

    async def test_ignored_and_unmatched_paths(self):
        await self.client.get("/health")
        missing = await self.client.get(f"{settings.api_prefix}/nothing/here")
        self.assertEqual(missing.status_code, 404)

        lines = self._lines()
        self.assertEqual(len(lines), 1)
        self.assertIn("route=- ", lines[0])
        self.assertNotIn("nothing", lines[0])


if __name__ == "__main__":
    unittest.main()
