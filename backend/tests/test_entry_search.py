from __future__ import annotations

import sys
import unittest
from datetime import date, timedelta
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from _support import DatabaseTestCase
from moodjournal.moods import Mood
from moodjournal.schemas import EntrySearchRequest
from moodjournal.services import SearchFilterEngine
from moodjournal.services.entry_store import _escape_like_term
from moodjournal.utils.errors import ErrorKind

START = date(2024, 1, 1)


class EscapeLikeTermTests(unittest.TestCase):
    def test_wildcards_are_escaped(self):
        self.assertEqual(_escape_like_term("50%_off\\"), "50\\%\\_off\\\\")
        self.assertEqual(_escape_like_term(""), "")


class SearchFilterEngineTests(DatabaseTestCase):
    async def asyncSetUp(self):
        await super().asyncSetUp()
        self.ctx = await self.make_user("alice")
        self.other = await self.make_user("bob")
        self.work = await self.make_tag("Work")
        self.travel = await self.make_tag("Travel")
        self.family = await self.make_category("Family")

        await self.write(self.ctx, START, Mood.HAPPY, title="Beach Day", body="sun and sand", tag_ids=[self.travel])
        await self.write(self.ctx, START + timedelta(days=1), Mood.SAD, title="Deadline", body="late at the OFFICE", tag_ids=[self.work])
        await self.write(
            self.ctx,
            START + timedelta(days=2),
            Mood.CALM,
            title="Dinner",
            body="50% discount",
            category_id=self.family,
            tag_ids=[self.work, self.travel],
        )
        await self.write(self.ctx, START + timedelta(days=3), Mood.HAPPY, title="Quiet", body="nothing much")
        await self.write(self.other, START, Mood.HAPPY, title="Beach for bob", body="office")

    async def _search(self, **kwargs):
        async with self.db() as session:
            return await SearchFilterEngine(session).search(self.ctx, EntrySearchRequest(**kwargs))

    def _titles(self, result) -> list[str]:
        self.assertTrue(result.success, result.error)
        return [e.title for e in result.data.entries]

    async def test_no_filters_returns_all_own_entries_newest_first(self):
        result = await self._search()
        self.assertEqual(self._titles(result), ["Quiet", "Dinner", "Deadline", "Beach Day"])
        self.assertEqual(result.data.total_count, 4)

    async def test_text_matches_title_or_body_case_insensitively(self):
        self.assertEqual(self._titles(await self._search(text="beach")), ["Beach Day"])
        self.assertEqual(self._titles(await self._search(text="office")), ["Deadline"])
        self.assertEqual(len(self._titles(await self._search(text="   "))), 4)

    async def test_like_wildcards_match_literally(self):
        self.assertEqual(self._titles(await self._search(text="50%")), ["Dinner"])
        self.assertEqual(self._titles(await self._search(text="%")), ["Dinner"])
        self.assertEqual(self._titles(await self._search(text="_")), [])

    async def test_empty_mood_set_equals_no_mood_filter(self):
        unfiltered = self._titles(await self._search())
        self.assertEqual(self._titles(await self._search(moods=[])), unfiltered)
        self.assertEqual(self._titles(await self._search(tag_ids=[])), unfiltered)

    async def test_moods_are_or_within_the_set(self):
        result = await self._search(moods=[Mood.SAD, Mood.CALM])
        self.assertEqual(self._titles(result), ["Dinner", "Deadline"])

    async def test_tags_match_any(self):
        self.assertEqual(self._titles(await self._search(tag_ids=[self.work])), ["Dinner", "Deadline"])
        result = await self._search(tag_ids=[self.work, self.travel])
        self.assertEqual(self._titles(result), ["Dinner", "Deadline", "Beach Day"])
        self.assertEqual(result.data.total_count, 3)

    async def test_category_and_date_range(self):
        self.assertEqual(self._titles(await self._search(category_id=self.family)), ["Dinner"])
        result = await self._search(date_from=START + timedelta(days=1), date_to=START + timedelta(days=2))
        self.assertEqual(self._titles(result), ["Dinner", "Deadline"])

    async def test_predicates_combine_with_and(self):
        result = await self._search(moods=[Mood.HAPPY], tag_ids=[self.travel])
        self.assertEqual(self._titles(result), ["Beach Day"])
        result = await self._search(moods=[Mood.HAPPY], category_id=self.family)
        self.assertEqual(self._titles(result), [])

    async def test_other_users_entries_are_never_returned(self):
        result = await self._search(text="bob")
        self.assertEqual(result.data.total_count, 0)

    async def test_invalid_requests_are_validation_failures(self):
        for kwargs in (
            {"page": 0},
            {"page_size": 0},
            {"page_size": 10_000},
            {"date_from": START, "date_to": START - timedelta(days=1)},
        ):
            result = await self._search(**kwargs)
            self.assertFalse(result.success, kwargs)
            self.assertEqual(result.error_kind, ErrorKind.VALIDATION)


class PaginationTests(DatabaseTestCase):
    async def test_page_arithmetic(self):
        ctx = await self.make_user()
        for i in range(25):
            await self.write(ctx, START + timedelta(days=i), title=f"day {i}")

        async with self.db() as session:
            engine = SearchFilterEngine(session)
            first = await engine.search(ctx, EntrySearchRequest(page=1, page_size=10))
            last = await engine.search(ctx, EntrySearchRequest(page=3, page_size=10))
            beyond = await engine.search(ctx, EntrySearchRequest(page=4, page_size=10))

        self.assertEqual(first.data.total_count, 25)
        self.assertEqual(first.data.total_pages, 3)
        self.assertTrue(first.data.has_more)
        self.assertEqual(first.data.entries[0].title, "day 24")
        self.assertEqual(len(last.data.entries), 5)
        self.assertEqual(last.data.entries[-1].title, "day 0")
        self.assertFalse(last.data.has_more)
        self.assertEqual(beyond.data.entries, [])
        self.assertEqual(beyond.data.total_count, 25)


if __name__ == "__main__":
    unittest.main()
