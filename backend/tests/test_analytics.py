from __future__ import annotations

import sys
import unittest
from datetime import date, timedelta
from pathlib import Path
from unittest.mock import patch

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from _support import DatabaseTestCase
from moodjournal.config import settings
from moodjournal.moods import Mood, MoodCategory
from moodjournal.services import AnalyticsAggregator
from moodjournal.services.analytics import build_mood_distribution
from moodjournal.utils.errors import ErrorKind

START = date(2024, 6, 1)


class MoodDistributionBuilderTests(unittest.TestCase):
    def test_all_keys_present_and_rollup_sums_match(self):
        dist = build_mood_distribution({Mood.HAPPY: 3, Mood.SAD: 1, Mood.CALM: 2})

        self.assertEqual(set(dist.mood_counts), set(Mood))
        self.assertEqual(set(dist.category_counts), set(MoodCategory))
        self.assertEqual(dist.category_counts[MoodCategory.POSITIVE], 3)
        self.assertEqual(dist.category_counts[MoodCategory.NEUTRAL], 2)
        self.assertEqual(dist.category_counts[MoodCategory.NEGATIVE], 1)
        self.assertEqual(sum(dist.category_counts.values()), dist.total)
        self.assertEqual(dist.total, 6)
        self.assertEqual(dist.most_frequent_mood, Mood.HAPPY)

    def test_ties_break_alphabetically(self):
        dist = build_mood_distribution({Mood.HAPPY: 2, Mood.CALM: 2, Mood.SAD: 2})
        self.assertEqual(dist.most_frequent_mood, Mood.CALM)

    def test_empty(self):
        dist = build_mood_distribution({})
        self.assertIsNone(dist.most_frequent_mood)
        self.assertEqual(dist.total, 0)
        self.assertTrue(all(v == 0 for v in dist.mood_counts.values()))


class AnalyticsAggregatorTests(DatabaseTestCase):
    async def asyncSetUp(self):
        await super().asyncSetUp()
        self.ctx = await self.make_user("alice")
        other = await self.make_user("bob")
        self.tags = {name: await self.make_tag(name) for name in ("Work", "Travel", "Music", "Art")}

        await self.write(self.ctx, START, Mood.HAPPY, body="one two three", tag_ids=[self.tags["Work"], self.tags["Music"]])
        await self.write(self.ctx, START + timedelta(days=1), Mood.SAD, body="", tag_ids=[self.tags["Work"], self.tags["Art"]])
        await self.write(self.ctx, START + timedelta(days=3), Mood.HAPPY, body="a  b\nc d", tag_ids=[self.tags["Travel"]])
        await self.write(other, START, Mood.ANGRY, body="x " * 50, tag_ids=[self.tags["Travel"]])

    async def test_mood_distribution(self):
        async with self.db() as session:
            result = await AnalyticsAggregator(session).mood_distribution(self.ctx)

        data = result.data
        self.assertEqual(data.total, 3)
        self.assertEqual(data.mood_counts[Mood.HAPPY], 2)
        self.assertEqual(data.mood_counts[Mood.ANGRY], 0)
        self.assertEqual(data.category_counts[MoodCategory.NEGATIVE], 1)
        self.assertEqual(data.most_frequent_mood, Mood.HAPPY)

    async def test_mood_distribution_with_range(self):
        async with self.db() as session:
            result = await AnalyticsAggregator(session).mood_distribution(
                self.ctx, START + timedelta(days=1), START + timedelta(days=1)
            )
        self.assertEqual(result.data.total, 1)
        self.assertEqual(result.data.most_frequent_mood, Mood.SAD)

    async def test_tag_usage_orders_by_count_then_name(self):
        async with self.db() as session:
            result = await AnalyticsAggregator(session).tag_usage(self.ctx, top_n=3)

        self.assertEqual(
            [(i.name, i.count) for i in result.data.items],
            [("Work", 2), ("Art", 1), ("Music", 1)],
        )
        self.assertEqual(result.data.tag_counts["Work"], 2)

    async def test_tag_usage_defaults_and_validation(self):
        async with self.db() as session:
            service = AnalyticsAggregator(session)
            with patch.object(settings, "tag_usage_default_top_n", 2):
                default = await service.tag_usage(self.ctx)
            invalid = await service.tag_usage(self.ctx, top_n=0)

        self.assertEqual(default.data.top_n, 2)
        self.assertEqual(len(default.data.items), 2)
        self.assertFalse(invalid.success)
        self.assertEqual(invalid.error_kind, ErrorKind.VALIDATION)

    async def test_word_count_trend_skips_days_without_entries(self):
        async with self.db() as session:
            result = await AnalyticsAggregator(session).word_count_trend(
                self.ctx, START, START + timedelta(days=5)
            )

        data = result.data
        self.assertEqual(
            data.daily_word_counts,
            {START: 3, START + timedelta(days=1): 0, START + timedelta(days=3): 4},
        )
        self.assertNotIn(START + timedelta(days=2), data.daily_word_counts)
        self.assertEqual(data.total_words, 7)
        self.assertAlmostEqual(data.average_words_per_day, 7 / 3)

    async def test_word_count_trend_empty_range(self):
        async with self.db() as session:
            result = await AnalyticsAggregator(session).word_count_trend(
                self.ctx, START + timedelta(days=10), START + timedelta(days=20)
            )
        self.assertEqual(result.data.daily_word_counts, {})
        self.assertEqual(result.data.total_words, 0)
        self.assertEqual(result.data.average_words_per_day, 0.0)

    async def test_reversed_range_is_rejected(self):
        async with self.db() as session:
            result = await AnalyticsAggregator(session).word_count_trend(self.ctx, START, START - timedelta(days=1))
        self.assertEqual(result.error_kind, ErrorKind.VALIDATION)


if __name__ == "__main__":
    unittest.main()
