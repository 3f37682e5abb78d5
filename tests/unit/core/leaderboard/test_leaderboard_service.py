#!/usr/bin/env python3
"""
Unit tests for LeaderboardService cache and fallback behaviour.
"""

import unittest
from unittest.mock import MagicMock, patch

from core.leaderboard.models import StandingEntry, StandingsQuery, StandingsSnapshot
from core.leaderboard.service import LeaderboardService


def _snapshot(query, generated_at='2025-12-01T00:00:00+00:00'):
    return StandingsSnapshot(
        query_key=query.cache_key,
        scope=query.scope,
        season=query.season,
        entries=[StandingEntry(user_id='u1', display_name='Alice', total_points=40, rank=1)],
        generated_at=generated_at
    )


class TestLeaderboardService(unittest.TestCase):

    def setUp(self):
        self.cache = MagicMock()
        self.service = LeaderboardService(cache=self.cache)
        self.query = StandingsQuery(scope='season', season=2025)

    def test_01_fresh_cache_hit_skips_compute(self):
        cached = _snapshot(self.query)
        self.cache.get_fresh.return_value = cached

        with patch.object(self.service, '_compute') as compute:
            result = self.service.get_standings(self.query)

        self.assertIs(result, cached)
        compute.assert_not_called()
        self.cache.get_fresh.assert_called_once_with('2025:season:all:any:all')

    def test_02_miss_computes_and_stores(self):
        self.cache.get_fresh.return_value = None
        computed = _snapshot(self.query)

        with patch.object(self.service, '_compute', return_value=computed):
            result = self.service.get_standings(self.query)

        self.assertIs(result, computed)
        self.assertFalse(result.stale)
        self.cache.store.assert_called_once_with(computed)

    def test_03_failure_serves_last_good_marked_stale(self):
        self.cache.get_fresh.return_value = None
        self.cache.get_last_good.return_value = _snapshot(self.query)

        with patch.object(self.service, '_compute', side_effect=RuntimeError("database down")):
            result = self.service.get_standings(self.query)

        self.assertTrue(result.available)
        self.assertTrue(result.stale)
        self.assertEqual(result.entries[0].display_name, 'Alice')
        self.cache.store.assert_not_called()

    def test_04_failure_without_last_good_is_unavailable(self):
        self.cache.get_fresh.return_value = None
        self.cache.get_last_good.return_value = None

        with patch.object(self.service, '_compute', side_effect=RuntimeError("database down")):
            result = self.service.get_standings(self.query)

        self.assertFalse(result.available)
        self.assertEqual(result.entries, [])
        self.assertEqual(result.query_key, self.query.cache_key)

    def test_05_no_cache_configured(self):
        service = LeaderboardService()

        with patch.object(service, '_compute', side_effect=RuntimeError("boom")):
            result = service.get_standings(self.query)

        self.assertFalse(result.available)
        self.assertEqual(service.invalidate(3, 2025), 0)

    def test_06_invalidate_delegates_to_cache(self):
        self.cache.invalidate.return_value = 4
        self.assertEqual(self.service.invalidate(3, 2025), 4)
        self.cache.invalidate.assert_called_once_with(3, 2025)


class TestStandingsQuery(unittest.TestCase):

    def test_01_week_scope_requires_week(self):
        with self.assertRaises(ValueError):
            StandingsQuery(scope='week', season=2025)

    def test_02_unknown_scope(self):
        with self.assertRaises(ValueError):
            StandingsQuery(scope='month', season=2025)

    def test_03_unknown_settlement_status(self):
        with self.assertRaises(ValueError):
            StandingsQuery(scope='season', season=2025, settlement_filter=frozenset({'refunded'}))

    def test_04_cache_key(self):
        query = StandingsQuery(scope='week', season=2025, week=3,
                               settlement_filter=frozenset({'unpaid', 'paid'}), limit=10)
        self.assertEqual(query.cache_key, '2025:week:3:paid,unpaid:10')

    def test_05_invalid_limit(self):
        with self.assertRaises(ValueError):
            StandingsQuery(scope='season', season=2025, limit=0)


if __name__ == '__main__':
    unittest.main()
