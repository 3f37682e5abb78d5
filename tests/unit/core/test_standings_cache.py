"""
Tests for the standings cache.

Redis-backed fresh and last-good snapshots with pattern invalidation.
"""
import pytest
import json
from unittest.mock import Mock, patch

from core.cache.standings_cache import (
    StandingsCache,
    get_standings_cache,
    init_standings_cache,
    CACHE_TTL_SECONDS,
    LAST_GOOD_TTL_SECONDS,
)
from core.leaderboard.models import StandingEntry, StandingsSnapshot


def _snapshot():
    return StandingsSnapshot(
        query_key="2025:season:all:any:all",
        scope="season",
        season=2025,
        entries=[StandingEntry(user_id="u1", display_name="Alice", total_points=46, wins=2, rank=1)],
        generated_at="2025-11-30T12:00:00+00:00"
    )


class TestStandingsCache:
    """Test suite for StandingsCache."""

    @pytest.fixture
    def mock_redis(self):
        """Create a mock Redis client."""
        mock = Mock()
        mock.ping.return_value = True
        mock.get.return_value = None
        mock.delete.return_value = 1
        mock.info.return_value = {"used_memory_human": "2M"}
        mock.scan.return_value = (0, [])
        return mock

    @pytest.fixture
    def cache(self, mock_redis):
        with patch('core.cache.standings_cache.Redis') as mock_redis_class:
            mock_redis_class.from_url.return_value = mock_redis
            return StandingsCache("redis://localhost:6379/0", ttl_seconds=300)

    def test_01_initialization_success(self, mock_redis):
        with patch('core.cache.standings_cache.Redis') as mock_redis_class:
            mock_redis_class.from_url.return_value = mock_redis

            cache = StandingsCache("redis://localhost:6379/0")

            assert cache.is_available is True
            assert cache.ttl_seconds == CACHE_TTL_SECONDS
            assert cache.last_good_ttl_seconds == LAST_GOOD_TTL_SECONDS
            mock_redis_class.from_url.assert_called_once()

    def test_02_initialization_failure(self):
        """Redis down disables the cache instead of raising."""
        with patch('core.cache.standings_cache.Redis') as mock_redis_class:
            mock_redis_class.from_url.side_effect = Exception("Connection refused")

            cache = StandingsCache("redis://localhost:6379/0")

            assert cache.is_available is False
            assert cache.get_fresh("anything") is None
            assert cache.store(_snapshot()) is False
            assert cache.invalidate(1, 2025) == 0
            assert cache.get_cache_stats() == {"available": False}

    def test_03_fresh_hit(self, cache, mock_redis):
        mock_redis.get.return_value = json.dumps({"data": _snapshot().to_dict(), "cached_at": "x"})

        result = cache.get_fresh("2025:season:all:any:all")

        assert result is not None
        assert result.entries[0].display_name == "Alice"
        assert result.entries[0].total_points == 46
        mock_redis.get.assert_called_once_with("standings:fresh:2025:season:all:any:all")

    def test_04_last_good_key(self, cache, mock_redis):
        assert cache.get_last_good("2025:season:all:any:all") is None
        mock_redis.get.assert_called_once_with("standings:last:2025:season:all:any:all")

    def test_05_store_writes_both_copies(self, cache, mock_redis):
        pipe = Mock()
        mock_redis.pipeline.return_value = pipe

        assert cache.store(_snapshot()) is True

        keys = [(c.args[0], c.args[1]) for c in pipe.setex.call_args_list]
        assert keys == [
            ("standings:fresh:2025:season:all:any:all", 300),
            ("standings:last:2025:season:all:any:all", LAST_GOOD_TTL_SECONDS),
        ]
        pipe.execute.assert_called_once()

    def test_06_read_error_is_a_miss(self, cache, mock_redis):
        mock_redis.get.side_effect = Exception("Redis error")
        assert cache.get_fresh("k") is None

    def test_07_invalidate_scans_period_and_season_scopes(self, cache, mock_redis):
        mock_redis.scan.side_effect = [
            (0, ["standings:fresh:2025:week:3:any:all"]),
            (0, ["standings:fresh:2025:season:all:any:all", "standings:fresh:2025:season:all:paid:all"]),
            (0, []),
        ]

        deleted = cache.invalidate(3, 2025)

        assert deleted == 3
        patterns = [c.kwargs["match"] for c in mock_redis.scan.call_args_list]
        assert patterns == [
            "standings:fresh:2025:week:3:*",
            "standings:fresh:2025:season:*",
            "standings:fresh:2025:best_finish:*",
        ]
        assert mock_redis.delete.call_count == 2

    def test_08_cache_stats(self, cache):
        stats = cache.get_cache_stats()
        assert stats["available"] is True
        assert stats["used_memory_human"] == "2M"
        assert stats["ttl_seconds"] == 300


class TestGlobalCache:

    def test_init_sets_global(self):
        with patch('core.cache.standings_cache.Redis') as mock_redis_class:
            mock_redis_class.from_url.return_value = Mock()
            cache = init_standings_cache("redis://localhost:6379/0")
            assert get_standings_cache() is cache
