"""Standings Cache - Redis snapshots of computed standings."""
import json
import logging
from typing import Optional, Dict, Any
from datetime import datetime, timezone
from urllib.parse import urlparse

from redis import Redis

from core.leaderboard.models import StandingsSnapshot

logger = logging.getLogger(__name__)

FRESH_PREFIX = "standings:fresh"
LAST_GOOD_PREFIX = "standings:last"

CACHE_TTL_SECONDS = 60 * 60
LAST_GOOD_TTL_SECONDS = 7 * 24 * 60 * 60  # 604800 seconds


def _sanitize_url(url: str) -> str:
    """Remove credentials from URL for safe logging."""
    try:
        parsed = urlparse(url)
        if parsed.password:
            sanitized = parsed._replace(
                netloc=f"{parsed.username or ''}:*@{parsed.hostname}:{parsed.port or 6379}"
            )
            return sanitized.geturl()
        return url
    except Exception:
        return url


class StandingsCache:
    """
    Two copies of every computed standings snapshot:

    - fresh (short TTL): served directly; dropped by invalidate() when a
      period's results change
    - last good (long TTL): never invalidated; returned marked stale when a
      recomputation fails

    Redis being down disables the cache; reads then always recompute.
    """

    def __init__(
        self,
        redis_url: str = "redis://localhost:6379/0",
        ttl_seconds: int = CACHE_TTL_SECONDS,
        last_good_ttl_seconds: int = LAST_GOOD_TTL_SECONDS,
        client: Optional[Redis] = None
    ):
        self.redis_url = redis_url
        self.ttl_seconds = ttl_seconds
        self.last_good_ttl_seconds = last_good_ttl_seconds
        self._redis: Optional[Redis] = None
        self._available = False

        try:
            self._redis = client or Redis.from_url(
                redis_url,
                decode_responses=True,
                socket_connect_timeout=5,
                socket_timeout=5
            )
            self._redis.ping()
            self._available = True
            logger.info(f"Standings cache connected to Redis at {_sanitize_url(redis_url)}")
        except Exception as e:
            logger.warning(f"Standings cache Redis unavailable: {e}")
            self._redis = None
            self._available = False

    @property
    def is_available(self) -> bool:
        return self._available and self._redis is not None

    def _read(self, key: str) -> Optional[StandingsSnapshot]:
        if not self.is_available:
            return None
        try:
            data = self._redis.get(key)
            if not data:
                logger.debug(f"Cache miss for {key}")
                return None
            entry = json.loads(data)
            return StandingsSnapshot.from_dict(entry["data"])
        except Exception as e:
            logger.warning(f"Error reading from standings cache: {e}")
            return None

    def get_fresh(self, query_key: str) -> Optional[StandingsSnapshot]:
        return self._read(f"{FRESH_PREFIX}:{query_key}")

    def get_last_good(self, query_key: str) -> Optional[StandingsSnapshot]:
        return self._read(f"{LAST_GOOD_PREFIX}:{query_key}")

    def store(self, snapshot: StandingsSnapshot) -> bool:
        """Write a successfully computed snapshot as both fresh and last good."""
        if not self.is_available:
            return False

        try:
            payload = json.dumps({
                "data": snapshot.to_dict(),
                "cached_at": datetime.now(timezone.utc).isoformat(),
            })
            pipe = self._redis.pipeline()
            pipe.setex(f"{FRESH_PREFIX}:{snapshot.query_key}", self.ttl_seconds, payload)
            pipe.setex(f"{LAST_GOOD_PREFIX}:{snapshot.query_key}", self.last_good_ttl_seconds, payload)
            pipe.execute()
            logger.debug(f"Cached standings {snapshot.query_key} (TTL: {self.ttl_seconds}s)")
            return True
        except Exception as e:
            logger.warning(f"Error writing to standings cache: {e}")
            return False

    def invalidate(self, week: int, season: int) -> int:
        """Drop fresh snapshots affected by a change to one period.

        Covers the week's own standings plus every season-wide scope.
        """
        if not self.is_available:
            return 0

        patterns = [
            f"{FRESH_PREFIX}:{season}:week:{week}:*",
            f"{FRESH_PREFIX}:{season}:season:*",
            f"{FRESH_PREFIX}:{season}:best_finish:*",
        ]
        deleted = 0
        try:
            for pattern in patterns:
                cursor = 0
                while True:
                    cursor, keys = self._redis.scan(cursor=cursor, match=pattern, count=100)
                    if keys:
                        self._redis.delete(*keys)
                        deleted += len(keys)
                    if cursor == 0:
                        break
            logger.info(f"Invalidated {deleted} cached standings for week {week}, season {season}")
        except Exception as e:
            logger.warning(f"Error invalidating standings cache: {e}")
        return deleted

    def get_cache_stats(self) -> Dict[str, Any]:
        if not self.is_available:
            return {"available": False}

        try:
            info = self._redis.info()
            return {
                "available": True,
                "used_memory_human": info.get("used_memory_human", "unknown"),
                "ttl_seconds": self.ttl_seconds,
                "last_good_ttl_seconds": self.last_good_ttl_seconds,
            }
        except Exception as e:
            logger.warning(f"Error getting cache stats: {e}")
            return {"available": False, "error": str(e)}


# Global instance for application use
_standings_cache: Optional[StandingsCache] = None


def get_standings_cache() -> Optional[StandingsCache]:
    """Get global standings cache instance."""
    return _standings_cache


def init_standings_cache(
    redis_url: str,
    ttl_seconds: int = CACHE_TTL_SECONDS,
    last_good_ttl_seconds: int = LAST_GOOD_TTL_SECONDS
) -> StandingsCache:
    """Initialize global standings cache."""
    global _standings_cache
    _standings_cache = StandingsCache(redis_url, ttl_seconds, last_good_ttl_seconds)
    return _standings_cache
