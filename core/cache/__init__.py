"""Cache Module - Caching services."""
from core.cache.standings_cache import (
    StandingsCache,
    get_standings_cache,
    init_standings_cache,
    CACHE_TTL_SECONDS,
    LAST_GOOD_TTL_SECONDS
)

__all__ = [
    'StandingsCache',
    'get_standings_cache',
    'init_standings_cache',
    'CACHE_TTL_SECONDS',
    'LAST_GOOD_TTL_SECONDS'
]
