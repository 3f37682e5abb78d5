import os
from dataclasses import dataclass
from typing import Optional

from core.cache.standings_cache import StandingsCache, get_standings_cache, init_standings_cache
from core.config_loader import AppConfig
from core.leaderboard.service import LeaderboardService
from core.precedence.service import PrecedenceService
from core.scoring.resolver import PickResolver
from core.scoring.service import OutcomeService
from pipeline.control import PipelineController
from pipeline.runner import BatchScheduler


@dataclass
class AppContext:
    """Application context container that holds all wired services.

    Services hold configuration only; DB access goes through ledger_uow()
    inside each operation.
    """
    config: AppConfig
    outcome_service: OutcomeService
    resolver: PickResolver
    precedence_service: PrecedenceService
    leaderboard_service: LeaderboardService
    scheduler: BatchScheduler
    standings_cache: Optional[StandingsCache] = None

    @classmethod
    def build(cls, config: AppConfig, standings_cache: Optional[StandingsCache] = None) -> "AppContext":
        """Build an AppContext from config.

        Args:
            config: Loaded application configuration
            standings_cache: Pre-built cache; built from config.cache when omitted

        Returns:
            Fully wired AppContext instance (no DB session attached)
        """
        if standings_cache is None:
            standings_cache = cls._build_standings_cache(config)

        outcome_service = OutcomeService(config.scoring)
        resolver = PickResolver(config.scoring, config.batch, outcome_service)
        leaderboard_service = LeaderboardService(config.leaderboard, standings_cache)
        scheduler = BatchScheduler(
            outcome_service=outcome_service,
            resolver=resolver,
            leaderboard=leaderboard_service,
            config=config.batch,
            controller=PipelineController(config.batch.lock_file)
        )

        return cls(
            config=config,
            outcome_service=outcome_service,
            resolver=resolver,
            precedence_service=PrecedenceService(config.precedence, leaderboard_service),
            leaderboard_service=leaderboard_service,
            scheduler=scheduler,
            standings_cache=standings_cache
        )

    @staticmethod
    def _build_standings_cache(config: AppConfig) -> Optional[StandingsCache]:
        """Build the Redis standings cache if enabled in config.

        Reuses the process-wide cache when one is already initialized, so
        building a second context does not open a second Redis client.
        """
        cache_config = config.cache
        if not cache_config or not cache_config.enabled:
            return None

        existing = get_standings_cache()
        if existing is not None:
            return existing

        redis_url = cache_config.redis_url or os.environ.get("REDIS_URL", "redis://localhost:6379/0")
        return init_standings_cache(
            redis_url,
            ttl_seconds=cache_config.ttl_seconds,
            last_good_ttl_seconds=cache_config.last_good_ttl_seconds
        )
