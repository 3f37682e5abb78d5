#!/usr/bin/env python3
"""
Leaderboard Service - read-time standings with a last-good fallback.

Standings are recomputed from the submission ledger on every cache miss.
A failed recomputation never reaches the caller: the last good snapshot is
returned marked stale, or an empty snapshot with available=False when
there is none.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from core.config_loader import LeaderboardConfig
from core.exceptions import IdentityNotFoundException
from core.leaderboard.aggregation import (
    aggregate_standings,
    rank_standings,
    rank_best_finish,
    best_finish_weeks,
    weekly_details,
)
from core.leaderboard.models import (
    StandingsQuery,
    StandingsSnapshot,
    SCOPE_WEEK,
    SCOPE_BEST_FINISH,
)
from database.uow import ledger_uow

logger = logging.getLogger(__name__)


class LeaderboardService:
    def __init__(
        self,
        config: Optional[LeaderboardConfig] = None,
        cache=None
    ):
        self.config = config or LeaderboardConfig()
        self.cache = cache

    def _best_finish_weeks(self, repo, season: int) -> List[int]:
        final_week = self.config.season_final_week or repo.standings.get_final_week(season)
        if not final_week:
            return []
        return best_finish_weeks(final_week, self.config.best_finish_weeks)

    def _compute(self, query: StandingsQuery) -> StandingsSnapshot:
        limit = query.limit or self.config.default_limit

        with ledger_uow(read_only=True) as repo:
            if query.scope == SCOPE_WEEK:
                weeks = [query.week]
            elif query.scope == SCOPE_BEST_FINISH:
                weeks = self._best_finish_weeks(repo, query.season)
            else:
                weeks = None

            rows = repo.standings.get_counted_rows(query.season, weeks) if weeks != [] else []
            statuses = repo.settlement.get_statuses(query.season)

        entries = aggregate_standings(rows, statuses, query.settlement_filter)
        if query.scope == SCOPE_BEST_FINISH:
            ranked = rank_best_finish(entries, limit)
        else:
            ranked = rank_standings(entries, limit)

        return StandingsSnapshot(
            query_key=query.cache_key,
            scope=query.scope,
            season=query.season,
            week=query.week if query.scope == SCOPE_WEEK else None,
            entries=ranked,
            generated_at=datetime.now(timezone.utc).isoformat()
        )

    def get_standings(self, query: StandingsQuery) -> StandingsSnapshot:
        """Ranked standings for a query. Never raises for internal failures."""
        if self.cache is not None:
            cached = self.cache.get_fresh(query.cache_key)
            if cached is not None:
                return cached

        try:
            snapshot = self._compute(query)
        except Exception:
            logger.exception(f"Failed to compute standings {query.cache_key}")
            last_good = self.cache.get_last_good(query.cache_key) if self.cache is not None else None
            if last_good is not None:
                last_good.stale = True
                logger.warning(f"Serving stale standings {query.cache_key} from {last_good.generated_at}")
                return last_good
            return StandingsSnapshot(
                query_key=query.cache_key,
                scope=query.scope,
                season=query.season,
                week=query.week,
                available=False
            )

        if self.cache is not None:
            self.cache.store(snapshot)
        return snapshot

    def get_best_finish_details(self, user_id: Any, season: int) -> Dict[str, Any]:
        """Per-week breakdown of one identity's best-finish weeks."""
        with ledger_uow(read_only=True) as repo:
            user = repo.users.get_by_id(user_id)
            if user is None:
                raise IdentityNotFoundException(user_id)
            weeks = self._best_finish_weeks(repo, season)
            rows = repo.standings.get_counted_rows(season, weeks) if weeks else []
            display_name = user.display_name or user.email

        user_rows = [row for row in rows if str(row['user_id']) == str(user_id)]
        details = weekly_details(user_rows)
        return {
            'user_id': str(user_id),
            'display_name': display_name,
            'season': season,
            'best_finish_weeks': weeks,
            'weeks': [detail.to_dict() for detail in details],
            'total_points': sum(detail.points for detail in details),
        }

    def invalidate(self, week: int, season: int) -> int:
        if self.cache is None:
            return 0
        return self.cache.invalidate(week, season)
