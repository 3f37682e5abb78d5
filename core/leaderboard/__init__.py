from core.leaderboard.models import (
    StandingEntry,
    StandingsQuery,
    StandingsSnapshot,
    WeeklyDetail,
)
from core.leaderboard.aggregation import (
    aggregate_standings,
    rank_standings,
    rank_best_finish,
)
from core.leaderboard.service import LeaderboardService

__all__ = [
    'StandingEntry',
    'StandingsQuery',
    'StandingsSnapshot',
    'WeeklyDetail',
    'aggregate_standings',
    'rank_standings',
    'rank_best_finish',
    'LeaderboardService',
]
