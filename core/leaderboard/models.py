#!/usr/bin/env python3
"""
Leaderboard Models - derived standings, never persisted as a source of truth.
"""

from typing import Any, Dict, FrozenSet, List, Optional
from dataclasses import dataclass, field, asdict

SCOPE_WEEK = 'week'
SCOPE_SEASON = 'season'
SCOPE_BEST_FINISH = 'best_finish'
SCOPES = (SCOPE_WEEK, SCOPE_SEASON, SCOPE_BEST_FINISH)

SETTLEMENT_STATUSES = ('paid', 'pending', 'unpaid')
DEFAULT_SETTLEMENT_STATUS = 'unpaid'


def _pct(wins: int, losses: int) -> float:
    # Pushes are excluded from the denominator
    decided = wins + losses
    if decided == 0:
        return 0.0
    return round(wins / decided, 3)


@dataclass
class StandingEntry:
    user_id: str
    display_name: str
    submissions: int = 0
    wins: int = 0
    losses: int = 0
    pushes: int = 0
    lock_wins: int = 0
    lock_losses: int = 0
    lock_pushes: int = 0
    total_points: int = 0
    settlement_status: str = DEFAULT_SETTLEMENT_STATUS
    rank: int = 0
    weeks_included: List[int] = field(default_factory=list)
    worst_week_score: Optional[int] = None

    @property
    def win_percentage(self) -> float:
        return _pct(self.wins, self.losses)

    @property
    def lock_win_percentage(self) -> float:
        return _pct(self.lock_wins, self.lock_losses)

    @property
    def record(self) -> str:
        return f"{self.wins}-{self.losses}-{self.pushes}"

    @property
    def lock_record(self) -> str:
        return f"{self.lock_wins}-{self.lock_losses}-{self.lock_pushes}"

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['win_percentage'] = self.win_percentage
        data['lock_win_percentage'] = self.lock_win_percentage
        data['record'] = self.record
        data['lock_record'] = self.lock_record
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'StandingEntry':
        fields = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        return cls(**fields)


@dataclass
class WeeklyDetail:
    """One week of a user's best-finish breakdown."""
    week: int
    submissions: int = 0
    points: int = 0
    wins: int = 0
    losses: int = 0
    pushes: int = 0
    lock_wins: int = 0
    lock_losses: int = 0
    lock_pushes: int = 0

    @property
    def record(self) -> str:
        return f"{self.wins}-{self.losses}-{self.pushes}"

    @property
    def lock_record(self) -> str:
        return f"{self.lock_wins}-{self.lock_losses}-{self.lock_pushes}"

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['record'] = self.record
        data['lock_record'] = self.lock_record
        return data


@dataclass(frozen=True)
class StandingsQuery:
    """
    What to rank.

    scope: 'week' (requires week), 'season', or 'best_finish'
    settlement_filter: only identities whose settlement status is in the set
    limit: truncate after ranking
    """
    scope: str
    season: int
    week: Optional[int] = None
    settlement_filter: Optional[FrozenSet[str]] = None
    limit: Optional[int] = None

    def __post_init__(self):
        if self.scope not in SCOPES:
            raise ValueError(f"Unknown standings scope '{self.scope}'")
        if self.scope == SCOPE_WEEK and self.week is None:
            raise ValueError("Week standings require a week")
        if self.limit is not None and self.limit < 1:
            raise ValueError("limit must be positive")
        if self.settlement_filter is not None:
            unknown = set(self.settlement_filter) - set(SETTLEMENT_STATUSES)
            if unknown:
                raise ValueError(f"Unknown settlement statuses: {', '.join(sorted(unknown))}")
            object.__setattr__(self, 'settlement_filter', frozenset(self.settlement_filter))

    @property
    def cache_key(self) -> str:
        week = self.week if self.scope == SCOPE_WEEK else 'all'
        settlement = ','.join(sorted(self.settlement_filter)) if self.settlement_filter else 'any'
        return f"{self.season}:{self.scope}:{week}:{settlement}:{self.limit or 'all'}"


@dataclass
class StandingsSnapshot:
    query_key: str
    scope: str
    season: int
    week: Optional[int] = None
    entries: List[StandingEntry] = field(default_factory=list)
    generated_at: Optional[str] = None
    stale: bool = False
    available: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            'query_key': self.query_key,
            'scope': self.scope,
            'season': self.season,
            'week': self.week,
            'entries': [entry.to_dict() for entry in self.entries],
            'generated_at': self.generated_at,
            'stale': self.stale,
            'available': self.available,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'StandingsSnapshot':
        return cls(
            query_key=data['query_key'],
            scope=data['scope'],
            season=data['season'],
            week=data.get('week'),
            entries=[StandingEntry.from_dict(e) for e in data.get('entries', [])],
            generated_at=data.get('generated_at'),
            stale=data.get('stale', False),
            available=data.get('available', True),
        )
