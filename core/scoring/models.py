#!/usr/bin/env python3
"""
Scoring Models - Data structures for contest outcomes and resolution results.
"""

from decimal import Decimal
from typing import Any, Dict, Optional
from dataclasses import dataclass, field


HOME = 'home'
AWAY = 'away'
PUSH = 'push'

WIN = 'win'
LOSS = 'loss'
PENDING = 'pending'

SIDES = (HOME, AWAY)


@dataclass(frozen=True)
class ContestOutcome:
    """Covering side and bonus for a finished contest against its handicap."""
    covering_side: str
    margin: Decimal
    margin_bonus: int
    adjusted_home: Decimal
    away_score: int

    @property
    def is_push(self) -> bool:
        return self.covering_side == PUSH

    def to_dict(self) -> Dict[str, Any]:
        return {
            'covering_side': self.covering_side,
            'margin': float(self.margin),
            'margin_bonus': self.margin_bonus,
            'adjusted_home': float(self.adjusted_home),
            'away_score': self.away_score,
        }


@dataclass
class ContestResolution:
    """Result of resolving (or resetting) one contest's submissions."""
    contest_id: Any
    week: Optional[int] = None
    season: Optional[int] = None
    covering_side: str = PENDING
    margin_bonus: int = 0
    examined: Dict[str, int] = field(default_factory=lambda: {'identified': 0, 'guest': 0})
    updated: Dict[str, int] = field(default_factory=lambda: {'identified': 0, 'guest': 0})
    chunks: int = 0
    interrupted: bool = False

    @property
    def total_updated(self) -> int:
        return sum(self.updated.values())

    @property
    def total_examined(self) -> int:
        return sum(self.examined.values())

    def to_dict(self) -> Dict[str, Any]:
        return {
            'contest_id': str(self.contest_id),
            'week': self.week,
            'season': self.season,
            'covering_side': self.covering_side,
            'margin_bonus': self.margin_bonus,
            'examined': dict(self.examined),
            'updated': dict(self.updated),
            'total_updated': self.total_updated,
            'chunks': self.chunks,
            'interrupted': self.interrupted,
        }
