#!/usr/bin/env python3
"""
Scoring Module - contest outcomes and submission resolution.

Public API:
- calculate_outcome: Pure covering side / margin bonus calculation
- award_points: Pure (result, points) for one submission
- OutcomeService: Compute, freeze and explicitly recompute contest outcomes
- PickResolver: Chunked, idempotent resolution of both submission channels

- models.py: Data structures (ContestOutcome, ContestResolution)
- outcome.py: Handicap arithmetic and bonus tiers
- points.py: Point awards and per-contest result targets
- service.py: OutcomeService
- resolver.py: PickResolver
"""

from core.scoring.models import ContestOutcome, ContestResolution
from core.scoring.outcome import calculate_outcome, margin_bonus_for
from core.scoring.points import award_points, build_targets
from core.scoring.service import OutcomeService
from core.scoring.resolver import PickResolver

__all__ = [
    'ContestOutcome',
    'ContestResolution',
    'calculate_outcome',
    'margin_bonus_for',
    'award_points',
    'build_targets',
    'OutcomeService',
    'PickResolver',
]
