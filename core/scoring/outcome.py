#!/usr/bin/env python3
"""
Outcome Calculation - covering side and margin bonus for a final score.

adjusted_home = home_score + handicap (handicap is signed, home perspective).
The contest is a push only when adjusted_home equals away_score exactly;
otherwise the side with the larger adjusted value covers. All arithmetic is
done in Decimal so half-point handicaps never drift.
"""

from decimal import Decimal
from typing import Any, Optional, Sequence

from core.config_loader import ScoringConfig, BonusTier
from core.scoring.models import ContestOutcome, HOME, AWAY, PUSH


def _to_decimal(value: Any) -> Decimal:
    if isinstance(value, Decimal):
        return value
    # str() first so floats like -6.5 don't carry binary noise
    return Decimal(str(value))


def margin_bonus_for(margin: Decimal, tiers: Sequence[BonusTier]) -> int:
    """Bonus for a covering margin; tiers are checked from the highest threshold down."""
    for tier in sorted(tiers, key=lambda t: t.min_margin, reverse=True):
        if margin >= _to_decimal(tier.min_margin):
            return tier.bonus
    return 0


def calculate_outcome(
    home_score: int,
    away_score: int,
    handicap: Any,
    config: Optional[ScoringConfig] = None
) -> ContestOutcome:
    """
    Compute the covering side and margin bonus.

    Args:
        home_score: Final home score
        away_score: Final away score
        handicap: Signed home handicap (e.g. -6.5 means home gives 6.5)
        config: ScoringConfig for bonus tiers (defaults if omitted)

    Returns:
        ContestOutcome; a push always carries bonus 0
    """
    if home_score is None or away_score is None:
        raise ValueError("Both scores are required to calculate an outcome")

    config = config or ScoringConfig()
    adjusted_home = _to_decimal(home_score) + _to_decimal(handicap)
    away = _to_decimal(away_score)

    if adjusted_home == away:
        return ContestOutcome(
            covering_side=PUSH,
            margin=Decimal('0'),
            margin_bonus=0,
            adjusted_home=adjusted_home,
            away_score=away_score
        )

    covering_side = HOME if adjusted_home > away else AWAY
    margin = abs(adjusted_home - away)

    return ContestOutcome(
        covering_side=covering_side,
        margin=margin,
        margin_bonus=margin_bonus_for(margin, config.bonus_tiers),
        adjusted_home=adjusted_home,
        away_score=away_score
    )
