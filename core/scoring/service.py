#!/usr/bin/env python3
"""
Outcome Service - loads contests and freezes their computed outcome.

A contest's covering side and margin bonus are written once, when it is
completed. freeze_outcome() refuses to replace a different frozen value;
recompute_outcome() is the only path that changes one, and it is logged.
"""

import logging
from typing import Any, Optional

from core.config_loader import ScoringConfig
from core.exceptions import (
    ContestNotFoundException,
    IncompleteContestException,
    OutcomeFrozenException,
)
from core.scoring.models import ContestOutcome
from core.scoring.outcome import calculate_outcome
from database.models import Contest
from database.uow import ledger_uow

logger = logging.getLogger(__name__)


class OutcomeService:
    def __init__(self, config: Optional[ScoringConfig] = None):
        self.config = config or ScoringConfig()

    def _calculate(self, contest: Contest) -> ContestOutcome:
        if contest.home_score is None or contest.away_score is None:
            raise IncompleteContestException(contest.id)
        return calculate_outcome(
            contest.home_score,
            contest.away_score,
            contest.handicap,
            self.config
        )

    def _load(self, repo, contest_id: Any, for_update: bool = False) -> Contest:
        if for_update:
            contest = repo.contests.get_for_update(contest_id)
        else:
            contest = repo.contests.get_by_id(contest_id)
        if contest is None:
            raise ContestNotFoundException(contest_id)
        return contest

    def compute_outcome(self, contest_id: Any) -> ContestOutcome:
        """Compute (without storing) the outcome from the contest's current scores."""
        with ledger_uow(read_only=True) as repo:
            contest = self._load(repo, contest_id)
            return self._calculate(contest)

    def freeze_outcome(self, contest_id: Any) -> ContestOutcome:
        """
        Store the outcome on a completed contest.

        No-op when the same outcome is already frozen.

        Raises:
            IncompleteContestException: contest not completed or missing a score
            OutcomeFrozenException: a different outcome is already frozen
        """
        with ledger_uow() as repo:
            contest = self._load(repo, contest_id, for_update=True)
            if not contest.is_completed:
                raise IncompleteContestException(contest_id, f"status is '{contest.status}'")

            outcome = self._calculate(contest)

            if contest.outcome_frozen:
                if (contest.covering_side, contest.margin_bonus) == (outcome.covering_side, outcome.margin_bonus):
                    return outcome
                raise OutcomeFrozenException(
                    f"Contest {contest_id} already frozen as {contest.covering_side}/+{contest.margin_bonus}; "
                    f"current scores give {outcome.covering_side}/+{outcome.margin_bonus}. "
                    f"Use recompute_outcome() with a reason."
                )

            repo.contests.store_outcome(
                contest,
                outcome.covering_side,
                outcome.margin_bonus,
                self.config.base_points
            )
            logger.info(
                f"Froze outcome for contest {contest_id} ({contest.away_team} @ {contest.home_team}): "
                f"{outcome.covering_side} covers by {outcome.margin}, bonus {outcome.margin_bonus}"
            )
            return outcome

    def recompute_outcome(self, contest_id: Any, reason: str) -> ContestOutcome:
        """Replace a frozen outcome from the current scores. Requires a reason."""
        if not reason or not reason.strip():
            raise OutcomeFrozenException("Recomputing a frozen outcome requires a reason")

        with ledger_uow() as repo:
            contest = self._load(repo, contest_id, for_update=True)
            if not contest.is_completed:
                raise IncompleteContestException(contest_id, f"status is '{contest.status}'")

            outcome = self._calculate(contest)
            old_side, old_bonus = contest.covering_side, contest.margin_bonus

            repo.contests.store_outcome(
                contest,
                outcome.covering_side,
                outcome.margin_bonus,
                self.config.base_points,
                recomputed_reason=reason.strip()
            )
            logger.warning(
                f"Recomputed outcome for contest {contest_id}: "
                f"{old_side}/+{old_bonus} -> {outcome.covering_side}/+{outcome.margin_bonus} (reason: {reason.strip()})"
            )
            return outcome

    def clear_outcome(self, contest_id: Any) -> bool:
        """Drop the frozen outcome of a contest that is no longer completed."""
        with ledger_uow() as repo:
            contest = self._load(repo, contest_id, for_update=True)
            if contest.is_completed or not contest.outcome_frozen:
                return False
            logger.warning(
                f"Clearing frozen outcome {contest.covering_side}/+{contest.margin_bonus} for contest "
                f"{contest_id}; status reverted to '{contest.status}'"
            )
            contest.covering_side = None
            contest.margin_bonus = None
            contest.outcome_frozen_at = None
            return True
