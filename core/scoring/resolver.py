#!/usr/bin/env python3
"""
Pick Resolver - writes result/points_awarded for every submission on a contest.

Each chunk is its own short transaction: lock up to chunk_size rows whose
stored (result, points) differ from the target, write them, commit. Rows
already matching are never selected, so reruns touch nothing and an
interrupted run picks up where it stopped.

Only result and points_awarded are written. is_active, visibility and
selection fields belong to other writers.
"""

import time
import logging
import threading
from typing import Any, Optional

from sqlalchemy.exc import OperationalError, DBAPIError
from tenacity import (
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_fixed,
    before_sleep_log,
)

from core.config_loader import ScoringConfig, BatchConfig
from core.exceptions import ContestNotFoundException, IncompleteContestException
from core.scoring.models import ContestResolution, PENDING
from core.scoring.points import build_targets, pending_targets
from core.scoring.service import OutcomeService
from database.uow import ledger_uow

logger = logging.getLogger(__name__)

CHANNELS = ('identified', 'guest')


def _is_retryable_db_error(exc: BaseException) -> bool:
    """
    Lock timeouts, deadlocks and serialization failures surface as
    OperationalError; a dropped connection invalidates the DBAPI connection.
    Constraint and programming errors are not retried.
    """
    if isinstance(exc, OperationalError):
        return True
    if isinstance(exc, DBAPIError):
        return bool(exc.connection_invalidated)
    return False


def _chunk_retry(attempts: int, wait_seconds: float):
    """Return a tenacity @retry decorator for a single chunk write."""
    return retry(
        retry=retry_if_exception(_is_retryable_db_error),
        stop=stop_after_attempt(max(1, attempts)),
        wait=wait_fixed(wait_seconds),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )


class PickResolver:
    """Resolves both submission channels of a contest in fixed-size chunks."""

    def __init__(
        self,
        scoring_config: Optional[ScoringConfig] = None,
        batch_config: Optional[BatchConfig] = None,
        outcome_service: Optional[OutcomeService] = None
    ):
        self.scoring_config = scoring_config or ScoringConfig()
        self.batch_config = batch_config or BatchConfig()
        self.outcome_service = outcome_service or OutcomeService(self.scoring_config)
        self._write_chunk = _chunk_retry(
            self.batch_config.retry_attempts,
            self.batch_config.retry_wait_seconds
        )(self._write_chunk_once)

    def _write_chunk_once(self, contest_id: Any, channel: str, targets, chunk_size: int) -> int:
        with ledger_uow() as repo:
            channel_repo = repo.channel(channel)
            rows = channel_repo.get_stale_for_contest(contest_id, targets, chunk_size)
            if not rows:
                return 0
            return channel_repo.apply_results(rows, targets)

    def _run_chunks(
        self,
        resolution: ContestResolution,
        targets,
        chunk_size: int,
        stop_event: Optional[threading.Event]
    ) -> ContestResolution:
        pause = self.batch_config.chunk_pause_seconds

        for channel in CHANNELS:
            while True:
                if stop_event is not None and stop_event.is_set():
                    logger.info(f"Resolution of contest {resolution.contest_id} interrupted before {channel} chunk")
                    resolution.interrupted = True
                    return resolution

                updated = self._write_chunk(resolution.contest_id, channel, targets, chunk_size)
                if updated == 0:
                    break

                resolution.updated[channel] += updated
                resolution.chunks += 1
                logger.debug(f"Contest {resolution.contest_id}: {channel} chunk wrote {updated} rows")

                if updated < chunk_size:
                    break
                if pause > 0:
                    time.sleep(pause)

        return resolution

    def _count_rows(self, resolution: ContestResolution) -> None:
        with ledger_uow(read_only=True) as repo:
            for channel in CHANNELS:
                resolution.examined[channel] = repo.channel(channel).count_for_contest(resolution.contest_id)

    def resolve_contest(
        self,
        contest_id: Any,
        chunk_size: Optional[int] = None,
        stop_event: Optional[threading.Event] = None
    ) -> ContestResolution:
        """
        Resolve every submission referencing a completed contest.

        Freezes the outcome first if the contest has none.

        Raises:
            ContestNotFoundException: unknown contest
            IncompleteContestException: contest not completed or missing a score
        """
        chunk_size = chunk_size or self.batch_config.chunk_size

        with ledger_uow(read_only=True) as repo:
            contest = repo.contests.get_by_id(contest_id)
            if contest is None:
                raise ContestNotFoundException(contest_id)
            if not contest.is_completed:
                raise IncompleteContestException(contest_id, f"status is '{contest.status}'")
            needs_freeze = not contest.outcome_frozen

        if needs_freeze:
            self.outcome_service.freeze_outcome(contest_id)

        with ledger_uow(read_only=True) as repo:
            contest = repo.contests.get_by_id(contest_id)
            covering_side = contest.covering_side
            margin_bonus = contest.margin_bonus
            base_points = contest.base_points
            week, season = contest.week, contest.season

        targets = build_targets(
            covering_side,
            margin_bonus,
            base_points=base_points,
            push_points=self.scoring_config.push_points
        )

        resolution = ContestResolution(
            contest_id=contest_id,
            week=week,
            season=season,
            covering_side=covering_side,
            margin_bonus=margin_bonus
        )
        self._count_rows(resolution)
        self._run_chunks(resolution, targets, chunk_size, stop_event)

        logger.info(
            f"Resolved contest {contest_id}: {covering_side}/+{margin_bonus}, "
            f"updated {resolution.updated['identified']} identified and "
            f"{resolution.updated['guest']} guest submissions "
            f"(of {resolution.total_examined})"
        )
        return resolution

    def reset_contest(
        self,
        contest_id: Any,
        chunk_size: Optional[int] = None,
        stop_event: Optional[threading.Event] = None
    ) -> ContestResolution:
        """Return a no-longer-completed contest's submissions to pending / 0 points."""
        chunk_size = chunk_size or self.batch_config.chunk_size

        with ledger_uow(read_only=True) as repo:
            contest = repo.contests.get_by_id(contest_id)
            if contest is None:
                raise ContestNotFoundException(contest_id)
            if contest.is_completed:
                raise IncompleteContestException(contest_id, "contest is completed; resolve it instead of resetting")
            week, season = contest.week, contest.season

        self.outcome_service.clear_outcome(contest_id)

        resolution = ContestResolution(
            contest_id=contest_id,
            week=week,
            season=season,
            covering_side=PENDING,
            margin_bonus=0
        )
        self._count_rows(resolution)
        self._run_chunks(resolution, pending_targets(), chunk_size, stop_event)

        if resolution.total_updated:
            logger.warning(
                f"Reset {resolution.total_updated} submissions on contest {contest_id} to pending "
                f"after it left completed status"
            )
        return resolution
