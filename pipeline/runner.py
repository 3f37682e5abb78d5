"""Batch resolution runner.

Orchestrates outcome freezing, submission resolution and standings cache
invalidation for single contests and whole scoring periods. Used by both
main.py and the web application.
"""

import time
import logging
import threading
from typing import List, Optional, Dict, Any
from dataclasses import dataclass, field

from core.config_loader import BatchConfig
from core.exceptions import ContestNotFoundException, TransientBatchFailure
from core.leaderboard.service import LeaderboardService
from core.scoring.models import ContestResolution
from core.scoring.resolver import PickResolver, CHANNELS
from core.scoring.service import OutcomeService
from database.uow import ledger_uow
from pipeline.control import PipelineController

logger = logging.getLogger(__name__)

COMPLETED = 'completed'


def _failure_record(failure: TransientBatchFailure) -> Dict[str, str]:
    return {
        'contest_id': str(failure.contest_id),
        'error': str(failure),
        'type': failure.cause.__class__.__name__,
    }


@dataclass
class BatchSummary:
    """Result of resolving one scoring period."""
    week: int
    season: int
    success: bool = True
    contests_processed: int = 0
    submissions_updated: int = 0
    errors: List[Dict[str, str]] = field(default_factory=list)
    execution_time: float = 0.0
    interrupted: bool = False
    resolutions: List[ContestResolution] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'week': self.week,
            'season': self.season,
            'success': self.success,
            'contests_processed': self.contests_processed,
            'submissions_updated': self.submissions_updated,
            'errors': list(self.errors),
            'execution_time': round(self.execution_time, 3),
            'interrupted': self.interrupted,
            'resolutions': [r.to_dict() for r in self.resolutions],
        }


@dataclass
class ContestUpdateResult:
    """Result of one live-feed update; resolution is set when the update triggered one."""
    contest_id: Any
    previous_status: str
    status: str
    resolution: Optional[ContestResolution] = None
    error: Optional[Dict[str, str]] = None

    @property
    def success(self) -> bool:
        return self.error is None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'contest_id': str(self.contest_id),
            'previous_status': self.previous_status,
            'status': self.status,
            'success': self.success,
            'resolution': self.resolution.to_dict() if self.resolution else None,
            'error': self.error,
        }


class BatchScheduler:
    """
    Explicit orchestrator for scoring work.

    Contest status transitions are detected at the call site
    (apply_score_update / handle_contest_update); a transition into
    'completed', or an update of a completed contest left unresolved,
    triggers resolution and only a transition out of it triggers a reset.
    Transactions never span contests.
    """

    def __init__(
        self,
        outcome_service: Optional[OutcomeService] = None,
        resolver: Optional[PickResolver] = None,
        leaderboard: Optional[LeaderboardService] = None,
        config: Optional[BatchConfig] = None,
        controller: Optional[PipelineController] = None
    ):
        self.config = config or BatchConfig()
        self.outcome_service = outcome_service or OutcomeService()
        self.resolver = resolver or PickResolver(
            batch_config=self.config,
            outcome_service=self.outcome_service
        )
        self.leaderboard = leaderboard
        self.controller = controller or PipelineController(self.config.lock_file)

    def _invalidate(self, resolution: ContestResolution) -> None:
        if self.leaderboard is not None and resolution.week is not None:
            self.leaderboard.invalidate(resolution.week, resolution.season)

    def resolve_contest(
        self,
        contest_id: Any,
        chunk_size: Optional[int] = None,
        stop_event: Optional[threading.Event] = None
    ) -> ContestResolution:
        """Freeze the outcome (if needed) and resolve both channels of one contest."""
        resolution = self.resolver.resolve_contest(
            contest_id,
            chunk_size=chunk_size or self.config.chunk_size,
            stop_event=stop_event
        )
        self._invalidate(resolution)
        return resolution

    def recompute_contest(self, contest_id: Any, reason: str, chunk_size: Optional[int] = None) -> ContestResolution:
        """Replace a frozen outcome from corrected scores, then re-resolve."""
        self.outcome_service.recompute_outcome(contest_id, reason)
        return self.resolve_contest(contest_id, chunk_size)

    def resolve_period(
        self,
        week: int,
        season: int,
        chunk_size: Optional[int] = None,
        stop_event: Optional[threading.Event] = None
    ) -> BatchSummary:
        """
        Resolve every completed contest of a period, one contest at a time.

        A failing contest is logged and recorded; the run moves on to the
        next one. Safe to rerun: already resolved submissions are skipped.
        """
        if stop_event is None:
            stop_event = threading.Event()

        run_start = time.time()
        chunk_size = chunk_size or self.config.chunk_size
        summary = BatchSummary(week=week, season=season)

        logger.info("=" * 60)
        logger.info(f"RESOLVING WEEK {week}, SEASON {season} (chunk size {chunk_size})")
        logger.info("=" * 60)

        with ledger_uow(read_only=True) as repo:
            contest_ids = repo.contests.list_completed_ids(week, season)

        logger.info(f"Found {len(contest_ids)} completed contests")

        for index, contest_id in enumerate(contest_ids, start=1):
            if stop_event.is_set():
                logger.info(f"Stop requested; {len(contest_ids) - index + 1} contests left unresolved")
                summary.interrupted = True
                break

            try:
                resolution = self.resolve_contest(contest_id, chunk_size, stop_event)
            except Exception as e:
                failure = TransientBatchFailure(contest_id, e)
                logger.exception(f"[{index}/{len(contest_ids)}] Contest {contest_id} failed: {failure}")
                summary.errors.append(_failure_record(failure))
                continue

            summary.resolutions.append(resolution)
            summary.contests_processed += 1
            summary.submissions_updated += resolution.total_updated
            logger.info(
                f"[{index}/{len(contest_ids)}] Contest {contest_id}: "
                f"{resolution.total_updated} submissions updated"
            )

            if resolution.interrupted:
                summary.interrupted = True
                break

        summary.success = not summary.errors
        summary.execution_time = time.time() - run_start

        logger.info("=" * 60)
        logger.info(
            f"WEEK {week} RESOLUTION {'INTERRUPTED' if summary.interrupted else 'COMPLETE'}: "
            f"{summary.contests_processed} contests, {summary.submissions_updated} submissions updated, "
            f"{len(summary.errors)} errors in {summary.execution_time:.2f}s"
        )
        logger.info("=" * 60)
        return summary

    def run_period(
        self,
        week: int,
        season: int,
        chunk_size: Optional[int] = None,
        source: str = 'cli',
        stop_event: Optional[threading.Event] = None
    ) -> BatchSummary:
        """resolve_period() under the cross-process batch lock."""
        with self.controller.hold(source, week=week, season=season):
            return self.resolve_period(week, season, chunk_size, stop_event)

    def handle_contest_update(
        self,
        contest_id: Any,
        previous_status: str,
        new_status: str,
        unresolved: bool = False
    ) -> Optional[ContestResolution]:
        """
        React to a contest status change. Score and clock ticks do nothing.

        unresolved: the contest was already completed but its outcome is not
            frozen or some submissions are still pending, so an earlier
            completion trigger did not finish and resolution runs again.
        """
        if new_status == COMPLETED and previous_status != COMPLETED:
            logger.info(f"Contest {contest_id} completed ({previous_status} -> {new_status}); resolving")
            return self.resolve_contest(contest_id)

        if new_status == COMPLETED and unresolved:
            logger.info(f"Contest {contest_id} is completed but not fully resolved; resolving")
            return self.resolve_contest(contest_id)

        if previous_status == COMPLETED and new_status != COMPLETED:
            logger.warning(f"Contest {contest_id} left completed status ({previous_status} -> {new_status}); resetting")
            resolution = self.resolver.reset_contest(contest_id, self.config.chunk_size)
            self._invalidate(resolution)
            return resolution

        return None

    def apply_score_update(
        self,
        contest_id: Any,
        home_score: Optional[int],
        away_score: Optional[int],
        status: str,
        game_period: Optional[int] = None,
        clock: Optional[str] = None
    ) -> ContestUpdateResult:
        """
        Write a live-feed update (scores, clock, status only), then act on
        the status transition it caused.

        The write commits before resolution starts. A resolution failure is
        logged and returned in the result rather than raised; the next
        update of the still-unresolved contest triggers resolution again.

        Raises:
            ContestNotFoundException: unknown contest (nothing is written)
        """
        with ledger_uow() as repo:
            contest = repo.contests.get_for_update(contest_id)
            if contest is None:
                raise ContestNotFoundException(contest_id)
            old_scores = (contest.home_score, contest.away_score)
            previous_status = repo.contests.apply_score_update(
                contest, home_score, away_score, status, game_period, clock
            )
            unresolved = False
            if previous_status == COMPLETED and status == COMPLETED:
                if contest.outcome_frozen and old_scores != (home_score, away_score):
                    logger.warning(
                        f"Contest {contest_id} score changed after completion "
                        f"({old_scores[0]}-{old_scores[1]} -> {home_score}-{away_score}); "
                        f"frozen outcome kept, recompute explicitly to apply"
                    )
                unresolved = not contest.outcome_frozen or any(
                    repo.channel(channel).count_pending_for_contest(contest_id) for channel in CHANNELS
                )

        result = ContestUpdateResult(contest_id=contest_id, previous_status=previous_status, status=status)
        try:
            result.resolution = self.handle_contest_update(contest_id, previous_status, status, unresolved)
        except Exception as e:
            failure = TransientBatchFailure(contest_id, e)
            logger.exception(f"Contest {contest_id} update saved but follow-up failed: {failure}")
            result.error = _failure_record(failure)
        return result
