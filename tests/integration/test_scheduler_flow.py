"""
BatchScheduler against a real database: per-contest failure isolation and
status-transition gating for live score updates.
"""
import pytest

from core.config_loader import BatchConfig
from core.exceptions import ContestNotFoundException, PipelineLockedException
from pipeline.control import PipelineController
from pipeline.runner import BatchScheduler


pytestmark = pytest.mark.db

SEASON = 2025


@pytest.fixture
def scheduler(tmp_path):
    config = BatchConfig(chunk_size=2, chunk_pause_seconds=0, lock_file=str(tmp_path / "batch.lock"))
    return BatchScheduler(config=config)


class TestResolvePeriod:

    def test_01_failure_is_isolated(self, seed, scheduler):
        good = seed.contest(week=3, season=SEASON, home_score=20, away_score=17, handicap='-6.5',
                            status='completed', home_team='H1', away_team='A1')
        # Completed without a final score: outcome cannot be computed
        broken = seed.contest(week=3, season=SEASON, home_score=None, away_score=17,
                              status='completed', home_team='H2', away_team='A2')
        seed.contest(week=3, season=SEASON, status='scheduled', home_team='H3', away_team='A3')
        for i in range(3):
            user = seed.user(f'user{i}@example.com')
            seed.identified(user, good, 'away', week=3, season=SEASON)
            seed.identified(user, broken, 'home', week=3, season=SEASON)

        summary = scheduler.run_period(3, SEASON)

        assert summary.success is False
        assert summary.contests_processed == 1
        assert summary.submissions_updated == 3
        assert [e['contest_id'] for e in summary.errors] == [str(broken)]
        assert summary.errors[0]['type'] == 'IncompleteContestException'
        assert all(r.result == 'win' for r in seed.identified_rows(contest_id=good))
        assert all(r.result == 'pending' for r in seed.identified_rows(contest_id=broken))

    def test_02_rerun_is_noop(self, seed, scheduler):
        contest_id = seed.contest(week=3, season=SEASON, home_score=20, away_score=17, status='completed')
        seed.identified(seed.user('alice@example.com'), contest_id, 'away', week=3, season=SEASON)

        first = scheduler.resolve_period(3, SEASON)
        second = scheduler.resolve_period(3, SEASON)

        assert first.submissions_updated == 1
        assert second.submissions_updated == 0
        assert second.success is True

    def test_03_refused_while_locked(self, seed, scheduler):
        other = PipelineController(scheduler.config.lock_file)
        assert other.acquire_lock('api')
        try:
            with pytest.raises(PipelineLockedException):
                scheduler.run_period(3, SEASON)
        finally:
            other.release_lock()


class TestScoreUpdates:

    def test_01_only_completion_resolves(self, seed, scheduler):
        contest_id = seed.contest(week=3, season=SEASON, handicap='-6.5')
        alice = seed.user('alice@example.com')
        seed.identified(alice, contest_id, 'away', week=3, season=SEASON)

        assert scheduler.apply_score_update(contest_id, 0, 0, 'in_progress', 1, '15:00').resolution is None
        assert scheduler.apply_score_update(contest_id, 14, 10, 'in_progress', 3, '02:11').resolution is None
        assert seed.identified_rows(alice)[0].result == 'pending'

        result = scheduler.apply_score_update(contest_id, 20, 17, 'completed')

        assert result.success is True
        assert (result.previous_status, result.status) == ('in_progress', 'completed')
        assert result.resolution.covering_side == 'away'
        row = seed.identified_rows(alice)[0]
        assert (row.result, row.points_awarded) == ('win', 20)

        contest = seed.contest_row(contest_id)
        assert (contest.game_period, contest.clock) == (3, '02:11')

    def test_02_late_score_change_keeps_frozen_outcome(self, seed, scheduler):
        contest_id = seed.contest(week=3, season=SEASON, handicap='-6.5')
        alice = seed.user('alice@example.com')
        seed.identified(alice, contest_id, 'away', week=3, season=SEASON)
        scheduler.apply_score_update(contest_id, 20, 17, 'completed')

        result = scheduler.apply_score_update(contest_id, 30, 17, 'completed')

        assert result.resolution is None
        assert result.success is True
        contest = seed.contest_row(contest_id)
        assert contest.home_score == 30
        assert contest.covering_side == 'away'
        assert seed.identified_rows(alice)[0].result == 'win'

    def test_03_leaving_completed_resets(self, seed, scheduler):
        contest_id = seed.contest(week=3, season=SEASON, handicap='-6.5')
        alice = seed.user('alice@example.com')
        seed.identified(alice, contest_id, 'away', week=3, season=SEASON)
        scheduler.apply_score_update(contest_id, 20, 17, 'completed')

        result = scheduler.apply_score_update(contest_id, 20, 17, 'in_progress')

        assert result.resolution.covering_side == 'pending'
        row = seed.identified_rows(alice)[0]
        assert (row.result, row.points_awarded) == ('pending', 0)

    def test_04_unknown_contest(self, seed, scheduler):
        import uuid
        with pytest.raises(ContestNotFoundException):
            scheduler.apply_score_update(uuid.uuid4(), 1, 0, 'in_progress')

    def test_05_failed_completion_is_reported_and_retried(self, seed, scheduler):
        """A completion that cannot be scored yet keeps the write and resolves on the next update."""
        contest_id = seed.contest(week=3, season=SEASON, handicap='-6.5')
        alice = seed.user('alice@example.com')
        seed.identified(alice, contest_id, 'away', week=3, season=SEASON)

        failed = scheduler.apply_score_update(contest_id, 20, None, 'completed')

        assert failed.success is False
        assert failed.resolution is None
        assert failed.error['type'] == 'IncompleteContestException'
        assert failed.error['contest_id'] == str(contest_id)
        assert seed.contest_row(contest_id).status == 'completed'
        assert seed.identified_rows(alice)[0].result == 'pending'

        retried = scheduler.apply_score_update(contest_id, 20, 17, 'completed')

        assert retried.success is True
        assert (retried.previous_status, retried.status) == ('completed', 'completed')
        assert retried.resolution is not None
        row = seed.identified_rows(alice)[0]
        assert (row.result, row.points_awarded) == ('win', 20)

        # Fully resolved now: further ticks do nothing
        assert scheduler.apply_score_update(contest_id, 20, 17, 'completed').resolution is None

    def test_06_pending_rows_after_partial_resolution_are_picked_up(self, seed, scheduler):
        contest_id = seed.contest(week=3, season=SEASON, handicap='-6.5')
        alice = seed.user('alice@example.com')
        seed.identified(alice, contest_id, 'away', week=3, season=SEASON)
        scheduler.apply_score_update(contest_id, 20, 17, 'completed')
        # Submitted after resolution ran, e.g. a late-accepted pick
        bob = seed.user('bob@example.com')
        seed.identified(bob, contest_id, 'home', week=3, season=SEASON)

        result = scheduler.apply_score_update(contest_id, 20, 17, 'completed')

        assert result.resolution.total_updated == 1
        row = seed.identified_rows(bob)[0]
        assert (row.result, row.points_awarded) == ('loss', 0)
