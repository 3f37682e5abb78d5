#!/usr/bin/env python3
"""
Unit tests for the HTTP API with mocked services.
"""

import unittest
import uuid
from decimal import Decimal
from unittest.mock import MagicMock

from fastapi.testclient import TestClient

from core.exceptions import (
    ContestNotFoundException,
    IncompleteContestException,
    InvalidOverrideException,
    PipelineLockedException,
    PrecedenceConflictException,
)
from core.leaderboard.models import StandingEntry, StandingsSnapshot
from core.precedence.rules import PrecedenceDecision
from core.scoring.models import ContestOutcome, ContestResolution
from pipeline.runner import BatchSummary, ContestUpdateResult
from web.backend.app import app
from web.backend.dependencies import get_app_context


class ApiTestCase(unittest.TestCase):

    def setUp(self):
        self.ctx = MagicMock()
        self.ctx.standings_cache = None
        app.dependency_overrides[get_app_context] = lambda: self.ctx
        self.client = TestClient(app, raise_server_exceptions=False)
        self.contest_id = uuid.uuid4()
        self.user_id = uuid.uuid4()

    def tearDown(self):
        app.dependency_overrides.clear()


class TestContestEndpoints(ApiTestCase):

    def test_01_outcome(self):
        self.ctx.outcome_service.compute_outcome.return_value = ContestOutcome(
            covering_side='home', margin=Decimal('18'), margin_bonus=1,
            adjusted_home=Decimal('21'), away_score=3
        )

        response = self.client.get(f'/api/contests/{self.contest_id}/outcome')

        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(data['covering_side'], 'home')
        self.assertEqual(data['margin_bonus'], 1)
        self.assertEqual(data['contest_id'], str(self.contest_id))

    def test_02_unknown_contest_is_404(self):
        self.ctx.outcome_service.compute_outcome.side_effect = ContestNotFoundException(self.contest_id)

        response = self.client.get(f'/api/contests/{self.contest_id}/outcome')

        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()['type'], 'ContestNotFoundException')
        self.assertFalse(response.json()['success'])

    def test_03_incomplete_contest_is_409(self):
        self.ctx.outcome_service.compute_outcome.side_effect = IncompleteContestException(self.contest_id)

        response = self.client.get(f'/api/contests/{self.contest_id}/outcome')

        self.assertEqual(response.status_code, 409)

    def test_04_bad_contest_id(self):
        response = self.client.get('/api/contests/not-a-uuid/outcome')
        self.assertEqual(response.status_code, 422)


class TestAdminEndpoints(ApiTestCase):

    def test_01_resolve_contest(self):
        self.ctx.scheduler.resolve_contest.return_value = ContestResolution(
            contest_id=self.contest_id, week=1, season=2025, covering_side='away',
            updated={'identified': 3, 'guest': 1}, chunks=1
        )

        response = self.client.post(f'/api/admin/contests/{self.contest_id}/resolve?chunk_size=50')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['total_updated'], 4)
        self.ctx.scheduler.resolve_contest.assert_called_once_with(self.contest_id, 50)

    def test_02_resolve_period(self):
        summary = BatchSummary(week=3, season=2025, contests_processed=2, submissions_updated=10)
        summary.errors.append({'contest_id': 'c9', 'error': 'OperationalError: timeout', 'type': 'OperationalError'})
        summary.success = False
        self.ctx.scheduler.run_period.return_value = summary

        response = self.client.post('/api/admin/periods/2025/3/resolve')

        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertFalse(data['success'])
        self.assertEqual(data['errors'][0]['contest_id'], 'c9')
        self.ctx.scheduler.run_period.assert_called_once_with(3, 2025, None, source='api')

    def test_03_resolve_period_locked(self):
        self.ctx.scheduler.run_period.side_effect = PipelineLockedException("A batch run is already in progress")

        response = self.client.post('/api/admin/periods/2025/3/resolve')

        self.assertEqual(response.status_code, 409)

    def test_04_recompute_requires_reason(self):
        response = self.client.post(f'/api/admin/contests/{self.contest_id}/recompute', json={'reason': ''})
        self.assertEqual(response.status_code, 422)
        self.ctx.scheduler.recompute_contest.assert_not_called()

    def test_05_score_update_without_transition(self):
        self.ctx.scheduler.apply_score_update.return_value = ContestUpdateResult(
            contest_id=self.contest_id, previous_status='in_progress', status='in_progress'
        )

        response = self.client.post(
            f'/api/admin/contests/{self.contest_id}/score',
            json={'home_score': 7, 'away_score': 3, 'status': 'in_progress', 'game_period': 2, 'clock': '04:12'}
        )

        self.assertEqual(response.status_code, 200)
        self.assertIsNone(response.json()['resolution'])
        self.ctx.scheduler.apply_score_update.assert_called_once_with(
            self.contest_id, 7, 3, 'in_progress', 2, '04:12'
        )

    def test_06_score_update_reports_failed_resolution(self):
        self.ctx.scheduler.apply_score_update.return_value = ContestUpdateResult(
            contest_id=self.contest_id, previous_status='in_progress', status='completed',
            error={
                'contest_id': str(self.contest_id),
                'error': 'IncompleteContestException: scores are incomplete',
                'type': 'IncompleteContestException',
            }
        )

        response = self.client.post(
            f'/api/admin/contests/{self.contest_id}/score',
            json={'home_score': 20, 'away_score': None, 'status': 'completed'}
        )

        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertFalse(data['success'])
        self.assertEqual(data['previous_status'], 'in_progress')
        self.assertIsNone(data['resolution'])
        self.assertEqual(data['error']['type'], 'IncompleteContestException')

    def test_07_unexpected_error_is_500(self):
        self.ctx.scheduler.resolve_contest.side_effect = RuntimeError("boom")

        response = self.client.post(f'/api/admin/contests/{self.contest_id}/resolve')

        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json()['error'], 'Internal server error')


class TestStandingsEndpoints(ApiTestCase):

    def _snapshot(self, **kwargs):
        return StandingsSnapshot(
            query_key='k', scope='season', season=2025,
            entries=[StandingEntry(user_id='u1', display_name='Alice', total_points=46, wins=2, rank=1)],
            generated_at='2025-12-01T00:00:00+00:00',
            **kwargs
        )

    def test_01_season_standings(self):
        self.ctx.leaderboard_service.get_standings.return_value = self._snapshot()

        response = self.client.get('/api/standings/season/2025?settlement=paid&settlement=unpaid&limit=5')

        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(data['count'], 1)
        self.assertEqual(data['entries'][0]['record'], '2-0-0')
        query = self.ctx.leaderboard_service.get_standings.call_args.args[0]
        self.assertEqual(query.settlement_filter, frozenset({'paid', 'unpaid'}))
        self.assertEqual(query.limit, 5)

    def test_02_stale_flag_passes_through(self):
        self.ctx.leaderboard_service.get_standings.return_value = self._snapshot(stale=True)

        response = self.client.get('/api/standings/week/2025/3')

        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.json()['stale'])

    def test_03_unknown_settlement_status(self):
        response = self.client.get('/api/standings/season/2025?settlement=refunded')
        self.assertEqual(response.status_code, 422)
        self.ctx.leaderboard_service.get_standings.assert_not_called()

    def test_04_best_finish_details(self):
        self.ctx.leaderboard_service.get_best_finish_details.return_value = {
            'user_id': str(self.user_id), 'display_name': 'Alice', 'season': 2025,
            'best_finish_weeks': [11, 12, 13, 14], 'weeks': [], 'total_points': 0,
        }

        response = self.client.get(f'/api/standings/best-finish/2025/users/{self.user_id}')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['best_finish_weeks'], [11, 12, 13, 14])


class TestPrecedenceEndpoints(ApiTestCase):

    def test_01_override(self):
        self.ctx.precedence_service.override_precedence.return_value = PrecedenceDecision(
            user_id=self.user_id, week=3, season=2025, active_channel='guest',
            overridden=True, reason='override', guest_sets={'a@example.com': 6}
        )

        response = self.client.post('/api/admin/precedence/override', json={
            'user_id': str(self.user_id), 'season': 2025, 'week': 3,
            'channel': 'guest', 'reason': 'identified picks entered by mistake'
        })

        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.json()['overridden'])

    def test_02_invalid_override_is_422(self):
        self.ctx.precedence_service.override_precedence.side_effect = InvalidOverrideException("no guest set")

        response = self.client.post('/api/admin/precedence/override', json={
            'user_id': str(self.user_id), 'season': 2025, 'week': 3,
            'channel': 'guest', 'reason': 'test'
        })

        self.assertEqual(response.status_code, 422)
        self.assertEqual(response.json()['type'], 'InvalidOverrideException')

    def test_03_unknown_channel_rejected(self):
        response = self.client.post('/api/admin/precedence/override', json={
            'user_id': str(self.user_id), 'season': 2025, 'week': 3,
            'channel': 'email', 'reason': 'test'
        })
        self.assertEqual(response.status_code, 422)

    def test_04_clear_override(self):
        self.ctx.precedence_service.clear_override.return_value = PrecedenceDecision(
            user_id=self.user_id, week=3, season=2025, active_channel='identified', identified_count=6
        )

        response = self.client.delete(
            f'/api/admin/precedence/override?user_id={self.user_id}&season=2025&week=3'
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['active_channel'], 'identified')
        self.ctx.precedence_service.clear_override.assert_called_once_with(self.user_id, 3, 2025)

    def test_05_arbitration_conflict_lists_guest_sets(self):
        self.ctx.precedence_service.arbitrate.side_effect = PrecedenceConflictException(
            self.user_id, 3, 2025, ["b@example.com", "a@example.com"]
        )

        response = self.client.post('/api/admin/precedence/arbitrate', json={
            'user_id': str(self.user_id), 'season': 2025, 'week': 3
        })

        self.assertEqual(response.status_code, 409)
        details = response.json()['details']
        self.assertEqual(details['guest_emails'], ['a@example.com', 'b@example.com'])
        self.assertEqual(details['user_id'], str(self.user_id))

    def test_06_conflicts_unresolved_only(self):
        self.ctx.precedence_service.detect_conflicts.return_value = [
            {'user_id': 'u1', 'display_name': 'A', 'season': 2025, 'week': 3, 'identified_count': 6,
             'guest_count': 6, 'active_channel': 'identified', 'override_channel': None, 'resolved': True},
            {'user_id': 'u2', 'display_name': 'B', 'season': 2025, 'week': 3, 'identified_count': 6,
             'guest_count': 6, 'active_channel': None, 'override_channel': None, 'resolved': False},
        ]

        response = self.client.get('/api/admin/precedence/conflicts?season=2025&unresolved_only=true')

        data = response.json()
        self.assertEqual(data['count'], 1)
        self.assertEqual(data['conflicts'][0]['user_id'], 'u2')


class TestHealth(ApiTestCase):

    def test_health(self):
        response = self.client.get('/health')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['cache'], {'available': False})


if __name__ == '__main__':
    unittest.main()
