import logging
from typing import List, Dict, Tuple, Any, Optional

from sqlalchemy import select, delete, func, and_, or_

from database.models import Submission, GuestSubmission
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)

# (selected_side, is_lock) -> (result, points_awarded)
ResultTargets = Dict[Tuple[str, bool], Tuple[str, int]]


class PickLedgerRepository(BaseRepository):
    """Queries shared by both submission channels.

    Subclasses set `model` to Submission or GuestSubmission. Only
    result/points_awarded are written here; is_active belongs to the
    precedence arbiter.
    """
    model = None
    channel = None

    def _stale_condition(self, targets: ResultTargets):
        model = self.model
        clauses = []
        for (side, is_lock), (result, points) in targets.items():
            clauses.append(and_(
                model.selected_side == side,
                model.is_lock.is_(is_lock),
                or_(model.result != result, model.points_awarded != points)
            ))
        return or_(*clauses)

    def get_stale_for_contest(
        self,
        contest_id: Any,
        targets: ResultTargets,
        limit: int
    ) -> List[Any]:
        """Rows on a contest whose stored result/points differ from the target.

        Rows already matching their target are never returned, so repeated
        calls walk the contest chunk by chunk and a rerun on a resolved
        contest returns nothing.
        """
        model = self.model
        stmt = select(model).where(
            model.contest_id == contest_id,
            self._stale_condition(targets)
        ).order_by(model.id).limit(limit).with_for_update()
        return self.db.execute(stmt).scalars().all()

    def apply_results(self, rows: List[Any], targets: ResultTargets) -> int:
        updated = 0
        for row in rows:
            result, points = targets[(row.selected_side, bool(row.is_lock))]
            if row.result == result and row.points_awarded == points:
                continue
            row.result = result
            row.points_awarded = points
            updated += 1
        return updated

    def count_for_contest(self, contest_id: Any) -> int:
        model = self.model
        stmt = select(func.count(model.id)).where(model.contest_id == contest_id)
        return self.db.execute(stmt).scalar_one()

    def count_pending_for_contest(self, contest_id: Any) -> int:
        model = self.model
        stmt = select(func.count(model.id)).where(
            model.contest_id == contest_id,
            model.result == 'pending'
        )
        return self.db.execute(stmt).scalar_one()


class SubmissionRepository(PickLedgerRepository):
    model = Submission
    channel = 'identified'

    def create(
        self,
        user_id: Any,
        contest_id: Any,
        week: int,
        season: int,
        selected_side: str,
        is_lock: bool = False,
        show_on_leaderboard: bool = True
    ) -> Submission:
        submission = Submission(
            user_id=user_id,
            contest_id=contest_id,
            week=week,
            season=season,
            selected_side=selected_side,
            is_lock=is_lock,
            show_on_leaderboard=show_on_leaderboard,
            is_active=True,
            result='pending',
            points_awarded=0
        )
        self.db.add(submission)
        self.db.flush()
        return submission

    def list_for_user_period(self, user_id: Any, week: int, season: int) -> List[Submission]:
        stmt = select(Submission).where(
            Submission.user_id == user_id,
            Submission.season == season,
            Submission.week == week
        ).order_by(Submission.submitted_at, Submission.id)
        return self.db.execute(stmt).scalars().all()

    def count_for_user_period(self, user_id: Any, week: int, season: int) -> int:
        stmt = select(func.count(Submission.id)).where(
            Submission.user_id == user_id,
            Submission.season == season,
            Submission.week == week
        )
        return self.db.execute(stmt).scalar_one()

    def set_active(self, user_id: Any, week: int, season: int, active: bool) -> int:
        """Flip is_active for a user's identified set. Returns rows changed."""
        rows = self.list_for_user_period(user_id, week, season)
        changed = 0
        for row in rows:
            if row.is_active != active:
                row.is_active = active
                changed += 1
        return changed

    def delete_for_user_period(self, user_id: Any, week: int, season: int) -> int:
        result = self.db.execute(
            delete(Submission).where(
                Submission.user_id == user_id,
                Submission.season == season,
                Submission.week == week
            )
        )
        return result.rowcount or 0


class GuestSubmissionRepository(PickLedgerRepository):
    model = GuestSubmission
    channel = 'guest'

    def create(
        self,
        guest_email: str,
        contest_id: Any,
        week: int,
        season: int,
        selected_side: str,
        is_lock: bool = False,
        guest_name: Optional[str] = None,
        validation_status: str = 'pending_validation',
        show_on_leaderboard: bool = True
    ) -> GuestSubmission:
        submission = GuestSubmission(
            guest_email=guest_email.strip().lower(),
            guest_name=guest_name,
            contest_id=contest_id,
            week=week,
            season=season,
            selected_side=selected_side,
            is_lock=is_lock,
            validation_status=validation_status,
            show_on_leaderboard=show_on_leaderboard,
            is_active=False,
            result='pending',
            points_awarded=0
        )
        self.db.add(submission)
        self.db.flush()
        return submission

    def list_for_email_period(self, guest_email: str, week: int, season: int) -> List[GuestSubmission]:
        stmt = select(GuestSubmission).where(
            GuestSubmission.guest_email == guest_email.strip().lower(),
            GuestSubmission.season == season,
            GuestSubmission.week == week
        ).order_by(GuestSubmission.submitted_at, GuestSubmission.id)
        return self.db.execute(stmt).scalars().all()

    def list_claimed(self, user_id: Any, week: int, season: int) -> List[GuestSubmission]:
        stmt = select(GuestSubmission).where(
            GuestSubmission.assigned_user_id == user_id,
            GuestSubmission.season == season,
            GuestSubmission.week == week
        ).order_by(GuestSubmission.guest_email, GuestSubmission.submitted_at, GuestSubmission.id)
        return self.db.execute(stmt).scalars().all()

    def claim(self, guest_email: str, week: int, season: int, user_id: Any) -> int:
        """Assign a guest set to an identity and mark it manually validated."""
        rows = self.list_for_email_period(guest_email, week, season)
        for row in rows:
            row.assigned_user_id = user_id
            row.validation_status = 'manually_validated'
        if rows:
            logger.info(f"Claimed {len(rows)} guest submissions from {guest_email} for user {user_id} (week {week}, season {season})")
        return len(rows)

    def set_visibility(self, user_id: Any, week: int, season: int, visible: bool) -> int:
        changed = 0
        for row in self.list_claimed(user_id, week, season):
            if row.show_on_leaderboard != visible:
                row.show_on_leaderboard = visible
                changed += 1
        return changed

    def set_active_emails(self, user_id: Any, week: int, season: int, active_emails: set) -> Tuple[int, int]:
        """Activate claimed rows whose guest_email is in active_emails, deactivate the rest.

        Hidden or unvalidated rows are always deactivated.

        Returns:
            (activated, deactivated) row counts
        """
        activated = 0
        deactivated = 0
        for row in self.list_claimed(user_id, week, season):
            should_be_active = (
                row.guest_email in active_emails
                and row.show_on_leaderboard
                and row.is_validated
            )
            if row.is_active != should_be_active:
                row.is_active = should_be_active
                if should_be_active:
                    activated += 1
                else:
                    deactivated += 1
        return activated, deactivated
