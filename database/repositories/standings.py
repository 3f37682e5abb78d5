import logging
from typing import List, Optional, Any, Iterable, Dict

from sqlalchemy import select, func

from database.models import Submission, GuestSubmission, User, Contest, VALIDATED_STATUSES
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class StandingsRepository(BaseRepository):
    """Read-only queries feeding leaderboard aggregation.

    Only rows that count are returned: active, visible and resolved, and for
    the guest channel also claimed and validated. Each row is a plain dict so
    aggregation never touches ORM state.
    """

    def _identified_rows(self, season: int, weeks: Optional[Iterable[int]]) -> List[Dict[str, Any]]:
        stmt = select(
            Submission.user_id.label('user_id'),
            func.coalesce(User.display_name, User.email).label('display_name'),
            Submission.contest_id,
            Submission.week,
            Submission.season,
            Submission.result,
            Submission.points_awarded,
            Submission.is_lock
        ).join(
            User, User.id == Submission.user_id, isouter=True
        ).where(
            Submission.season == season,
            Submission.is_active.is_(True),
            Submission.show_on_leaderboard.is_(True),
            Submission.result != 'pending'
        )
        if weeks is not None:
            stmt = stmt.where(Submission.week.in_(list(weeks)))

        return [
            dict(row._mapping, channel='identified')
            for row in self.db.execute(stmt).all()
        ]

    def _guest_rows(self, season: int, weeks: Optional[Iterable[int]]) -> List[Dict[str, Any]]:
        stmt = select(
            GuestSubmission.assigned_user_id.label('user_id'),
            func.coalesce(User.display_name, User.email, GuestSubmission.guest_name).label('display_name'),
            GuestSubmission.contest_id,
            GuestSubmission.week,
            GuestSubmission.season,
            GuestSubmission.result,
            GuestSubmission.points_awarded,
            GuestSubmission.is_lock
        ).join(
            User, User.id == GuestSubmission.assigned_user_id, isouter=True
        ).where(
            GuestSubmission.season == season,
            GuestSubmission.assigned_user_id.is_not(None),
            GuestSubmission.validation_status.in_(VALIDATED_STATUSES),
            GuestSubmission.is_active.is_(True),
            GuestSubmission.show_on_leaderboard.is_(True),
            GuestSubmission.result != 'pending'
        )
        if weeks is not None:
            stmt = stmt.where(GuestSubmission.week.in_(list(weeks)))

        return [
            dict(row._mapping, channel='guest')
            for row in self.db.execute(stmt).all()
        ]

    def get_counted_rows(self, season: int, weeks: Optional[Iterable[int]] = None) -> List[Dict[str, Any]]:
        """Counted submissions from both channels for a season, optionally restricted to weeks."""
        if weeks is not None:
            weeks = list(weeks)
        rows = self._identified_rows(season, weeks) + self._guest_rows(season, weeks)
        logger.debug(f"Loaded {len(rows)} counted submissions for season {season} (weeks={weeks})")
        return rows

    def get_final_week(self, season: int) -> Optional[int]:
        """Highest week with a scheduled contest in the season."""
        stmt = select(func.max(Contest.week)).where(Contest.season == season)
        return self.db.execute(stmt).scalar_one_or_none()
