import logging
from typing import List, Optional, Any, Dict
from datetime import datetime, timezone

from sqlalchemy import select, func, case
from sqlalchemy.exc import IntegrityError

from database.models import PickSetPrecedence, Submission, GuestSubmission, User
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class PrecedenceRepository(BaseRepository):
    def get(self, user_id: Any, week: int, season: int) -> Optional[PickSetPrecedence]:
        stmt = select(PickSetPrecedence).where(
            PickSetPrecedence.user_id == user_id,
            PickSetPrecedence.season == season,
            PickSetPrecedence.week == week
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def get_or_create_for_update(self, user_id: Any, week: int, season: int) -> PickSetPrecedence:
        """Lock the precedence row for (user, season, week), creating it if missing.

        Two writers racing to create the row hit the unique constraint; the
        loser's insert is rolled back to a savepoint and it locks the winner's row.
        """
        stmt = select(PickSetPrecedence).where(
            PickSetPrecedence.user_id == user_id,
            PickSetPrecedence.season == season,
            PickSetPrecedence.week == week
        ).with_for_update()

        record = self.db.execute(stmt).scalar_one_or_none()
        if record is not None:
            return record

        try:
            with self.db.begin_nested():
                record = PickSetPrecedence(user_id=user_id, season=season, week=week)
                self.db.add(record)
        except IntegrityError:
            logger.debug(f"Precedence row for user {user_id} week {week} season {season} created concurrently")
            record = self.db.execute(stmt).scalar_one()
        return record

    def record_decision(self, record: PickSetPrecedence, active_channel: Optional[str]) -> None:
        record.active_channel = active_channel
        record.decided_at = datetime.now(timezone.utc)

    def set_override(
        self,
        record: PickSetPrecedence,
        channel: str,
        reason: str,
        admin_id: Optional[Any] = None,
        guest_email: Optional[str] = None
    ) -> None:
        record.override_channel = channel
        record.override_reason = reason
        record.override_by = admin_id
        record.override_guest_email = guest_email
        record.overridden_at = datetime.now(timezone.utc)

    def clear_override(self, record: PickSetPrecedence) -> bool:
        had_override = record.override_channel is not None
        record.override_channel = None
        record.override_reason = None
        record.override_by = None
        record.override_guest_email = None
        record.overridden_at = None
        return had_override

    def find_dual_channel_periods(self, season: Optional[int] = None) -> List[Dict[str, Any]]:
        """(user, season, week) groups that have both identified and claimed guest submissions."""
        identified = select(
            Submission.user_id.label('user_id'),
            Submission.season.label('season'),
            Submission.week.label('week'),
            func.count(Submission.id).label('identified_count'),
            func.sum(case((Submission.is_active.is_(True), 1), else_=0)).label('identified_active')
        ).group_by(Submission.user_id, Submission.season, Submission.week)

        guest = select(
            GuestSubmission.assigned_user_id.label('user_id'),
            GuestSubmission.season.label('season'),
            GuestSubmission.week.label('week'),
            func.count(GuestSubmission.id).label('guest_count'),
            func.sum(case((GuestSubmission.is_active.is_(True), 1), else_=0)).label('guest_active')
        ).where(
            GuestSubmission.assigned_user_id.is_not(None)
        ).group_by(GuestSubmission.assigned_user_id, GuestSubmission.season, GuestSubmission.week)

        if season is not None:
            identified = identified.where(Submission.season == season)
            guest = guest.where(GuestSubmission.season == season)

        identified = identified.subquery()
        guest = guest.subquery()

        stmt = select(
            identified.c.user_id,
            User.display_name,
            identified.c.season,
            identified.c.week,
            identified.c.identified_count,
            identified.c.identified_active,
            guest.c.guest_count,
            guest.c.guest_active
        ).join(
            guest,
            (guest.c.user_id == identified.c.user_id)
            & (guest.c.season == identified.c.season)
            & (guest.c.week == identified.c.week)
        ).join(
            User, User.id == identified.c.user_id, isouter=True
        ).order_by(identified.c.season.desc(), identified.c.week.desc(), User.display_name)

        return [dict(row._mapping) for row in self.db.execute(stmt).all()]
