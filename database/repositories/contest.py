import logging
from typing import List, Optional, Any
from datetime import datetime, timezone

from sqlalchemy import select

from database.models import Contest
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class ContestRepository(BaseRepository):
    def get_by_id(self, contest_id: Any) -> Optional[Contest]:
        stmt = select(Contest).where(Contest.id == contest_id)
        return self.db.execute(stmt).scalar_one_or_none()

    def get_for_update(self, contest_id: Any) -> Optional[Contest]:
        stmt = select(Contest).where(Contest.id == contest_id).with_for_update()
        return self.db.execute(stmt).scalar_one_or_none()

    def list_completed_ids(self, week: int, season: int) -> List[Any]:
        stmt = select(Contest.id).where(
            Contest.season == season,
            Contest.week == week,
            Contest.status == 'completed'
        ).order_by(Contest.kickoff_at, Contest.id)
        return list(self.db.execute(stmt).scalars().all())

    def apply_score_update(
        self,
        contest: Contest,
        home_score: Optional[int],
        away_score: Optional[int],
        status: str,
        game_period: Optional[int] = None,
        clock: Optional[str] = None
    ) -> str:
        """Write live-feed fields only. Returns the status before the update."""
        previous_status = contest.status
        contest.home_score = home_score
        contest.away_score = away_score
        contest.status = status
        if game_period is not None:
            contest.game_period = game_period
        if clock is not None:
            contest.clock = clock
        return previous_status

    def store_outcome(
        self,
        contest: Contest,
        covering_side: str,
        margin_bonus: int,
        base_points: int,
        recomputed_reason: Optional[str] = None
    ) -> None:
        contest.covering_side = covering_side
        contest.margin_bonus = margin_bonus
        contest.base_points = base_points
        contest.outcome_frozen_at = datetime.now(timezone.utc)
        if recomputed_reason is not None:
            contest.outcome_recomputed_reason = recomputed_reason

    def create(
        self,
        season: int,
        week: int,
        home_team: str,
        away_team: str,
        handicap: Any,
        status: str = 'scheduled',
        home_score: Optional[int] = None,
        away_score: Optional[int] = None,
        kickoff_at: Optional[datetime] = None
    ) -> Contest:
        contest = Contest(
            season=season,
            week=week,
            home_team=home_team,
            away_team=away_team,
            handicap=handicap,
            status=status,
            home_score=home_score,
            away_score=away_score,
            kickoff_at=kickoff_at
        )
        self.db.add(contest)
        self.db.flush()
        return contest
