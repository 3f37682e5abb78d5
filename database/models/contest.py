import uuid

from sqlalchemy import Column, Text, Integer, Numeric, TIMESTAMP, Index, CheckConstraint, func
from sqlalchemy.dialects.postgresql import UUID

from .base import Base


class Contest(Base):
    """
    A single game scored against a handicap.

    Two disjoint write sets:
    - Live feed: home_score, away_score, status, game_period, clock
    - Outcome freeze: covering_side, margin_bonus, base_points, outcome_*

    covering_side/margin_bonus are written once when the contest is completed
    and only change again through an explicit recompute (outcome_recomputed_reason).
    """
    __tablename__ = 'contests'

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    season = Column(Integer, nullable=False)
    week = Column(Integer, nullable=False)

    home_team = Column(Text, nullable=False)
    away_team = Column(Text, nullable=False)
    home_score = Column(Integer)
    away_score = Column(Integer)
    # Signed, home-team perspective (e.g. -6.5 = home favored by 6.5)
    handicap = Column(Numeric(5, 1), nullable=False)

    status = Column(Text, nullable=False, default='scheduled')  # scheduled|in_progress|completed
    game_period = Column(Integer)
    clock = Column(Text)

    covering_side = Column(Text)  # home|away|push
    margin_bonus = Column(Integer)
    base_points = Column(Integer, nullable=False, default=20)
    outcome_frozen_at = Column(TIMESTAMP(timezone=True))
    outcome_recomputed_reason = Column(Text)

    kickoff_at = Column(TIMESTAMP(timezone=True))
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        CheckConstraint("status IN ('scheduled', 'in_progress', 'completed')", name='ck_contests_status'),
        CheckConstraint("covering_side IS NULL OR covering_side IN ('home', 'away', 'push')", name='ck_contests_covering_side'),
        Index('idx_contests_period', 'season', 'week'),
        Index('idx_contests_status', 'status'),
    )

    @property
    def is_completed(self) -> bool:
        return self.status == 'completed'

    @property
    def outcome_frozen(self) -> bool:
        return self.covering_side is not None and self.margin_bonus is not None
