import uuid

from sqlalchemy import Column, Text, Integer, Boolean, TIMESTAMP, ForeignKey, Index, UniqueConstraint, CheckConstraint, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from .base import Base


class Submission(Base):
    """
    Identified-channel pick.

    Field ownership:
    - selection (user_id, contest_id, selected_side, is_lock) is immutable
    - result/points_awarded are written only by the pick resolver
    - is_active is written only by the precedence arbiter
    """
    __tablename__ = 'submissions'

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    contest_id = Column(UUID(as_uuid=True), ForeignKey('contests.id', ondelete='CASCADE'), nullable=False)
    season = Column(Integer, nullable=False)
    week = Column(Integer, nullable=False)

    selected_side = Column(Text, nullable=False)  # home|away
    is_lock = Column(Boolean, nullable=False, default=False)

    result = Column(Text, nullable=False, default='pending')  # win|loss|push|pending
    points_awarded = Column(Integer, nullable=False, default=0)

    show_on_leaderboard = Column(Boolean, nullable=False, default=True)
    is_active = Column(Boolean, nullable=False, default=True)

    submitted_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    user = relationship("User")
    contest = relationship("Contest")

    __table_args__ = (
        UniqueConstraint('user_id', 'contest_id', name='uq_submissions_user_contest'),
        CheckConstraint("selected_side IN ('home', 'away')", name='ck_submissions_side'),
        CheckConstraint("result IN ('win', 'loss', 'push', 'pending')", name='ck_submissions_result'),
        Index('idx_submissions_contest', 'contest_id'),
        Index('idx_submissions_user_period', 'user_id', 'season', 'week'),
        Index('idx_submissions_period_active', 'season', 'week', 'is_active'),
    )
