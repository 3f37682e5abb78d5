import uuid

from sqlalchemy import Column, Text, Integer, Boolean, TIMESTAMP, ForeignKey, Index, CheckConstraint, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from .base import Base

VALIDATED_STATUSES = ('auto_validated', 'manually_validated')


class GuestSubmission(Base):
    """
    Anonymous-channel pick, later claimed by an identity.

    Rows start inactive; the precedence arbiter activates a claimed set when
    no identified set exists for the same (user, season, week). Superseded rows
    are deactivated, never deleted.
    """
    __tablename__ = 'guest_submissions'

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    guest_email = Column(Text, nullable=False)
    guest_name = Column(Text)
    assigned_user_id = Column(UUID(as_uuid=True), ForeignKey('users.id', ondelete='SET NULL'), nullable=True)

    contest_id = Column(UUID(as_uuid=True), ForeignKey('contests.id', ondelete='CASCADE'), nullable=False)
    season = Column(Integer, nullable=False)
    week = Column(Integer, nullable=False)

    selected_side = Column(Text, nullable=False)  # home|away
    is_lock = Column(Boolean, nullable=False, default=False)

    result = Column(Text, nullable=False, default='pending')
    points_awarded = Column(Integer, nullable=False, default=0)

    validation_status = Column(Text, nullable=False, default='pending_validation')
    show_on_leaderboard = Column(Boolean, nullable=False, default=True)
    is_active = Column(Boolean, nullable=False, default=False)

    submitted_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    assigned_user = relationship("User")
    contest = relationship("Contest")

    __table_args__ = (
        CheckConstraint("selected_side IN ('home', 'away')", name='ck_guest_submissions_side'),
        CheckConstraint("result IN ('win', 'loss', 'push', 'pending')", name='ck_guest_submissions_result'),
        CheckConstraint(
            "validation_status IN ('pending_validation', 'auto_validated', 'manually_validated', 'duplicate_conflict')",
            name='ck_guest_submissions_validation'
        ),
        Index('idx_guest_submissions_contest', 'contest_id'),
        Index('idx_guest_submissions_assigned_period', 'assigned_user_id', 'season', 'week'),
        Index('idx_guest_submissions_email_period', 'guest_email', 'season', 'week'),
    )

    @property
    def is_validated(self) -> bool:
        return self.validation_status in VALIDATED_STATUSES
