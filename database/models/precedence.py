import uuid

from sqlalchemy import Column, Text, Integer, TIMESTAMP, ForeignKey, UniqueConstraint, CheckConstraint, func
from sqlalchemy.dialects.postgresql import UUID

from .base import Base


class PickSetPrecedence(Base):
    """
    Per (user, season, week) precedence record.

    Stores the last arbitration decision and the sticky admin override.
    Arbitration locks this row (SELECT ... FOR UPDATE) so concurrent writes
    to either channel serialize per identity/period.
    """
    __tablename__ = 'pick_set_precedence'

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    season = Column(Integer, nullable=False)
    week = Column(Integer, nullable=False)

    active_channel = Column(Text)  # identified|guest|None
    decided_at = Column(TIMESTAMP(timezone=True))

    override_channel = Column(Text)  # identified|guest|None
    override_guest_email = Column(Text)
    override_reason = Column(Text)
    override_by = Column(UUID(as_uuid=True), ForeignKey('users.id', ondelete='SET NULL'), nullable=True)
    overridden_at = Column(TIMESTAMP(timezone=True))

    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (
        UniqueConstraint('user_id', 'season', 'week', name='uq_pick_set_precedence_user_period'),
        CheckConstraint(
            "override_channel IS NULL OR override_channel IN ('identified', 'guest')",
            name='ck_pick_set_precedence_override'
        ),
    )
