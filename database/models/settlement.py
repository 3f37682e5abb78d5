import uuid

from sqlalchemy import Column, Text, Integer, TIMESTAMP, ForeignKey, UniqueConstraint, func
from sqlalchemy.dialects.postgresql import UUID

from .base import Base


class SettlementStatus(Base):
    """Season entry-fee status, written by the settlement subsystem (read-only here)."""
    __tablename__ = 'settlement_status'

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    season = Column(Integer, nullable=False)
    status = Column(Text, nullable=False, default='unpaid')  # paid|pending|unpaid
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        UniqueConstraint('user_id', 'season', name='uq_settlement_status_user_season'),
    )
