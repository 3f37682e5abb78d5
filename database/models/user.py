import uuid

from sqlalchemy import Column, Text, Boolean, TIMESTAMP, Index, func
from sqlalchemy.dialects.postgresql import UUID

from .base import Base


class User(Base):
    """
    Identity record. Provisioned by the account subsystem; read here for
    display names and existence checks.
    """
    __tablename__ = 'users'

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    email = Column(Text, nullable=False, unique=True)
    display_name = Column(Text)
    is_admin = Column(Boolean, nullable=False, default=False)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (
        Index('idx_users_email', 'email'),
    )
