#!/usr/bin/env python3
"""
Request models for API endpoints.
"""

from uuid import UUID
from pydantic import BaseModel, Field
from typing import Literal, Optional


class PeriodIdentity(BaseModel):
    """One identity's scoring period."""
    user_id: UUID
    season: int = Field(ge=2000, le=2100)
    week: int = Field(ge=1, le=25)


class OverrideRequest(PeriodIdentity):
    """Request to force a submission channel for one identity/period."""
    channel: Literal['identified', 'guest'] = Field(..., description="Channel to make active")
    reason: str = Field(..., min_length=1, description="Why the default precedence is being overridden")
    admin_id: Optional[UUID] = Field(None, description="Admin recording the override")
    guest_email: Optional[str] = Field(
        None,
        description="Guest set to activate when several are claimed (guest channel only)"
    )


class RecomputeRequest(BaseModel):
    """Request to replace a frozen contest outcome from corrected scores."""
    reason: str = Field(..., min_length=1, description="Why the frozen outcome is being replaced")


class ScoreUpdateRequest(BaseModel):
    """Live-feed update for one contest."""
    home_score: Optional[int] = Field(None, ge=0)
    away_score: Optional[int] = Field(None, ge=0)
    status: Literal['scheduled', 'in_progress', 'completed']
    game_period: Optional[int] = Field(None, ge=0)
    clock: Optional[str] = None
