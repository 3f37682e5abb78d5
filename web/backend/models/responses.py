#!/usr/bin/env python3
"""
Response models for API endpoints.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional, Dict, Any


class OutcomeResponse(BaseModel):
    """Computed outcome of a contest."""
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "success": True,
                "contest_id": "550e8400-e29b-41d4-a716-446655440000",
                "covering_side": "away",
                "margin": 3.5,
                "margin_bonus": 0,
                "adjusted_home": 13.5,
                "away_score": 17
            }
        }
    )

    success: bool = True
    contest_id: str
    covering_side: str
    margin: float = Field(ge=0)
    margin_bonus: int = Field(ge=0)
    adjusted_home: float
    away_score: int


class ResolutionResponse(BaseModel):
    """Result of resolving (or resetting) one contest."""
    success: bool = True
    contest_id: str
    week: Optional[int] = None
    season: Optional[int] = None
    covering_side: str
    margin_bonus: int
    examined: Dict[str, int]
    updated: Dict[str, int]
    total_updated: int
    chunks: int
    interrupted: bool = False


class BatchErrorDetail(BaseModel):
    contest_id: str
    error: str
    type: str


class BatchSummaryResponse(BaseModel):
    """Result of resolving a whole period."""
    success: bool
    week: int
    season: int
    contests_processed: int
    submissions_updated: int
    errors: List[BatchErrorDetail] = []
    execution_time: float
    interrupted: bool = False


class StandingEntryResponse(BaseModel):
    rank: int
    user_id: str
    display_name: str
    submissions: int
    wins: int
    losses: int
    pushes: int
    lock_wins: int
    lock_losses: int
    lock_pushes: int
    total_points: int
    win_percentage: float = Field(ge=0, le=1)
    lock_win_percentage: float = Field(ge=0, le=1)
    record: str
    lock_record: str
    settlement_status: str
    weeks_included: List[int] = []
    worst_week_score: Optional[int] = None


class StandingsResponse(BaseModel):
    """
    Ranked standings.

    stale: served from the last good snapshot because recomputation failed
    available: False when no standings could be produced at all
    """
    success: bool = True
    scope: str
    season: int
    week: Optional[int] = None
    generated_at: Optional[str] = None
    stale: bool = False
    available: bool = True
    count: int
    entries: List[StandingEntryResponse]


class WeeklyDetailResponse(BaseModel):
    week: int
    submissions: int
    points: int
    wins: int
    losses: int
    pushes: int
    lock_wins: int
    lock_losses: int
    lock_pushes: int
    record: str
    lock_record: str


class BestFinishDetailsResponse(BaseModel):
    success: bool = True
    user_id: str
    display_name: Optional[str]
    season: int
    best_finish_weeks: List[int]
    total_points: int
    weeks: List[WeeklyDetailResponse]


class PrecedenceDecisionResponse(BaseModel):
    """Outcome of an arbitration."""
    success: bool = True
    user_id: str
    season: int
    week: int
    active_channel: Optional[str]
    active_guest_email: Optional[str] = None
    overridden: bool
    reason: str
    activated: int
    deactivated: int
    identified_count: int
    guest_sets: Dict[str, int]


class PrecedenceConflict(BaseModel):
    user_id: str
    display_name: Optional[str]
    season: int
    week: int
    identified_count: int
    guest_count: int
    active_channel: Optional[str]
    override_channel: Optional[str]
    resolved: bool


class PrecedenceConflictsResponse(BaseModel):
    success: bool = True
    count: int
    unresolved: int
    conflicts: List[PrecedenceConflict]


class HealthResponse(BaseModel):
    status: str
    service: str
    cache: Dict[str, Any] = {}


class ScoreUpdateResponse(BaseModel):
    """
    Live-feed update result.

    resolution: set when the update triggered a resolution or reset
    error: the update was saved but the triggered resolution failed; it is
        retried on the next update of the contest
    """
    success: bool = True
    contest_id: str
    previous_status: str
    status: str
    resolution: Optional[ResolutionResponse] = None
    error: Optional[BatchErrorDetail] = None
