#!/usr/bin/env python3
"""
Admin endpoints - contest and period resolution.
"""

import logging
from uuid import UUID
from typing import Optional
from fastapi import APIRouter, Depends, Query

from pipeline.runner import BatchScheduler
from ..dependencies import get_scheduler
from ..models.requests import RecomputeRequest, ScoreUpdateRequest
from ..models.responses import (
    ResolutionResponse,
    BatchSummaryResponse,
    BatchErrorDetail,
    ScoreUpdateResponse
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.post("/contests/{contest_id}/resolve", response_model=ResolutionResponse)
def resolve_contest(
    contest_id: UUID,
    chunk_size: Optional[int] = Query(None, ge=1, le=1000),
    scheduler: BatchScheduler = Depends(get_scheduler)
):
    """
    Freeze the outcome of a completed contest and resolve its submissions.

    Safe to repeat: a second call reports zero updates.
    """
    resolution = scheduler.resolve_contest(contest_id, chunk_size)
    return ResolutionResponse(**resolution.to_dict())


@router.post("/contests/{contest_id}/recompute", response_model=ResolutionResponse)
def recompute_contest(
    contest_id: UUID,
    request: RecomputeRequest,
    scheduler: BatchScheduler = Depends(get_scheduler)
):
    """Replace a frozen outcome from corrected scores, then re-resolve."""
    resolution = scheduler.recompute_contest(contest_id, request.reason)
    return ResolutionResponse(**resolution.to_dict())


@router.post("/contests/{contest_id}/score", response_model=ScoreUpdateResponse)
def update_contest_score(
    contest_id: UUID,
    request: ScoreUpdateRequest,
    scheduler: BatchScheduler = Depends(get_scheduler)
):
    """
    Apply a live-feed update.

    Resolution runs when the update moves the contest into 'completed' or
    touches a completed contest that is not fully resolved yet; moving it
    out of 'completed' resets its submissions to pending. A failed
    resolution is reported in `error` with success=false; the score
    update itself is kept.
    """
    result = scheduler.apply_score_update(
        contest_id,
        request.home_score,
        request.away_score,
        request.status,
        request.game_period,
        request.clock
    )
    data = result.to_dict()
    data['resolution'] = ResolutionResponse(**data['resolution']) if data['resolution'] else None
    data['error'] = BatchErrorDetail(**data['error']) if data['error'] else None
    return ScoreUpdateResponse(**data)


@router.post("/periods/{season}/{week}/resolve", response_model=BatchSummaryResponse)
def resolve_period(
    season: int,
    week: int,
    chunk_size: Optional[int] = Query(None, ge=1, le=1000),
    scheduler: BatchScheduler = Depends(get_scheduler)
):
    """
    Resolve every completed contest of a period.

    Per-contest failures are listed in `errors` and do not stop the run.
    Returns 409 if another batch run holds the lock.
    """
    summary = scheduler.run_period(week, season, chunk_size, source='api')
    data = summary.to_dict()
    data.pop('resolutions')
    return BatchSummaryResponse(**data)
