#!/usr/bin/env python3
"""
Contest endpoints - computed outcomes.
"""

from uuid import UUID
from fastapi import APIRouter, Depends

from core.scoring.service import OutcomeService
from ..dependencies import get_outcome_service
from ..models.responses import OutcomeResponse

router = APIRouter(prefix="/api/contests", tags=["contests"])


@router.get("/{contest_id}/outcome", response_model=OutcomeResponse)
def get_contest_outcome(
    contest_id: UUID,
    outcome_service: OutcomeService = Depends(get_outcome_service)
):
    """
    Compute the covering side and margin bonus from the contest's current scores.

    Nothing is written. 404 for an unknown contest, 409 while a score is missing.
    """
    outcome = outcome_service.compute_outcome(contest_id)
    return OutcomeResponse(contest_id=str(contest_id), **outcome.to_dict())
