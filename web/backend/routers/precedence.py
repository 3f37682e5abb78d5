#!/usr/bin/env python3
"""
Precedence admin endpoints - overrides and conflict review.
"""

import logging
from uuid import UUID
from typing import Optional
from fastapi import APIRouter, Depends, Query

from core.precedence.service import PrecedenceService
from ..dependencies import get_precedence_service
from ..models.requests import OverrideRequest, PeriodIdentity
from ..models.responses import (
    PrecedenceDecisionResponse,
    PrecedenceConflictsResponse,
    PrecedenceConflict
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin/precedence", tags=["precedence"])


@router.post("/override", response_model=PrecedenceDecisionResponse)
def override_precedence(
    request: OverrideRequest,
    precedence: PrecedenceService = Depends(get_precedence_service)
):
    """
    Force a submission channel for one user and week.

    The override sticks until cleared. 422 if the chosen set is missing,
    is not a full set, or does not contain exactly one lock.
    """
    decision = precedence.override_precedence(
        request.user_id,
        request.week,
        request.season,
        request.channel,
        request.reason,
        admin_id=request.admin_id,
        guest_email=request.guest_email
    )
    return PrecedenceDecisionResponse(**decision.to_dict())


@router.delete("/override", response_model=PrecedenceDecisionResponse)
def clear_override(
    user_id: UUID,
    season: int,
    week: int,
    precedence: PrecedenceService = Depends(get_precedence_service)
):
    """Drop the override; the default rule decides again."""
    decision = precedence.clear_override(user_id, week, season)
    return PrecedenceDecisionResponse(**decision.to_dict())


@router.post("/arbitrate", response_model=PrecedenceDecisionResponse)
def arbitrate(
    request: PeriodIdentity,
    precedence: PrecedenceService = Depends(get_precedence_service)
):
    """Recompute the active channel for one user and week."""
    decision = precedence.arbitrate(request.user_id, request.week, request.season)
    return PrecedenceDecisionResponse(**decision.to_dict())


@router.get("/conflicts", response_model=PrecedenceConflictsResponse)
def list_conflicts(
    season: Optional[int] = Query(None),
    unresolved_only: bool = Query(False),
    precedence: PrecedenceService = Depends(get_precedence_service)
):
    """Users with both identified and claimed guest submissions for the same week."""
    conflicts = precedence.detect_conflicts(season)
    if unresolved_only:
        conflicts = [c for c in conflicts if not c['resolved']]
    return PrecedenceConflictsResponse(
        count=len(conflicts),
        unresolved=sum(1 for c in conflicts if not c['resolved']),
        conflicts=[PrecedenceConflict(**c) for c in conflicts]
    )
