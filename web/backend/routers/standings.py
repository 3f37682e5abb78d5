#!/usr/bin/env python3
"""
Standings endpoints - weekly, season and best-finish leaderboards.

These never surface internal errors: when standings cannot be recomputed
the last good snapshot is returned with stale=true, or available=false.
"""

from uuid import UUID
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query

from core.leaderboard.models import (
    StandingsQuery,
    StandingsSnapshot,
    SCOPE_WEEK,
    SCOPE_SEASON,
    SCOPE_BEST_FINISH,
)
from core.leaderboard.service import LeaderboardService
from ..dependencies import get_leaderboard_service
from ..models.responses import (
    StandingsResponse,
    StandingEntryResponse,
    BestFinishDetailsResponse
)

router = APIRouter(prefix="/api/standings", tags=["standings"])


def _build_query(
    scope: str,
    season: int,
    week: Optional[int],
    settlement: Optional[List[str]],
    limit: Optional[int]
) -> StandingsQuery:
    try:
        return StandingsQuery(
            scope=scope,
            season=season,
            week=week,
            settlement_filter=frozenset(settlement) if settlement else None,
            limit=limit
        )
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))


def _to_response(snapshot: StandingsSnapshot) -> StandingsResponse:
    entries = [StandingEntryResponse(**entry.to_dict()) for entry in snapshot.entries]
    return StandingsResponse(
        scope=snapshot.scope,
        season=snapshot.season,
        week=snapshot.week,
        generated_at=snapshot.generated_at,
        stale=snapshot.stale,
        available=snapshot.available,
        count=len(entries),
        entries=entries
    )


@router.get("/week/{season}/{week}", response_model=StandingsResponse)
def get_week_standings(
    season: int,
    week: int,
    settlement: Optional[List[str]] = Query(None, description="Settlement statuses to include (paid, pending, unpaid)"),
    limit: Optional[int] = Query(None, ge=1, le=1000),
    leaderboard: LeaderboardService = Depends(get_leaderboard_service)
):
    """Standings for a single week."""
    query = _build_query(SCOPE_WEEK, season, week, settlement, limit)
    return _to_response(leaderboard.get_standings(query))


@router.get("/season/{season}", response_model=StandingsResponse)
def get_season_standings(
    season: int,
    settlement: Optional[List[str]] = Query(None, description="Settlement statuses to include (paid, pending, unpaid)"),
    limit: Optional[int] = Query(None, ge=1, le=1000),
    leaderboard: LeaderboardService = Depends(get_leaderboard_service)
):
    """Cumulative standings across every week of a season."""
    query = _build_query(SCOPE_SEASON, season, None, settlement, limit)
    return _to_response(leaderboard.get_standings(query))


@router.get("/best-finish/{season}", response_model=StandingsResponse)
def get_best_finish_standings(
    season: int,
    settlement: Optional[List[str]] = Query(None, description="Settlement statuses to include (paid, pending, unpaid)"),
    limit: Optional[int] = Query(None, ge=1, le=1000),
    leaderboard: LeaderboardService = Depends(get_leaderboard_service)
):
    """
    Best-finish leaderboard over the final weeks of the season.

    Ties break on win %, then lock win %, then display name.
    """
    query = _build_query(SCOPE_BEST_FINISH, season, None, settlement, limit)
    return _to_response(leaderboard.get_standings(query))


@router.get("/best-finish/{season}/users/{user_id}", response_model=BestFinishDetailsResponse)
def get_best_finish_details(
    season: int,
    user_id: UUID,
    leaderboard: LeaderboardService = Depends(get_leaderboard_service)
):
    """Per-week best-finish breakdown for one user."""
    return BestFinishDetailsResponse(**leaderboard.get_best_finish_details(user_id, season))
