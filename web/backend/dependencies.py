#!/usr/bin/env python3
"""
FastAPI dependencies for dependency injection.
"""

from typing import Optional

from fastapi import Depends

from core.app_context import AppContext
from core.leaderboard.service import LeaderboardService
from core.precedence.service import PrecedenceService
from core.scoring.service import OutcomeService
from pipeline.runner import BatchScheduler
from .config import get_config

# Global application context, built on first request
_app_context: Optional[AppContext] = None


def get_app_context() -> AppContext:
    """
    FastAPI dependency returning the wired services.

    Tests replace it through app.dependency_overrides.
    """
    global _app_context
    if _app_context is None:
        _app_context = AppContext.build(get_config())
    return _app_context


def get_outcome_service(ctx: AppContext = Depends(get_app_context)) -> OutcomeService:
    return ctx.outcome_service


def get_scheduler(ctx: AppContext = Depends(get_app_context)) -> BatchScheduler:
    return ctx.scheduler


def get_leaderboard_service(ctx: AppContext = Depends(get_app_context)) -> LeaderboardService:
    return ctx.leaderboard_service


def get_precedence_service(ctx: AppContext = Depends(get_app_context)) -> PrecedenceService:
    return ctx.precedence_service
