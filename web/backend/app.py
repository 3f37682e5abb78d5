#!/usr/bin/env python3
"""
Pick Score API - FastAPI Application

Outcomes, resolution, precedence administration and standings over HTTP.

Usage:
    python -m web.backend.app

Then open:
    - http://localhost:8080/docs - API Documentation (Swagger UI)
    - http://localhost:8080/redoc - Alternative API Documentation
"""

import logging

from fastapi import FastAPI, HTTPException, Depends

from core.app_context import AppContext
from core.exceptions import ServiceException
from .config import get_config
from .dependencies import get_app_context
from .exceptions import (
    service_exception_handler,
    http_exception_handler,
    general_exception_handler
)
from .models.responses import HealthResponse
from .routers import (
    contests_router,
    admin_router,
    standings_router,
    precedence_router
)

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="Pick Score API",
    description="Pick scoring, precedence and leaderboard API",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

# Register exception handlers
app.add_exception_handler(ServiceException, service_exception_handler)
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(Exception, general_exception_handler)

# Include routers
app.include_router(contests_router)
app.include_router(admin_router)
app.include_router(standings_router)
app.include_router(precedence_router)


@app.get("/health", response_model=HealthResponse)
def health_check(ctx: AppContext = Depends(get_app_context)):
    """Health check endpoint."""
    cache_stats = ctx.standings_cache.get_cache_stats() if ctx.standings_cache else {"available": False}
    return HealthResponse(status="healthy", service="pickscore-api", cache=cache_stats)


def main():
    """Run the web server."""
    import uvicorn

    config = get_config()
    logger.info(f"Starting Pick Score API on {config.web.host}:{config.web.port}")
    logger.info(f"API Docs: http://{config.web.host}:{config.web.port}/docs")

    uvicorn.run(
        "web.backend.app:app",
        host=config.web.host,
        port=config.web.port,
        reload=False,
        log_level="info"
    )


if __name__ == "__main__":
    main()
