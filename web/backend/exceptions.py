#!/usr/bin/env python3
"""
Error handlers for the web application.

Service exceptions live in core.exceptions so the batch pipeline and the CLI
raise the same types; each carries its HTTP status code. Every error body
has the same shape:

    {"success": false, "error": "...", "type": "...", "details": {...}}
"""

import logging
from typing import Any, Dict, Optional

from fastapi import Request, HTTPException
from fastapi.responses import JSONResponse

from core.exceptions import ServiceException

logger = logging.getLogger(__name__)

# Exception attributes worth echoing back to an admin client
_DETAIL_ATTRIBUTES = ('contest_id', 'user_id', 'week', 'season', 'guest_emails')


def _error_response(
    status_code: int,
    error: Any,
    error_type: str,
    details: Optional[Dict[str, Any]] = None
) -> JSONResponse:
    content = {
        "success": False,
        "error": error,
        "type": error_type
    }
    if details:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content)


def _exception_details(exc: ServiceException) -> Dict[str, Any]:
    details = {}
    for name in _DETAIL_ATTRIBUTES:
        value = getattr(exc, name, None)
        if value is None:
            continue
        details[name] = value if isinstance(value, (int, list)) else str(value)
    return details


async def service_exception_handler(
    request: Request,
    exc: ServiceException
) -> JSONResponse:
    """
    Map a service exception to its status code.

    4xx are client mistakes and logged at WARNING; anything else is a
    server fault and logged with the traceback.
    """
    status_code = getattr(exc, 'status_code', 500)
    if status_code >= 500:
        logger.error(f"Service error in {request.url.path}: {exc}", exc_info=True)
    else:
        logger.warning(f"{exc.__class__.__name__} in {request.url.path}: {exc}")

    return _error_response(status_code, str(exc), exc.__class__.__name__, _exception_details(exc))


async def http_exception_handler(
    request: Request,
    exc: HTTPException
) -> JSONResponse:
    return _error_response(exc.status_code, exc.detail, "HTTPException")


async def general_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """Unexpected errors never leak internals to the client."""
    logger.exception(f"Unexpected error in {request.url.path}")
    return _error_response(500, "Internal server error", "InternalError")
