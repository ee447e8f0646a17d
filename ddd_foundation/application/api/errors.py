"""Centralized error transformation for API boundaries.

Maps library errors to the structured payload ``{"error": str, "code": int}``.
Only the message and the code cross the boundary.
"""

import logging
from typing import Any

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from ddd_foundation.domain.shared.error import FoundationError

logger = logging.getLogger(__name__)


def error_payload(error: FoundationError) -> dict[str, Any]:
    return {"error": error.message, "code": error.code}


def _status_for(error: FoundationError) -> int:
    return error.code if 400 <= error.code <= 599 else 500


def map_foundation_error(error: FoundationError) -> HTTPException:
    """Map a library error to an HTTPException.

    Args:
        error: The error to map.

    Returns:
        HTTPException whose status is the error code (500 if the code is not
        an HTTP error status) and whose detail is the error payload.
    """
    return HTTPException(status_code=_status_for(error), detail=error_payload(error))


def register_error_handlers(app: FastAPI) -> None:
    """Install exception handlers that render errors as ``{"error", "code"}``."""

    @app.exception_handler(FoundationError)
    async def foundation_error_handler(request: Request, exc: FoundationError):
        http_exc = map_foundation_error(exc)
        return JSONResponse(status_code=http_exc.status_code, content=http_exc.detail)

    # Global exception handler - logs all unhandled exceptions
    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception(
            "Unhandled exception on %s %s",
            request.method,
            request.url.path,
        )
        return JSONResponse(
            status_code=500,
            content={"error": "Internal server error", "code": 500},
        )
