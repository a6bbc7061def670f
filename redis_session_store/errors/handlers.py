"""
Exception handlers for applications that use the session store.

This module provides FastAPI exception handlers that convert session
store exceptions escaping a request into structured JSON error responses
with a consistent format.
"""

import logging
import traceback
from typing import Any, Optional

from fastapi import Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from redis_session_store.errors.codes import ErrorCode
from redis_session_store.errors.exceptions import SessionStoreException

logger = logging.getLogger(__name__)


class ErrorResponse(BaseModel):
    """
    Structured error response model.

    All error responses produced by these handlers follow this format so
    clients can handle store outages programmatically.
    """
    error_code: str
    message: str
    details: Optional[dict[str, Any]] = None
    session_id: Optional[str] = None


def get_session_id(request: Request) -> Optional[str]:
    """
    Get the session ID assigned to the request by the session middleware.

    Args:
        request: The FastAPI request object

    Returns:
        The session ID string, or None when no session middleware ran
    """
    return getattr(request.state, "session_id", None)


async def handle_store_exception(request: Request, exc: SessionStoreException) -> JSONResponse:
    """
    Handle session store exceptions and convert to structured response.

    Args:
        request: The FastAPI request object
        exc: The SessionStoreException that was raised

    Returns:
        JSONResponse with structured error format
    """
    session_id = get_session_id(request)

    logger.warning(
        "Session store error occurred",
        extra={"extra_data": {
            "error_code": exc.error_code.value,
            "error_message": exc.message,
            "status_code": exc.status_code,
            "details": exc.details,
            "path": request.url.path,
            "method": request.method,
        }}
    )

    error_response = ErrorResponse(
        error_code=exc.error_code.value,
        message=exc.message,
        details=exc.details,
        session_id=session_id,
    )

    return JSONResponse(
        status_code=exc.status_code,
        content=error_response.model_dump(exclude_none=True),
    )


async def handle_unexpected_exception(request: Request, exc: Exception) -> JSONResponse:
    """
    Handle unexpected exceptions safely without exposing internal details.

    This handler logs the full stack trace for debugging and returns a
    generic error response to the client.

    Args:
        request: The FastAPI request object
        exc: The unexpected exception that was raised

    Returns:
        JSONResponse with generic error message (no internal details exposed)
    """
    logger.error(
        "Unexpected error occurred",
        extra={"extra_data": {
            "error_code": ErrorCode.INTERNAL_ERROR.value,
            "path": request.url.path,
            "method": request.method,
            "exception_type": type(exc).__name__,
            "exception_message": str(exc),
            "stack_trace": traceback.format_exc(),
        }},
        exc_info=True,
    )

    error_response = ErrorResponse(
        error_code=ErrorCode.INTERNAL_ERROR.value,
        message="An unexpected error occurred. Please try again later.",
        details=None,  # Never expose internal details
        session_id=get_session_id(request),
    )

    return JSONResponse(
        status_code=500,
        content=error_response.model_dump(exclude_none=True),
    )


def register_exception_handlers(app) -> None:
    """
    Register the session store exception handlers with a FastAPI application.

    Args:
        app: The FastAPI application instance
    """
    app.add_exception_handler(SessionStoreException, handle_store_exception)
    app.add_exception_handler(Exception, handle_unexpected_exception)

    logger.info("Session store exception handlers registered")
