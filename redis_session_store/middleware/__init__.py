"""
Middleware components for applications using the session store.

This module contains the FastAPI/Starlette middleware that loads and
persists sessions through a SessionStore on every request.
"""

from redis_session_store.middleware.session import (
    DEFAULT_COOKIE_NAME,
    SessionMiddleware,
    destroy_session,
    generate_session_id,
    setup_session_middleware,
)

__all__ = [
    "DEFAULT_COOKIE_NAME",
    "SessionMiddleware",
    "destroy_session",
    "generate_session_id",
    "setup_session_middleware",
]
