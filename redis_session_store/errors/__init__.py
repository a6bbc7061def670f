"""
Error handling module for the session store.

This module provides structured error handling with:
- ErrorCode enum for standardized error codes
- SessionStoreException and its subclasses for store failures
- Error response models for consistent API responses
- Exception handlers for FastAPI integration
"""

from redis_session_store.errors.codes import ErrorCode
from redis_session_store.errors.exceptions import (
    InvalidTTLError,
    SessionSerializationError,
    SessionStoreException,
    SessionStoreUnavailableError,
    StoreConfigurationError,
)
from redis_session_store.errors.handlers import (
    ErrorResponse,
    handle_store_exception,
    handle_unexpected_exception,
    register_exception_handlers,
)

__all__ = [
    "ErrorCode",
    "SessionStoreException",
    "SessionStoreUnavailableError",
    "SessionSerializationError",
    "InvalidTTLError",
    "StoreConfigurationError",
    "ErrorResponse",
    "handle_store_exception",
    "handle_unexpected_exception",
    "register_exception_handlers",
]
