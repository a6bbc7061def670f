"""
Exception classes for the session store.

This module provides the SessionStoreException hierarchy and convenience
factory functions for creating store exceptions with proper error codes.

Every failure inside a store operation is delivered to the caller as one
of these exceptions; a missing session is never an error.
"""

from typing import Any, Optional

from redis_session_store.errors.codes import ErrorCode, get_default_status_code


class SessionStoreException(Exception):
    """
    Base exception class for all session store errors.

    This exception provides structured error information including:
    - error_code: A standardized error code from the ErrorCode enum
    - message: A human-readable error message
    - status_code: The HTTP status code a web application should return
    - details: Optional additional context (e.g., the session id)

    Example:
        raise SessionStoreException(
            error_code=ErrorCode.SESSION_SERIALIZATION_ERROR,
            message="Stored session could not be decoded",
            details={"session_id": "abc123"}
        )
    """

    def __init__(
        self,
        error_code: ErrorCode,
        message: str,
        status_code: Optional[int] = None,
        details: Optional[dict[str, Any]] = None
    ):
        """
        Initialize a SessionStoreException.

        Args:
            error_code: The error code from the ErrorCode enum
            message: A human-readable error message
            status_code: The HTTP status code (defaults to the error code's default)
            details: Optional dictionary with additional error context
        """
        self.error_code = error_code
        self.message = message
        self.status_code = status_code or get_default_status_code(error_code)
        self.details = details
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """
        Convert the exception to a dictionary for JSON serialization.

        Returns:
            Dictionary containing error_code, message, and details
        """
        result = {
            "error_code": self.error_code.value,
            "message": self.message,
        }
        if self.details is not None:
            result["details"] = self.details
        return result

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(error_code={self.error_code.value!r}, "
            f"message={self.message!r}, status_code={self.status_code}, "
            f"details={self.details!r})"
        )


class SessionStoreUnavailableError(SessionStoreException):
    """Redis could not be reached or rejected a command."""

    def __init__(self, message: str = "Session store unavailable",
                 details: Optional[dict[str, Any]] = None):
        super().__init__(ErrorCode.SESSION_STORE_UNAVAILABLE, message, details=details)


class SessionSerializationError(SessionStoreException):
    """A session value could not be encoded, or a stored record could not be decoded."""

    def __init__(self, message: str = "Session record could not be serialized",
                 details: Optional[dict[str, Any]] = None):
        super().__init__(ErrorCode.SESSION_SERIALIZATION_ERROR, message, details=details)


class InvalidTTLError(SessionStoreException):
    """A TTL resolver returned something that is not a number of seconds."""

    def __init__(self, message: str = "Session TTL could not be resolved",
                 details: Optional[dict[str, Any]] = None):
        super().__init__(ErrorCode.INVALID_TTL, message, details=details)


class StoreConfigurationError(SessionStoreException):
    """
    The store was configured incorrectly.

    Raised at construction for invalid options and from connect() for
    rejected credentials or database selection, never deferred to the
    first session operation.
    """

    def __init__(self, message: str = "Invalid session store configuration",
                 details: Optional[dict[str, Any]] = None):
        super().__init__(ErrorCode.CONFIGURATION_ERROR, message, details=details)


# Convenience factory functions for common error types

def session_store_unavailable(
    message: str = "Session store unavailable",
    details: Optional[dict[str, Any]] = None
) -> SessionStoreUnavailableError:
    """Create a session store unavailable exception."""
    return SessionStoreUnavailableError(message=message, details=details)


def serialization_error(
    message: str = "Session record could not be serialized",
    details: Optional[dict[str, Any]] = None
) -> SessionSerializationError:
    """Create a serialization exception."""
    return SessionSerializationError(message=message, details=details)


def invalid_ttl(
    message: str = "Session TTL could not be resolved",
    details: Optional[dict[str, Any]] = None
) -> InvalidTTLError:
    """Create an invalid TTL exception."""
    return InvalidTTLError(message=message, details=details)


def configuration_error(
    message: str = "Invalid session store configuration",
    details: Optional[dict[str, Any]] = None
) -> StoreConfigurationError:
    """Create a configuration exception."""
    return StoreConfigurationError(message=message, details=details)
