"""
Error code catalog for the session store.

This module defines all error codes raised by the store, covering
transport failures against Redis, record (de)serialization failures,
TTL resolution failures and configuration errors.
"""

from enum import Enum


class ErrorCode(str, Enum):
    """
    Enumeration of all error codes used by the session store.
    
    Each error code maps to the HTTP status code a web application
    should answer with when the error escapes a request:
    - Store errors (5xx): Redis is unreachable or rejected a command
    - Record errors (5xx): stored data could not be encoded or decoded
    - Configuration errors (5xx): the store was set up incorrectly
    """
    
    # Store errors
    SESSION_STORE_UNAVAILABLE = "SESSION_STORE_UNAVAILABLE"
    """Redis connection or command failure (HTTP 503)"""
    
    # Record errors
    SESSION_SERIALIZATION_ERROR = "SESSION_SERIALIZATION_ERROR"
    """Session value could not be encoded or decoded (HTTP 500)"""
    
    INVALID_TTL = "INVALID_TTL"
    """TTL resolver produced a non-numeric value (HTTP 500)"""
    
    # Configuration errors
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    """Invalid store options, credentials or database index (HTTP 500)"""
    
    # Internal errors
    INTERNAL_ERROR = "INTERNAL_ERROR"
    """Unexpected server error (HTTP 500)"""


# Mapping of error codes to their default HTTP status codes
ERROR_CODE_STATUS_MAP: dict[ErrorCode, int] = {
    ErrorCode.SESSION_STORE_UNAVAILABLE: 503,
    ErrorCode.SESSION_SERIALIZATION_ERROR: 500,
    ErrorCode.INVALID_TTL: 500,
    ErrorCode.CONFIGURATION_ERROR: 500,
    ErrorCode.INTERNAL_ERROR: 500,
}


def get_default_status_code(error_code: ErrorCode) -> int:
    """
    Get the default HTTP status code for an error code.
    
    Args:
        error_code: The error code to look up
        
    Returns:
        The default HTTP status code for the error code
    """
    return ERROR_CODE_STATUS_MAP.get(error_code, 500)
