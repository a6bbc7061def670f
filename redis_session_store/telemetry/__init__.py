"""
Telemetry module for structured logging.

This module provides:
- JSONFormatter for structured JSON log output
- TelemetryService for centralized logging setup
- Session correlation through a context variable
- The default Redis client error logger
"""

from redis_session_store.telemetry.service import (
    JSONFormatter,
    STORE_LOGGER_NAME,
    TelemetryService,
    default_error_logger,
    get_session_id,
    get_telemetry_service,
    initialize_telemetry,
    session_id_var,
    set_session_id,
)

__all__ = [
    "JSONFormatter",
    "STORE_LOGGER_NAME",
    "TelemetryService",
    "default_error_logger",
    "get_session_id",
    "get_telemetry_service",
    "initialize_telemetry",
    "session_id_var",
    "set_session_id",
]
