"""
Telemetry service for structured logging.

This module provides structured JSON logging with session correlation
and the default logger used for Redis client errors when the store is
created with ``log_errors=True``.
"""

import logging
import json
import sys
from datetime import datetime, timezone
from typing import Any, Optional, Dict
from contextvars import ContextVar

# Session id of the request being served, set by the session middleware
session_id_var: ContextVar[str] = ContextVar("session_id", default="")

STORE_LOGGER_NAME = "redis_session_store"


class JSONFormatter(logging.Formatter):
    """
    Custom log formatter that outputs logs in JSON format.

    Each log entry contains:
    - timestamp: ISO 8601 formatted UTC timestamp
    - level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    - message: The log message
    - logger: Name of the logger that produced the entry
    - session_id: Session of the request being served, if any

    Additional fields can be included via the 'extra_data' attribute
    on the log record.
    """

    def format(self, record: logging.LogRecord) -> str:
        """
        Format a log record as a JSON string.

        Args:
            record: The log record to format

        Returns:
            JSON-formatted string containing the log entry
        """
        log_data: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
            "session_id": session_id_var.get(""),
        }

        if record.module:
            log_data["module"] = record.module
        if record.funcName and record.funcName != "<module>":
            log_data["function"] = record.funcName
        if record.lineno:
            log_data["line"] = record.lineno

        if hasattr(record, "extra_data") and record.extra_data:
            log_data.update(record.extra_data)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        if record.stack_info:
            log_data["stack_trace"] = record.stack_info

        return json.dumps(log_data, default=str)


class TelemetryService:
    """
    Centralized logging setup for applications hosting the session store.

    Installs the JSONFormatter on the root logger at the level named by
    ``settings.log_level`` (INFO when no settings are given).
    """

    def __init__(self, settings: Optional[Any] = None):
        """
        Initialize the telemetry service.

        Args:
            settings: Store settings carrying a ``log_level`` attribute
        """
        self.settings = settings
        self._logger = None
        self._setup_logging()

    def _setup_logging(self) -> None:
        """
        Configure structured JSON logging.

        Sets up the root logger with JSONFormatter and configures
        the log level based on settings.
        """
        log_level_str = "INFO"
        if self.settings and hasattr(self.settings, "log_level"):
            log_level_str = self.settings.log_level

        log_level = getattr(logging, log_level_str.upper(), logging.INFO)

        json_formatter = JSONFormatter()

        root_logger = logging.getLogger()
        root_logger.setLevel(log_level)

        # Remove existing handlers to avoid duplicate logs
        for handler in root_logger.handlers[:]:
            root_logger.removeHandler(handler)

        stdout_handler = logging.StreamHandler(sys.stdout)
        stdout_handler.setLevel(log_level)
        stdout_handler.setFormatter(json_formatter)
        root_logger.addHandler(stdout_handler)

        self._logger = logging.getLogger("telemetry")
        self._logger.info("Telemetry service initialized", extra={
            "extra_data": {"log_level": log_level_str}
        })

    def get_logger(self, name: str) -> logging.Logger:
        """
        Get a logger with the specified name.

        Args:
            name: Name for the logger (typically module name)

        Returns:
            Configured logger instance
        """
        return logging.getLogger(name)


def default_error_logger(error: BaseException) -> None:
    """
    Log a Redis client error reported by the store.

    Used when the store is created with ``log_errors=True``.
    """
    logging.getLogger(STORE_LOGGER_NAME).warning(
        f"Warning: redis_session_store reported a client error: {error}",
        extra={"extra_data": {"error_type": type(error).__name__}}
    )


# Global telemetry service instance
_telemetry_service: Optional[TelemetryService] = None


def get_telemetry_service() -> Optional[TelemetryService]:
    """
    Get the global telemetry service instance.

    Returns:
        The telemetry service instance, or None if not initialized
    """
    return _telemetry_service


def initialize_telemetry(settings: Optional[Any] = None) -> TelemetryService:
    """
    Initialize the global telemetry service.

    Args:
        settings: Store settings for configuration

    Returns:
        The initialized telemetry service
    """
    global _telemetry_service
    _telemetry_service = TelemetryService(settings)
    return _telemetry_service


def set_session_id(session_id: str):
    """
    Set the session ID for the current context.

    Returns:
        The context token, to be passed to ``session_id_var.reset``
    """
    return session_id_var.set(session_id)


def get_session_id() -> str:
    """
    Get the current session ID from context.

    Returns:
        The current session ID, or empty string if not set
    """
    return session_id_var.get("")
