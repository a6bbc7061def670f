"""
Configuration management for the session store.

This module provides configuration loading and validation using Pydantic
settings. Values are read from ``SESSION_STORE_*`` environment variables
or .env files, then turned into RedisStore keyword options.

The environment-specific file (.env.development, .env.staging,
.env.production) is chosen from SESSION_STORE_ENVIRONMENT and overrides
the base .env file.
"""

import os
from enum import Enum
from pathlib import Path
from typing import Any, Optional, List, Tuple

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_PREFIX = "SESSION_STORE_"


class Environment(str, Enum):
    """Supported deployment environments."""
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


def _detect_environment() -> Environment:
    """
    Detect the current environment from SESSION_STORE_ENVIRONMENT.

    Returns:
        Environment: The detected environment, defaults to DEVELOPMENT if not set.
    """
    env_value = os.environ.get(f"{ENV_PREFIX}ENVIRONMENT", "development").lower().strip()
    try:
        return Environment(env_value)
    except ValueError:
        return Environment.DEVELOPMENT


def _get_env_files(environment: Environment) -> Tuple[str, ...]:
    """
    Get the list of .env files to load for the given environment.

    Files are loaded in order, with later files overriding earlier ones.

    Args:
        environment: The target environment.

    Returns:
        Tuple of .env file paths to load.
    """
    env_file_map = {
        Environment.DEVELOPMENT: ".env.development",
        Environment.STAGING: ".env.staging",
        Environment.PRODUCTION: ".env.production",
    }
    env_specific_file = env_file_map.get(environment, ".env.development")

    return (".env", env_specific_file)


class StoreSettings(BaseSettings):
    """
    Session store settings loaded from environment variables.

    Outside development a Redis URL is required; in development the store
    falls back to the Redis client's defaults (localhost:6379, db 0).
    """

    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Deployment environment (development, staging, production)"
    )

    # Redis connection
    redis_url: Optional[str] = Field(
        default=None,
        description="Redis connection URL, e.g. redis://:password@localhost:6379/0"
    )

    # Session records
    prefix: str = Field(
        default="sess:",
        description="Key namespace prefix for session records"
    )
    ttl: Optional[int] = Field(
        default=None,
        ge=1,
        description="Fixed session lifetime in seconds; unset uses the cookie max_age"
    )
    disable_ttl: bool = Field(
        default=False,
        description="Store session records without expiration"
    )
    scan_count: int = Field(
        default=100,
        ge=1,
        le=100000,
        description="COUNT hint for SCAN when listing sessions"
    )
    log_errors: bool = Field(
        default=False,
        description="Log Redis client errors with the default logger"
    )

    # Session cookie
    cookie_name: str = Field(
        default="sid",
        description="Name of the cookie carrying the session id"
    )
    cookie_max_age_ms: Optional[int] = Field(
        default=None,
        ge=0,
        description="Session cookie lifetime in milliseconds"
    )
    cookie_secure: bool = Field(
        default=False,
        description="Send the session cookie over HTTPS only"
    )

    # Observability
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    health_check_timeout: float = Field(
        default=5.0,
        gt=0,
        description="Timeout in seconds for the store readiness probe"
    )

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    @field_validator("redis_url")
    @classmethod
    def validate_redis_url(cls, v: Optional[str]) -> Optional[str]:
        """Validate that redis_url uses a Redis scheme."""
        if v is None or not v.strip():
            return None
        v = v.strip()
        if not v.startswith(("redis://", "rediss://", "unix://")):
            raise ValueError("redis_url must start with redis://, rediss:// or unix://")
        return v

    @field_validator("prefix")
    @classmethod
    def validate_prefix(cls, v: str) -> str:
        """Validate that the prefix is not empty."""
        if not v:
            raise ValueError("prefix cannot be empty")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate that log_level is a valid logging level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v = v.strip().upper()
        if v not in valid_levels:
            raise ValueError(f"log_level must be one of: {', '.join(sorted(valid_levels))}")
        return v

    @model_validator(mode="after")
    def validate_redis_config(self) -> "StoreSettings":
        """Validate that a Redis URL is provided outside development."""
        if not self.redis_url and self.environment != Environment.DEVELOPMENT:
            raise ValueError(
                "redis_url is required in non-development environments"
            )
        return self

    def store_options(self) -> dict[str, Any]:
        """Keyword arguments for ``RedisStore``."""
        return {
            "url": self.redis_url,
            "prefix": self.prefix,
            "ttl": self.ttl,
            "disable_ttl": self.disable_ttl,
            "scan_count": self.scan_count,
            "log_errors": self.log_errors,
        }


class ConfigurationError(Exception):
    """Exception raised when configuration validation fails."""

    def __init__(self, message: str, missing_fields: Optional[List[str]] = None,
                 invalid_fields: Optional[dict] = None):
        self.message = message
        self.missing_fields = missing_fields or []
        self.invalid_fields = invalid_fields or {}
        super().__init__(self.format_error_message())

    def format_error_message(self) -> str:
        """Format a descriptive error message listing all issues."""
        parts = [self.message]

        if self.missing_fields:
            parts.append(f"\nMissing required fields: {', '.join(self.missing_fields)}")

        if self.invalid_fields:
            invalid_parts = [f"  - {field}: {error}" for field, error in self.invalid_fields.items()]
            parts.append("\nInvalid field values:\n" + "\n".join(invalid_parts))

        return "".join(parts)


def create_settings_for_environment(environment: Optional[Environment] = None) -> StoreSettings:
    """
    Factory function to create StoreSettings for a specific environment.

    Args:
        environment: Optional environment override. If not provided, detected from
                    SESSION_STORE_ENVIRONMENT.

    Returns:
        StoreSettings: Validated settings for the specified environment.

    Raises:
        ConfigurationError: If settings are missing or invalid.
    """
    if environment is None:
        environment = _detect_environment()

    env_files = _get_env_files(environment)
    existing_env_files = [env_file for env_file in env_files if Path(env_file).exists()]
    if not existing_env_files:
        existing_env_files = list(env_files)

    try:
        class EnvironmentSettings(StoreSettings):
            model_config = SettingsConfigDict(
                env_prefix=ENV_PREFIX,
                env_file=tuple(existing_env_files),
                env_file_encoding="utf-8",
                case_sensitive=False,
                extra="ignore"
            )

        return EnvironmentSettings(environment=environment)
    except Exception as e:
        missing_fields = []
        invalid_fields = {}

        # Extract field-level errors from Pydantic ValidationError
        if hasattr(e, 'errors'):
            for error in e.errors():
                field_name = '.'.join(str(loc) for loc in error.get('loc', [])) or "settings"
                error_type = error.get('type', '')
                error_msg = error.get('msg', str(error))

                if error_type == 'missing':
                    missing_fields.append(field_name)
                else:
                    invalid_fields[field_name] = error_msg

        raise ConfigurationError(
            f"Failed to load session store configuration for environment '{environment.value}'",
            missing_fields=missing_fields,
            invalid_fields=invalid_fields
        ) from e


# Global settings cache
_settings_cache: Optional[StoreSettings] = None


def get_settings() -> StoreSettings:
    """
    Get the session store settings singleton.

    Settings are loaded once and cached for subsequent calls.

    Raises:
        ConfigurationError: If settings are missing or invalid.
    """
    global _settings_cache

    if _settings_cache is None:
        _settings_cache = create_settings_for_environment()

    return _settings_cache


def clear_settings_cache() -> None:
    """
    Clear the settings cache.

    This is primarily useful for testing to allow reloading settings
    with different environment variables.
    """
    global _settings_cache
    _settings_cache = None
