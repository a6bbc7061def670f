"""
Readiness probe for the session store.

This module provides StoreHealthCheck, which pings the store under a
timeout and reports the outcome together with the measured response time,
ready to be returned from a ``/health/ready`` endpoint.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Optional, Any

logger = logging.getLogger(__name__)


@dataclass
class DependencyHealth:
    """
    Health status of the session store.

    Attributes:
        name: The name of the dependency
        healthy: Whether the store is healthy and responding
        response_time_ms: The time taken to check the store in milliseconds
        error: Optional error message if the check failed
    """
    name: str
    healthy: bool
    response_time_ms: float
    error: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result = {
            "name": self.name,
            "healthy": self.healthy,
            "response_time_ms": round(self.response_time_ms, 2),
        }
        if self.error is not None:
            result["error"] = self.error
        return result


class StoreHealthCheck:
    """
    Check the session store's connectivity with a timeout.

    Attributes:
        store: The session store to probe (must provide ``health_check()``)
        check_timeout: Timeout in seconds for the probe (default: 5.0)
        name: Dependency name reported in results
    """

    def __init__(self, store: Any, check_timeout: float = 5.0, name: str = "session_store"):
        self.store = store
        self.check_timeout = check_timeout
        self.name = name

    @classmethod
    def from_settings(cls, store: Any, settings: Any) -> "StoreHealthCheck":
        return cls(store, check_timeout=settings.health_check_timeout)

    async def check(self) -> DependencyHealth:
        """
        Ping the session store.

        Returns:
            DependencyHealth: The health status of the session store
        """
        start_time = time.perf_counter()

        try:
            result = await asyncio.wait_for(
                self.store.health_check(),
                timeout=self.check_timeout
            )

            elapsed_ms = (time.perf_counter() - start_time) * 1000

            if result:
                logger.debug(f"Session store health check passed in {elapsed_ms:.2f}ms")
                return DependencyHealth(
                    name=self.name,
                    healthy=True,
                    response_time_ms=elapsed_ms
                )
            logger.warning(f"Session store health check returned False after {elapsed_ms:.2f}ms")
            return DependencyHealth(
                name=self.name,
                healthy=False,
                response_time_ms=elapsed_ms,
                error="Session store health check returned False"
            )

        except asyncio.TimeoutError:
            elapsed_ms = (time.perf_counter() - start_time) * 1000
            error_msg = f"Session store health check timed out after {self.check_timeout} seconds"
            logger.warning(error_msg)
            return DependencyHealth(
                name=self.name,
                healthy=False,
                response_time_ms=elapsed_ms,
                error=error_msg
            )
