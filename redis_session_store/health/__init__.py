"""
Health check module for the session store.

This module provides a readiness probe that pings the store with a
timeout and reports its response time.
"""

from redis_session_store.health.service import (
    DependencyHealth,
    StoreHealthCheck,
)

__all__ = [
    "DependencyHealth",
    "StoreHealthCheck",
]
