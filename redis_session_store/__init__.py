"""
Redis-backed persistence for server-side web sessions.

The store keeps each session under ``prefix + session_id`` with an
expiration resolved on every write, and lists sessions with SCAN + MGET.
"""

from redis_session_store.errors.exceptions import (
    InvalidTTLError,
    SessionSerializationError,
    SessionStoreException,
    SessionStoreUnavailableError,
    StoreConfigurationError,
)
from redis_session_store.session.redis_store import RedisStore
from redis_session_store.session.store import SessionStore
from redis_session_store.session.ttl import FixedTTL, ResolverTTL

__version__ = "1.0.0"

__all__ = [
    "RedisStore",
    "SessionStore",
    "FixedTTL",
    "ResolverTTL",
    "SessionStoreException",
    "SessionStoreUnavailableError",
    "SessionSerializationError",
    "InvalidTTLError",
    "StoreConfigurationError",
]
