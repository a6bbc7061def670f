"""
Session persistence module.

This module provides the session store contract and its Redis-backed
implementation, together with the pieces the store is built from:
key namespacing, TTL resolution and the record codec.
"""

from redis_session_store.session.codec import RecordCodec, Serializer
from redis_session_store.session.keyspace import DEFAULT_PREFIX, KeyNamespace, resolve_prefix
from redis_session_store.session.redis_store import (
    CONNECT_EVENT,
    DEFAULT_SCAN_COUNT,
    DISCONNECT_EVENT,
    RedisStore,
)
from redis_session_store.session.store import SessionStore
from redis_session_store.session.ttl import (
    DEFAULT_TTL_SECONDS,
    TTL,
    FixedTTL,
    ResolverTTL,
    coerce_ttl,
    resolve_ttl,
)

__all__ = [
    "SessionStore",
    "RedisStore",
    "RecordCodec",
    "Serializer",
    "KeyNamespace",
    "resolve_prefix",
    "DEFAULT_PREFIX",
    "DEFAULT_SCAN_COUNT",
    "CONNECT_EVENT",
    "DISCONNECT_EVENT",
    "TTL",
    "FixedTTL",
    "ResolverTTL",
    "DEFAULT_TTL_SECONDS",
    "coerce_ttl",
    "resolve_ttl",
]
