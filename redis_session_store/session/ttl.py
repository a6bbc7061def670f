"""
TTL resolution for session records.

A store's ``ttl`` option is normalised into one of two variants:

- ``FixedTTL``: a constant number of seconds, independent of the session.
- ``ResolverTTL``: a callable ``(store, session, session_id) -> seconds``
  evaluated on every write and touch.

When no TTL is configured the session cookie's ``max_age`` (milliseconds)
is used, falling back to one day.
"""

import math
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Callable, Optional, Union

from redis_session_store.errors.exceptions import InvalidTTLError, StoreConfigurationError

# One day, used when neither the store nor the cookie provides a lifetime
DEFAULT_TTL_SECONDS = 86400

TTLResolver = Callable[[Any, Mapping, str], Union[int, float, str]]


@dataclass(frozen=True)
class FixedTTL:
    """A constant lifetime in seconds."""
    seconds: int


@dataclass(frozen=True)
class ResolverTTL:
    """A lifetime computed per call from the store, the session and its id."""
    resolver: TTLResolver


TTL = Union[FixedTTL, ResolverTTL]


def to_seconds(value: Any) -> int:
    """
    Coerce a numeric value or numeric string to whole seconds.

    Fractions are truncated.

    Raises:
        ValueError: If the value is not a finite number.
    """
    if isinstance(value, bool):
        raise ValueError(f"not a number of seconds: {value!r}")
    if isinstance(value, str):
        value = float(value.strip())
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not math.isfinite(value):
            raise ValueError(f"not a finite number of seconds: {value!r}")
        return int(value)
    raise ValueError(f"not a number of seconds: {value!r}")


def coerce_ttl(value: Any) -> Optional[TTL]:
    """
    Normalise the ``ttl`` store option into a TTL variant.

    Args:
        value: None, an existing variant, a timedelta, a callable,
            or a number / numeric string of seconds.

    Returns:
        The TTL variant, or None when the cookie fallback applies.

    Raises:
        StoreConfigurationError: If a literal value is not numeric.
    """
    if value is None or isinstance(value, (FixedTTL, ResolverTTL)):
        return value
    if isinstance(value, timedelta):
        return FixedTTL(int(value.total_seconds()))
    if callable(value):
        return ResolverTTL(value)
    try:
        return FixedTTL(to_seconds(value))
    except ValueError as exc:
        raise StoreConfigurationError(
            f"ttl must be a number of seconds or a callable, got {value!r}",
            details={"option": "ttl"}
        ) from exc


def cookie_ttl(session: Any) -> int:
    """Lifetime derived from ``session["cookie"]["max_age"]`` in milliseconds."""
    cookie = session.get("cookie") if isinstance(session, Mapping) else None
    max_age = cookie.get("max_age") if isinstance(cookie, Mapping) else None
    if (
        isinstance(max_age, (int, float))
        and not isinstance(max_age, bool)
        and math.isfinite(max_age)
    ):
        return math.floor(max_age / 1000)
    return DEFAULT_TTL_SECONDS


def resolve_ttl(store: Any, session: Any, session_id: str) -> int:
    """
    Compute the expiration, in seconds, for one write or touch.

    The first matching source wins: a fixed TTL, then a resolver, then
    the session cookie. Nothing is cached between calls.

    Args:
        store: The store whose ``ttl`` attribute holds the TTL variant
        session: The session value being written or touched
        session_id: The session id

    Raises:
        InvalidTTLError: If a resolver returns a non-numeric value.
    """
    ttl = store.ttl
    if isinstance(ttl, FixedTTL):
        return ttl.seconds
    if isinstance(ttl, ResolverTTL):
        result = ttl.resolver(store, session, session_id)
        try:
            return to_seconds(result)
        except ValueError as exc:
            raise InvalidTTLError(
                f"TTL resolver returned a non-numeric value: {result!r}",
                details={"session_id": session_id}
            ) from exc
    return cookie_ttl(session)
