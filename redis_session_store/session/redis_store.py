"""
Redis-based session store implementation.

This module provides a Redis-backed implementation of the SessionStore
interface. Session values are serialized (JSON by default) and stored
under ``prefix + session_id`` with an expiration resolved per write.

Listing all sessions is done in two stages: the key space under the
prefix is walked with cursor-based SCAN in batches of ``scan_count``,
then every discovered key is fetched with a single MGET.
"""

import inspect
import logging
from collections.abc import MutableMapping
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Callable, Optional, Union

from redis.asyncio import Redis
from redis.exceptions import AuthenticationError, RedisError, ResponseError

from redis_session_store.errors.exceptions import (
    SessionSerializationError,
    SessionStoreUnavailableError,
    StoreConfigurationError,
)
from redis_session_store.session.codec import RecordCodec, Serializer
from redis_session_store.session.keyspace import KeyNamespace, resolve_prefix
from redis_session_store.session.store import SessionStore
from redis_session_store.session.ttl import resolve_ttl, coerce_ttl
from redis_session_store.telemetry.service import STORE_LOGGER_NAME, default_error_logger

logger = logging.getLogger(STORE_LOGGER_NAME)

DEFAULT_SCAN_COUNT = 100

# Events a store broadcasts to listeners registered with on()
CONNECT_EVENT = "connect"
DISCONNECT_EVENT = "disconnect"

ErrorLogger = Callable[[BaseException], Any]


def _as_str(key: Union[str, bytes]) -> str:
    return key.decode("utf-8") if isinstance(key, bytes) else key


def _resolve_scan_count(scan_count: Optional[int]) -> int:
    if scan_count is None:
        return DEFAULT_SCAN_COUNT
    if isinstance(scan_count, bool) or not isinstance(scan_count, int) or scan_count < 1:
        raise StoreConfigurationError(
            f"scan_count must be a positive integer, got {scan_count!r}",
            details={"option": "scan_count"}
        )
    return scan_count


def _resolve_error_logger(log_errors: Union[bool, ErrorLogger]) -> Optional[ErrorLogger]:
    if log_errors is True:
        return default_error_logger
    if log_errors is False or log_errors is None:
        return None
    if callable(log_errors):
        return log_errors
    raise StoreConfigurationError(
        "log_errors must be a boolean or a callable",
        details={"option": "log_errors"}
    )


class RedisStore(SessionStore):
    """
    Redis-backed session store.

    The store either uses a client handed to it (and never closes it) or
    creates and owns a ``redis.asyncio.Redis`` client from ``url`` and
    any extra keyword options, which are forwarded verbatim.

    The key prefix is applied by the store alone; the Redis client is
    never configured with a prefix of its own.

    Attributes:
        client: The async Redis client commands are issued on
        namespace: Key namespace derived from ``prefix``/``key_prefix``
        ttl: TTL variant, or None to use the session cookie's max_age
        disable_ttl: Write records without expiration
        codec: Record codec wrapping the configured serializer
        scan_count: COUNT hint for each SCAN round trip
    """

    def __init__(
        self,
        client: Optional[Any] = None,
        *,
        url: Optional[str] = None,
        ttl: Any = None,
        disable_ttl: bool = False,
        prefix: Optional[str] = None,
        key_prefix: Optional[str] = None,
        serializer: Optional[Serializer] = None,
        scan_count: Optional[int] = None,
        log_errors: Union[bool, ErrorLogger] = False,
        **client_options: Any,
    ):
        """
        Initialize the Redis session store.

        Args:
            client: A pre-built async Redis client (shared ownership)
            url: Redis connection URL used when no client is given
            ttl: Seconds, numeric string, timedelta or resolver callable
            disable_ttl: Store records without expiration
            prefix: Key namespace prefix (wins over key_prefix)
            key_prefix: Alternative name for prefix
            serializer: Object with dumps/loads, defaults to ``json``
            scan_count: Batch size hint for enumeration (default 100)
            log_errors: False, True for the default logger, or a callable
            **client_options: Forwarded to the Redis client constructor

        Raises:
            StoreConfigurationError: If any option is invalid.
        """
        self.namespace = KeyNamespace(resolve_prefix(prefix, key_prefix))
        self.ttl = coerce_ttl(ttl)
        self.disable_ttl = bool(disable_ttl)
        self.codec = RecordCodec(serializer)
        self.scan_count = _resolve_scan_count(scan_count)
        self._error_logger = _resolve_error_logger(log_errors)
        self._listeners: dict[str, list[Callable[..., Any]]] = {}

        if client is not None:
            self.client = client
            self._owns_client = False
        else:
            self.client = self._create_client(url, client_options)
            self._owns_client = True

    @staticmethod
    def _create_client(url: Optional[str], client_options: dict[str, Any]) -> Redis:
        try:
            if url:
                return Redis.from_url(url, **client_options)
            return Redis(**client_options)
        except (TypeError, ValueError) as exc:
            raise StoreConfigurationError(
                f"Invalid Redis client options: {exc}",
                details={"options": sorted(client_options)}
            ) from exc

    @classmethod
    def from_settings(cls, settings: Any, **overrides: Any) -> "RedisStore":
        """Build a store from ``StoreSettings``; keyword overrides win."""
        options = settings.store_options()
        options.update(overrides)
        return cls(**options)

    @property
    def prefix(self) -> str:
        return self.namespace.prefix

    @property
    def owns_client(self) -> bool:
        return self._owns_client

    # Events

    def on(self, event: str, listener: Callable[..., Any]) -> None:
        """
        Register a listener for ``"connect"`` or ``"disconnect"``.

        Listeners may be plain callables or coroutine functions.
        ``"disconnect"`` listeners receive the transport error.
        """
        self._listeners.setdefault(event, []).append(listener)

    def off(self, event: str, listener: Callable[..., Any]) -> None:
        listeners = self._listeners.get(event, [])
        if listener in listeners:
            listeners.remove(listener)

    async def _emit(self, event: str, *args: Any) -> None:
        for listener in list(self._listeners.get(event, [])):
            try:
                result = listener(*args)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.exception(f"Session store '{event}' listener failed")

    async def _report_error(self, error: BaseException) -> None:
        if self._error_logger is not None:
            try:
                result = self._error_logger(error)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.exception("Session store error logger failed")
        await self._emit(DISCONNECT_EVENT, error)

    @asynccontextmanager
    async def _transport(self, command: str) -> AsyncIterator[None]:
        """Translate client failures inside the block into SessionStoreUnavailableError."""
        try:
            yield
        except (RedisError, OSError) as exc:
            await self._report_error(exc)
            raise SessionStoreUnavailableError(
                f"Redis {command} failed: {exc}",
                details={"command": command}
            ) from exc

    # Connection lifecycle

    async def connect(self) -> None:
        """
        Verify the connection by sending PING.

        Emits ``"connect"`` on success.

        Raises:
            StoreConfigurationError: If Redis rejects the credentials or
                the database selection.
            SessionStoreUnavailableError: If Redis cannot be reached.
        """
        try:
            await self.client.ping()
        except (AuthenticationError, ResponseError) as exc:
            await self._report_error(exc)
            raise StoreConfigurationError(
                f"Redis rejected the connection setup: {exc}"
            ) from exc
        except (RedisError, OSError) as exc:
            await self._report_error(exc)
            raise SessionStoreUnavailableError(
                f"Redis PING failed: {exc}",
                details={"command": "PING"}
            ) from exc

        logger.info("Session store connected", extra={
            "extra_data": {"prefix": self.prefix}
        })
        await self._emit(CONNECT_EVENT)

    async def close(self) -> None:
        """
        Close the Redis connection if this store created it.

        A client passed in by the caller is left open.
        """
        if self._owns_client:
            await self.client.aclose()

    async def __aenter__(self) -> "RedisStore":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def health_check(self) -> bool:
        """
        Check connectivity and health of the Redis store.

        Returns:
            True if Redis answers PING, False otherwise.
        """
        try:
            result = await self.client.ping()
            return result is True
        except Exception:
            return False

    # Session operations

    async def get(self, session_id: str) -> Optional[dict[str, Any]]:
        """
        Retrieve a session by its ID.

        Returns:
            The decoded session, or None if the key is absent or empty.

        Raises:
            SessionStoreUnavailableError: On a transport failure.
            SessionSerializationError: If the stored record cannot be decoded.
        """
        key = self.namespace.physical_key(session_id)
        async with self._transport("GET"):
            raw = await self.client.get(key)

        if self.codec.is_absent(raw):
            logger.debug(f"GET {key}: not found")
            return None

        logger.debug(f"GOT {key}")
        return self.codec.decode(raw, session_id)

    async def set(self, session_id: str, session: dict[str, Any]) -> None:
        """
        Write a session with its expiration in a single SET.

        With ``disable_ttl`` the record is written without expiration.
        A resolved TTL of zero or less means the session has no lifetime
        left, so its key is deleted instead of written.

        Raises:
            SessionSerializationError: If the value cannot be encoded;
                no command is issued in that case.
            InvalidTTLError: If a TTL resolver returns a non-numeric value.
            SessionStoreUnavailableError: On a transport failure.
        """
        key = self.namespace.physical_key(session_id)
        payload = self.codec.encode(session, session_id)

        if self.disable_ttl:
            logger.debug(f"SET {key} without expiration")
            async with self._transport("SET"):
                await self.client.set(key, payload)
            return

        ttl = resolve_ttl(self, session, session_id)
        if ttl <= 0:
            logger.debug(f"DEL {key}: ttl {ttl} already elapsed")
            async with self._transport("DEL"):
                await self.client.delete(key)
            return

        logger.debug(f"SET {key} ttl:{ttl}")
        async with self._transport("SET"):
            await self.client.set(key, payload, ex=ttl)

    async def destroy(self, session_id: str) -> None:
        """Delete the session's key; a missing key is not an error."""
        key = self.namespace.physical_key(session_id)
        logger.debug(f"DEL {key}")
        async with self._transport("DEL"):
            await self.client.delete(key)

    async def touch(self, session_id: str, session: dict[str, Any]) -> bool:
        """
        Reset the expiration of an existing key without rewriting its value.

        With ``disable_ttl`` no expiration is applied and only the
        existence of the key is checked.

        Returns:
            True if the key existed, False otherwise (no error is raised
            for a missing key).
        """
        key = self.namespace.physical_key(session_id)

        if self.disable_ttl:
            async with self._transport("EXISTS"):
                return bool(await self.client.exists(key))

        ttl = resolve_ttl(self, session, session_id)
        logger.debug(f"EXPIRE {key} ttl:{ttl}")
        async with self._transport("EXPIRE"):
            return bool(await self.client.expire(key, ttl))

    # Enumeration

    async def _scan_batches(self) -> AsyncIterator[list[str]]:
        """Yield one batch of keys per SCAN round trip until the cursor returns to 0."""
        match = self.namespace.match_pattern()
        cursor = 0
        while True:
            async with self._transport("SCAN"):
                cursor, batch = await self.client.scan(
                    cursor=cursor, match=match, count=self.scan_count
                )
            yield [_as_str(key) for key in batch]
            if int(cursor) == 0:
                break

    async def all_keys(self) -> list[str]:
        """
        Return every physical key under the prefix, in arrival order.

        Keys revisited by SCAN during concurrent writes are not removed.
        """
        keys: list[str] = []
        async for batch in self._scan_batches():
            keys.extend(batch)
        logger.debug(f"SCAN {self.namespace.match_pattern()}: {len(keys)} keys")
        return keys

    async def all(self) -> dict[str, dict[str, Any]]:
        """
        Return every active session keyed by session ID.

        The keys found by ``all_keys`` are fetched with one MGET. Each
        decoded record is tagged with its session ID under ``"id"``.
        Records that expired between the scan and the MGET are skipped.

        Raises:
            SessionSerializationError: If any record cannot be decoded;
                no partial result is returned.
            SessionStoreUnavailableError: On a transport failure.
        """
        keys = await self.all_keys()
        if not keys:
            return {}

        async with self._transport("MGET"):
            values = await self.client.mget(keys)
        logger.debug(f"MGET {len(keys)} keys")

        sessions: dict[str, dict[str, Any]] = {}
        for key, raw in zip(keys, values):
            if self.codec.is_absent(raw):
                continue
            session_id = self.namespace.session_id(key)
            record = self.codec.decode(raw, session_id)
            if not isinstance(record, MutableMapping):
                raise SessionSerializationError(
                    "Stored session is not a mapping and cannot be tagged with its id",
                    details={"session_id": session_id}
                )
            record["id"] = session_id
            sessions[session_id] = record
        return sessions

    async def ids(self) -> list[str]:
        """Return the ID of every session under the prefix."""
        return [self.namespace.session_id(key) for key in await self.all_keys()]

    async def length(self) -> int:
        """Return the number of session keys under the prefix."""
        return len(await self.all_keys())

    async def clear(self) -> None:
        """Delete every session under the prefix, one DEL per SCAN batch."""
        async for batch in self._scan_batches():
            if batch:
                async with self._transport("DEL"):
                    await self.client.delete(*batch)
