"""Serialization boundary between session values and stored payloads."""

import json
from typing import Any, Optional, Protocol, Union

from redis_session_store.errors.exceptions import (
    SessionSerializationError,
    StoreConfigurationError,
)


class Serializer(Protocol):
    """Anything with ``json``-compatible ``dumps``/``loads`` functions."""

    def dumps(self, value: Any) -> Union[str, bytes]: ...

    def loads(self, data: Union[str, bytes]) -> Any: ...


class RecordCodec:
    """
    Encodes session values for Redis and decodes stored payloads.

    The stored payload is exactly what the serializer produced; no
    envelope is added.
    """

    def __init__(self, serializer: Optional[Serializer] = None):
        serializer = json if serializer is None else serializer
        if not (callable(getattr(serializer, "dumps", None))
                and callable(getattr(serializer, "loads", None))):
            raise StoreConfigurationError(
                "serializer must provide callable dumps() and loads()",
                details={"option": "serializer"}
            )
        self.serializer = serializer

    @staticmethod
    def is_absent(raw: Any) -> bool:
        """An empty payload is treated like a missing key."""
        return raw is None or raw == b"" or raw == ""

    def encode(self, session: Any, session_id: str) -> Union[str, bytes]:
        try:
            return self.serializer.dumps(session)
        except Exception as exc:
            raise SessionSerializationError(
                f"Session could not be serialized: {exc}",
                details={"session_id": session_id}
            ) from exc

    def decode(self, raw: Union[str, bytes], session_id: str) -> Any:
        try:
            text = raw.decode("utf-8") if isinstance(raw, bytes) else raw
            return self.serializer.loads(text)
        except Exception as exc:
            raise SessionSerializationError(
                f"Stored session could not be deserialized: {exc}",
                details={"session_id": session_id}
            ) from exc
