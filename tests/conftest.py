"""
Shared pytest fixtures and configuration for all tests.
"""
import os
import re
from typing import Any, Optional, Union

import pytest

# Hypothesis configuration for property-based testing
from hypothesis import settings, Verbosity, Phase

# Default profile: balanced for local development
settings.register_profile(
    "default",
    max_examples=100,
    verbosity=Verbosity.normal,
    deadline=None,
    print_blob=True,
)

# CI profile: more thorough testing for continuous integration
settings.register_profile(
    "ci",
    max_examples=200,
    verbosity=Verbosity.verbose,
    deadline=None,
    print_blob=True,
    derandomize=True,
)

# Debug profile: minimal examples for quick debugging
settings.register_profile(
    "debug",
    max_examples=10,
    verbosity=Verbosity.verbose,
    deadline=None,
    print_blob=True,
    phases=[Phase.explicit, Phase.reuse, Phase.generate],
)

# Fast profile: quick smoke tests
settings.register_profile(
    "fast",
    max_examples=20,
    verbosity=Verbosity.normal,
    deadline=None,
)

settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "default"))


def _glob_to_regex(pattern: str) -> "re.Pattern[str]":
    """Translate a Redis glob (with backslash escapes) into a regex."""
    parts = []
    i = 0
    while i < len(pattern):
        char = pattern[i]
        if char == "\\" and i + 1 < len(pattern):
            parts.append(re.escape(pattern[i + 1]))
            i += 2
            continue
        if char == "*":
            parts.append(".*")
        elif char == "?":
            parts.append(".")
        else:
            parts.append(re.escape(char))
        i += 1
    return re.compile("".join(parts) + r"\Z", re.DOTALL)


class FakeRedis:
    """
    In-memory stand-in for ``redis.asyncio.Redis`` used by the unit tests.

    Values are kept as bytes, expirations as plain seconds (no clock), and
    every command is recorded in ``commands`` for assertions.
    """

    def __init__(self) -> None:
        self.data: dict[str, bytes] = {}
        self.expirations: dict[str, int] = {}
        self.commands: list[tuple[Any, ...]] = []
        self.closed = False
        self._scan_keys: list[str] = []

    @staticmethod
    def _encode(value: Union[str, bytes]) -> bytes:
        return value.encode("utf-8") if isinstance(value, str) else value

    async def get(self, key: str) -> Optional[bytes]:
        self.commands.append(("GET", key))
        return self.data.get(key)

    async def set(self, key: str, value: Union[str, bytes], ex: Optional[int] = None) -> bool:
        self.commands.append(("SET", key, ex))
        self.data[key] = self._encode(value)
        if ex is None:
            self.expirations.pop(key, None)
        else:
            self.expirations[key] = ex
        return True

    async def delete(self, *keys: str) -> int:
        self.commands.append(("DEL",) + keys)
        count = 0
        for key in keys:
            if key in self.data:
                del self.data[key]
                self.expirations.pop(key, None)
                count += 1
        return count

    async def exists(self, *keys: str) -> int:
        self.commands.append(("EXISTS",) + keys)
        return sum(1 for key in keys if key in self.data)

    async def expire(self, key: str, seconds: int) -> bool:
        self.commands.append(("EXPIRE", key, seconds))
        if key not in self.data:
            return False
        if seconds <= 0:
            del self.data[key]
            self.expirations.pop(key, None)
            return True
        self.expirations[key] = seconds
        return True

    async def ttl(self, key: str) -> int:
        if key not in self.data:
            return -2
        return self.expirations.get(key, -1)

    async def mget(self, keys: list[str]) -> list[Optional[bytes]]:
        self.commands.append(("MGET", tuple(keys)))
        return [self.data.get(key) for key in keys]

    async def scan(self, cursor: int = 0, match: Optional[str] = None,
                   count: Optional[int] = None) -> tuple[int, list[bytes]]:
        self.commands.append(("SCAN", cursor, match, count))
        # The key list is fixed when a scan starts so deletes between pages don't shift it
        if cursor == 0:
            self._scan_keys = sorted(self.data)
        keys = self._scan_keys
        page = count or 10
        window = keys[cursor:cursor + page]
        next_cursor = cursor + page if cursor + page < len(keys) else 0
        regex = _glob_to_regex(match) if match else None
        batch = [key.encode("utf-8") for key in window if regex is None or regex.match(key)]
        return next_cursor, batch

    async def ping(self) -> bool:
        self.commands.append(("PING",))
        return True

    async def aclose(self) -> None:
        self.closed = True

    def command_names(self) -> list[str]:
        return [command[0] for command in self.commands]


@pytest.fixture
def fake_redis() -> FakeRedis:
    """Create an empty in-memory Redis double."""
    return FakeRedis()


@pytest.fixture
def store(fake_redis):
    """A RedisStore with default options on top of the in-memory double."""
    from redis_session_store.session.redis_store import RedisStore
    return RedisStore(client=fake_redis)


@pytest.fixture
def sample_session() -> dict:
    """Sample session value as produced by the session middleware."""
    return {
        "cookie": {
            "max_age": 3600000,
            "path": "/",
            "http_only": True,
            "secure": False,
            "same_site": "lax",
        },
        "user_id": "user-42",
        "cart": ["sku-1", "sku-2"],
    }
