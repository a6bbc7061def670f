"""
Key namespacing for session records.

Every session id is mapped to a physical Redis key by prepending a fixed
prefix. The prefix is captured once, when the store is built, and all
reads, writes and scans stay inside ``prefix + "*"``.
"""

from dataclasses import dataclass
from typing import Optional

DEFAULT_PREFIX = "sess:"

# Characters with a meaning in Redis glob-style patterns
_GLOB_SPECIALS = "\\*?[]"


def resolve_prefix(prefix: Optional[str] = None, key_prefix: Optional[str] = None) -> str:
    """
    Pick the namespace prefix from store options.

    ``prefix`` wins over ``key_prefix``; an empty value falls through to
    the next source, ending at ``"sess:"``.
    """
    return prefix or key_prefix or DEFAULT_PREFIX


@dataclass(frozen=True)
class KeyNamespace:
    """Immutable mapping between session ids and physical Redis keys."""

    prefix: str = DEFAULT_PREFIX

    def physical_key(self, session_id: str) -> str:
        # No validation of the id: callers own id hygiene.
        return f"{self.prefix}{session_id}"

    def session_id(self, key: str) -> str:
        return key[len(self.prefix):]

    def match_pattern(self) -> str:
        """SCAN pattern matching exactly the keys under this prefix."""
        escaped = "".join(
            f"\\{char}" if char in _GLOB_SPECIALS else char for char in self.prefix
        )
        return f"{escaped}*"
