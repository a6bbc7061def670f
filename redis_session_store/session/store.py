"""
Session store abstraction.

This module defines the contract a web-session middleware invokes to
persist server-side session records. Implementations may use Redis or
any other external key-value store.
"""

from abc import ABC, abstractmethod
from typing import Optional, Any


class SessionStore(ABC):
    """
    Abstract base class for session storage implementations.

    All methods are async; a method's return value is its result and a
    raised exception is its error. A missing session is not an error.
    """

    @abstractmethod
    async def get(self, session_id: str) -> Optional[dict[str, Any]]:
        """
        Retrieve a session by its ID.

        Args:
            session_id: Unique identifier for the session.

        Returns:
            The decoded session if found, None if the session does not
            exist or has expired.

        Raises:
            SessionStoreUnavailableError: On a transport failure.
            SessionSerializationError: If the stored record cannot be decoded.
        """
        pass

    @abstractmethod
    async def set(self, session_id: str, session: dict[str, Any]) -> None:
        """
        Create or overwrite a session, resetting its expiration.

        Args:
            session_id: Unique identifier for the session.
            session: Session value to store.

        Raises:
            SessionSerializationError: If the value cannot be encoded;
                nothing is written in that case.
            SessionStoreUnavailableError: On a transport failure.
        """
        pass

    @abstractmethod
    async def destroy(self, session_id: str) -> None:
        """
        Delete a session.

        This operation is idempotent - deleting a non-existent
        session does not raise an error.

        Args:
            session_id: Unique identifier for the session to delete.
        """
        pass

    @abstractmethod
    async def touch(self, session_id: str, session: dict[str, Any]) -> bool:
        """
        Reset the expiration of an existing session without rewriting it.

        Args:
            session_id: Unique identifier for the session.
            session: The session value, used only to resolve the TTL.

        Returns:
            True if the store reported the session existed.
        """
        pass

    @abstractmethod
    async def all(self) -> dict[str, dict[str, Any]]:
        """
        Return every active session keyed by session ID.

        Each returned session carries its ID under ``"id"``.
        """
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """
        Check connectivity and health of the session store.

        Returns:
            True if the store is healthy and accessible, False otherwise.

        Note:
            This method should not raise exceptions - connectivity issues
            should be caught and result in a False return value.
        """
        pass
