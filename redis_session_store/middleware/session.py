"""
Session middleware backed by a SessionStore.

For every request the middleware loads the session named by the session
cookie, exposes it on ``request.state.session`` and, once the response is
ready, persists it: changed sessions are written with ``set``, unchanged
existing sessions have their expiration renewed with ``touch`` and
sessions flagged with ``destroy_session`` are deleted.
"""

import copy
import secrets
from typing import Any, Callable, Optional

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from redis_session_store.errors.exceptions import SessionStoreException
from redis_session_store.errors.handlers import handle_store_exception
from redis_session_store.session.store import SessionStore
from redis_session_store.telemetry.service import session_id_var

DEFAULT_COOKIE_NAME = "sid"


def generate_session_id() -> str:
    """Return a new random, URL-safe session id."""
    return secrets.token_urlsafe(24)


def destroy_session(request: Request) -> None:
    """Mark the request's session for deletion once the response is sent."""
    request.state.session_destroyed = True


class SessionMiddleware(BaseHTTPMiddleware):
    """
    Middleware that loads and persists server-side sessions.

    The session is:
    1. Looked up in the store using the id from the session cookie
    2. Created empty under a fresh id if the cookie is missing or unknown
    3. Stored in request.state.session (id in request.state.session_id)
    4. Stored in a context variable for use by logging
    5. Written, touched or destroyed after the handler returns

    A new session that the handler leaves untouched is not persisted
    and no cookie is sent for it.
    """

    def __init__(
        self,
        app: ASGIApp,
        store: SessionStore,
        cookie_name: str = DEFAULT_COOKIE_NAME,
        max_age_ms: Optional[int] = None,
        secure: bool = False,
        same_site: str = "lax",
        path: str = "/",
    ):
        """
        Initialize the middleware.

        Args:
            app: The ASGI application to wrap
            store: The session store to load and persist sessions with
            cookie_name: Name of the cookie carrying the session id
            max_age_ms: Cookie lifetime in milliseconds, also recorded in
                the session as ``cookie.max_age`` for TTL resolution
            secure: Send the cookie over HTTPS only
            same_site: SameSite attribute of the cookie
            path: Path attribute of the cookie
        """
        super().__init__(app)
        self.store = store
        self.cookie_name = cookie_name
        self.max_age_ms = max_age_ms
        self.secure = secure
        self.same_site = same_site
        self.path = path

    def _new_session(self) -> dict[str, Any]:
        return {
            "cookie": {
                "max_age": self.max_age_ms,
                "path": self.path,
                "http_only": True,
                "secure": self.secure,
                "same_site": self.same_site,
            }
        }

    def _set_cookie(self, response: Response, session_id: str) -> None:
        max_age = self.max_age_ms // 1000 if self.max_age_ms is not None else None
        response.set_cookie(
            self.cookie_name,
            session_id,
            max_age=max_age,
            path=self.path,
            secure=self.secure,
            httponly=True,
            samesite=self.same_site,
        )

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Response]
    ) -> Response:
        """
        Load the session, run the handler, then persist the session.

        Store failures are answered with the structured store error
        response.
        """
        try:
            return await self._dispatch(request, call_next)
        except SessionStoreException as exc:
            return await handle_store_exception(request, exc)

    async def _dispatch(
        self, request: Request, call_next: Callable[[Request], Response]
    ) -> Response:
        session_id = request.cookies.get(self.cookie_name)
        session = await self.store.get(session_id) if session_id else None

        is_new = session is None
        if is_new:
            session_id = generate_session_id()
            session = self._new_session()

        original = copy.deepcopy(session)
        request.state.session = session
        request.state.session_id = session_id
        request.state.session_destroyed = False

        token = session_id_var.set(session_id)
        try:
            response = await call_next(request)
            await self._commit(request, response, session_id, original, is_new)
            return response
        finally:
            # Reset the context variable to avoid leaking between requests
            session_id_var.reset(token)

    async def _commit(
        self,
        request: Request,
        response: Response,
        session_id: str,
        original: dict[str, Any],
        is_new: bool,
    ) -> None:
        if request.state.session_destroyed:
            if not is_new:
                await self.store.destroy(session_id)
            response.delete_cookie(self.cookie_name, path=self.path)
            return

        session = request.state.session
        if session != original:
            await self.store.set(session_id, session)
            self._set_cookie(response, session_id)
        elif not is_new:
            await self.store.touch(session_id, session)


def setup_session_middleware(app: Any, store: SessionStore, settings: Any) -> None:
    """
    Add SessionMiddleware to an application using store settings.

    Args:
        app: The FastAPI application instance
        store: The session store
        settings: StoreSettings providing cookie_name, cookie_max_age_ms
            and cookie_secure
    """
    app.add_middleware(
        SessionMiddleware,
        store=store,
        cookie_name=settings.cookie_name,
        max_age_ms=settings.cookie_max_age_ms,
        secure=settings.cookie_secure,
    )
