"""Server-side web sessions and flash messages.

The browser only holds an opaque session id cookie; the session record
(logged-in user id, pending flashes) lives in Redis. Records are written back
only when a request modified them. Logging in or out rotates the id.
"""

import secrets
from typing import Any, Protocol

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response
from starlette.types import ASGIApp

from storefinder.schemas import Flash
from storefinder.stores.redis import delete_session_data, get_session_data, set_session_data


class SessionBackend(Protocol):
    async def load(self, session_id: str) -> dict[str, Any] | None: ...

    async def save(self, session_id: str, data: dict[str, Any], ttl: int) -> None: ...

    async def delete(self, session_id: str) -> None: ...


class RedisSessionBackend:
    """Session records in Redis (see stores.redis)."""

    async def load(self, session_id: str) -> dict[str, Any] | None:
        return await get_session_data(session_id)

    async def save(self, session_id: str, data: dict[str, Any], ttl: int) -> None:
        await set_session_data(session_id, data, ttl)

    async def delete(self, session_id: str) -> None:
        await delete_session_data(session_id)


class WebSession:
    """Mutable view of one visitor's session record."""

    def __init__(self, session_id: str | None = None, data: dict[str, Any] | None = None):
        self.session_id = session_id
        self.data: dict[str, Any] = dict(data or {})
        self.modified = False
        # Id to discard after rotation
        self.previous_id: str | None = None

    @property
    def user_id(self) -> int | None:
        return self.data.get("user_id")

    def login(self, user_id: int) -> None:
        self._rotate()
        self.data["user_id"] = user_id
        self.modified = True

    def logout(self) -> None:
        self._rotate()
        self.data.pop("user_id", None)
        self.modified = True

    def flash(self, category: str, message: str) -> None:
        self.data.setdefault("flashes", []).append({"category": category, "message": message})
        self.modified = True

    def pop_flashes(self) -> list[Flash]:
        flashes = self.data.pop("flashes", [])
        if flashes:
            self.modified = True
        return [Flash(**f) for f in flashes]

    def _rotate(self) -> None:
        if self.session_id:
            self.previous_id = self.session_id
            self.session_id = None


class SessionMiddleware(BaseHTTPMiddleware):
    """Load the session before the handler, persist it after."""

    def __init__(
        self,
        app: ASGIApp,
        backend: SessionBackend,
        cookie_name: str,
        max_age: int,
        https_only: bool = False,
    ):
        super().__init__(app)
        self.backend = backend
        self.cookie_name = cookie_name
        self.max_age = max_age
        self.https_only = https_only

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        session_id = request.cookies.get(self.cookie_name)
        data = await self.backend.load(session_id) if session_id else None
        session = WebSession(session_id if data is not None else None, data)
        request.state.session = session

        response = await call_next(request)

        if session.modified:
            await self._persist(session, response)
        return response

    async def _persist(self, session: WebSession, response: Response) -> None:
        if session.previous_id:
            await self.backend.delete(session.previous_id)

        if not session.data:
            if session.session_id:
                await self.backend.delete(session.session_id)
            response.delete_cookie(self.cookie_name)
            return

        if session.session_id is None:
            session.session_id = secrets.token_urlsafe(32)
        await self.backend.save(session.session_id, session.data, self.max_age)
        response.set_cookie(
            self.cookie_name,
            session.session_id,
            max_age=self.max_age,
            httponly=True,
            samesite="lax",
            secure=self.https_only,
        )


def get_web_session(request: Request) -> WebSession:
    session = getattr(request.state, "session", None)
    if session is None:
        raise RuntimeError("SessionMiddleware is not installed")
    return session


def flash(request: Request, category: str, message: str) -> None:
    get_web_session(request).flash(category, message)


def pop_flashes(request: Request) -> list[Flash]:
    return get_web_session(request).pop_flashes()
