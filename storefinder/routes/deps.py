"""Shared route dependencies: repositories, current user, redirects."""

from datetime import timedelta
from typing import Annotated
from urllib.parse import urlparse

from fastapi import Depends, Request
from fastapi.responses import RedirectResponse

from storefinder.errors import LoginRequiredError, NotFoundError
from storefinder.models import User
from storefinder.services.mail import get_mailer
from storefinder.services.review_repository import ReviewRepository
from storefinder.services.store_repository import StoreRepository
from storefinder.services.user_repository import UserRepository
from storefinder.services.web_session import WebSession, get_web_session
from storefinder.settings import Settings, get_settings
from storefinder.stores.postgres import get_session_factory


def get_store_repository() -> StoreRepository:
    return StoreRepository(get_session_factory())


def get_review_repository() -> ReviewRepository:
    return ReviewRepository(get_session_factory())


def get_user_repository(settings: Annotated[Settings, Depends(get_settings)]) -> UserRepository:
    return UserRepository(
        get_session_factory(),
        mailer=get_mailer(),
        reset_ttl=timedelta(seconds=settings.reset_token_ttl_seconds),
    )


StoreRepo = Annotated[StoreRepository, Depends(get_store_repository)]
ReviewRepo = Annotated[ReviewRepository, Depends(get_review_repository)]
UserRepo = Annotated[UserRepository, Depends(get_user_repository)]
SettingsDep = Annotated[Settings, Depends(get_settings)]
SessionDep = Annotated[WebSession, Depends(get_web_session)]


async def get_current_user(session: SessionDep, users: UserRepo) -> User | None:
    """Logged-in member, or None for anonymous visitors."""
    if session.user_id is None:
        return None
    try:
        return await users.get_user(session.user_id)
    except NotFoundError:
        # Account deleted while the session was alive
        session.logout()
        return None


CurrentUser = Annotated[User | None, Depends(get_current_user)]


async def require_user(user: CurrentUser) -> User:
    if user is None:
        raise LoginRequiredError()
    return user


LoggedInUser = Annotated[User, Depends(require_user)]


def redirect(url: str, status_code: int = 303) -> RedirectResponse:
    return RedirectResponse(url, status_code=status_code)


def back_url(request: Request, fallback: str = "/") -> str:
    """The Referer when it points at this site, else ``fallback``."""
    referer = request.headers.get("referer")
    if not referer:
        return fallback
    parsed = urlparse(referer)
    if parsed.netloc and parsed.netloc != request.url.netloc:
        return fallback
    path = parsed.path or "/"
    return f"{path}?{parsed.query}" if parsed.query else path


def redirect_back(request: Request, fallback: str = "/") -> RedirectResponse:
    return redirect(back_url(request, fallback))
