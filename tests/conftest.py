"""Shared fixtures.

Route tests never touch PostgreSQL or Redis: repositories are replaced through
``app.dependency_overrides`` with autospecced mocks, and web sessions live in an
in-memory backend.
"""

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from httpx import ASGITransport, AsyncClient

from factories import MemorySessionBackend, make_user, paginate
from storefinder.main import create_app
from storefinder.routes.deps import get_review_repository, get_store_repository, get_user_repository
from storefinder.services.review_repository import ReviewRepository
from storefinder.services.store_repository import StoreRepository
from storefinder.services.user_repository import UserRepository


@pytest.fixture
def member() -> SimpleNamespace:
    return make_user()


@pytest.fixture
def store_repo() -> MagicMock:
    repo = MagicMock(spec=StoreRepository)
    repo.list_stores.side_effect = paginate([])
    repo.tag_list.return_value = []
    repo.find_by_tag.return_value = []
    repo.top_rated.return_value = []
    repo.hearted_stores.return_value = []
    repo.search.return_value = []
    repo.find_near.return_value = []
    return repo


@pytest.fixture
def review_repo() -> MagicMock:
    return MagicMock(spec=ReviewRepository)


@pytest.fixture
def user_repo(member: SimpleNamespace) -> MagicMock:
    repo = MagicMock(spec=UserRepository)
    repo.get_user.return_value = member
    repo.authenticate.return_value = member
    repo.hearts.return_value = set()
    return repo


@pytest.fixture
def session_backend() -> MemorySessionBackend:
    return MemorySessionBackend()


@pytest.fixture
def app(store_repo, review_repo, user_repo, session_backend):
    app = create_app(session_backend=session_backend)
    app.dependency_overrides[get_store_repository] = lambda: store_repo
    app.dependency_overrides[get_review_repository] = lambda: review_repo
    app.dependency_overrides[get_user_repository] = lambda: user_repo
    return app


@pytest.fixture
async def client(app):
    """Create test client (redirects are not followed)."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest.fixture
async def logged_in(client: AsyncClient, member: SimpleNamespace) -> SimpleNamespace:
    """Log ``member`` in; the session cookie stays on ``client``."""
    response = await client.post("/login", data={"email": member.email, "password": "password"})
    assert response.status_code == 303
    # Consume the "logged in" flash
    await client.get("/map")
    return member


@pytest.fixture
def read_flashes(client: AsyncClient):
    """Pending flashes, read (and consumed) through the map page."""

    async def read() -> list[dict[str, str]]:
        response = await client.get("/map")
        assert response.status_code == 200
        return response.json()["flashes"]

    return read
