"""Test doubles: in-memory session backend and plain record factories."""

import copy
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from typing import Any

from storefinder.services.store_repository import StorePage

BASE_TIME = datetime(2024, 1, 1, tzinfo=timezone.utc)


class MemorySessionBackend:
    """Session records kept in a dict (stands in for Redis)."""

    def __init__(self) -> None:
        self.records: dict[str, dict[str, Any]] = {}

    async def load(self, session_id: str) -> dict[str, Any] | None:
        record = self.records.get(session_id)
        return copy.deepcopy(record) if record is not None else None

    async def save(self, session_id: str, data: dict[str, Any], ttl: int) -> None:
        self.records[session_id] = copy.deepcopy(data)

    async def delete(self, session_id: str) -> None:
        self.records.pop(session_id, None)


def make_user(user_id: int = 1, name: str = "Wes", email: str = "wes@example.com") -> SimpleNamespace:
    return SimpleNamespace(
        id=user_id,
        name=name,
        email=email,
        gravatar=f"https://gravatar.com/avatar/{user_id}?s=200",
    )


def make_store(
    store_id: int = 1,
    name: str = "Cafe Blue",
    slug: str | None = None,
    author_id: int = 1,
    tags: list[str] | None = None,
    reviews: list[Any] | None = None,
    author: Any = None,
) -> SimpleNamespace:
    return SimpleNamespace(
        id=store_id,
        name=name,
        slug=slug or name.lower().replace(" ", "-"),
        description=f"{name} description",
        tags=tags or [],
        created=BASE_TIME + timedelta(minutes=store_id),
        location={"type": "Point", "coordinates": [-79.38, 43.65], "address": "1 King St"},
        photo=None,
        author_id=author_id,
        author=author,
        reviews=reviews or [],
    )


def make_review(
    review_id: int = 1,
    store_id: int = 1,
    rating: int = 5,
    text: str = "Great!",
    author: Any = None,
) -> SimpleNamespace:
    return SimpleNamespace(
        id=review_id,
        store_id=store_id,
        rating=rating,
        text=text,
        created=BASE_TIME + timedelta(hours=review_id),
        author=author,
    )


def paginate(stores: list[Any]):
    """side_effect for StoreRepository.list_stores over a fixed list."""

    async def list_stores(page: int = 1, page_size: int = 4) -> StorePage:
        page = max(page, 1)
        start = (page - 1) * page_size
        return StorePage(
            stores=stores[start : start + page_size],
            page=page,
            page_size=page_size,
            count=len(stores),
        )

    return list_stores
