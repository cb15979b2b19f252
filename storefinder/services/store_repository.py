"""Store repository: CRUD, listing and aggregation queries over stores.

Each operation opens its own session from the injected factory, so
independent reads (page + count, tag list + stores by tag) can be awaited
together with ``asyncio.gather``.

Relations are populated explicitly per query (``selectinload``/``joinedload``);
the models use ``lazy="raise"`` so nothing is fetched behind the caller's back.
"""

import asyncio
import logging
import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from sqlalchemy import Select, desc, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import joinedload, selectinload

from storefinder.errors import NotFoundError
from storefinder.models import Review, Store
from storefinder.schemas import NearStore, SearchHit, StoreIn, StoreOut, TopStore, validate_input
from storefinder.schemas.stores import STORE_FIELD_MESSAGES, Location
from storefinder.services.geo import bounding_box, distance_m
from storefinder.services.slugs import next_slug, slug_match_pattern, slugify
from storefinder.stores.postgres import session_scope

logger = logging.getLogger("uvicorn.error")

DEFAULT_PAGE_SIZE = 4
SEARCH_LIMIT = 5
NEAR_MAX_DISTANCE_M = 10_000
NEAR_LIMIT = 10
TOP_LIMIT = 10
TOP_MIN_REVIEWS = 2

# Unique index backing slug uniqueness (see models.store)
SLUG_INDEX = "ix_stores_slug"
SLUG_ATTEMPTS = 3


@dataclass
class StorePage:
    """One page of the store listing."""

    stores: list[Store]
    page: int
    page_size: int
    count: int

    @property
    def skip(self) -> int:
        return page_offset(self.page, self.page_size)

    @property
    def page_count(self) -> int:
        return math.ceil(self.count / self.page_size)

    @property
    def last_page(self) -> int:
        return max(self.page_count, 1)

    @property
    def out_of_range(self) -> bool:
        """Requested page is past the last non-empty page."""
        return not self.stores and self.skip > 0


def page_offset(page: int, page_size: int) -> int:
    return (max(page, 1) - 1) * page_size


def _is_slug_conflict(exc: IntegrityError) -> bool:
    return SLUG_INDEX in str(exc.orig)


class StoreRepository:
    """Data access for stores."""

    def __init__(self, sessions: async_sessionmaker[AsyncSession]):
        self._sessions = sessions

    # ============================================================
    # Writes
    # ============================================================

    async def create_store(self, data: Mapping[str, Any] | StoreIn, author_id: int) -> Store:
        """Persist a new store owned by ``author_id``.

        Raises:
            ValidationError: name, coordinates or address missing/malformed.
        """
        fields = _validate_store(data)

        attempt = 1
        while True:
            try:
                async with session_scope(self._sessions) as session:
                    store = Store(
                        name=fields.name,
                        slug=await self._unique_slug(session, fields.name),
                        description=fields.description,
                        tags=fields.tags,
                        longitude=fields.lng,
                        latitude=fields.lat,
                        address=fields.address,
                        photo=fields.photo,
                        author_id=author_id,
                    )
                    session.add(store)
                    await session.flush()
                    await session.refresh(store)
            except IntegrityError as exc:
                if not _is_slug_conflict(exc) or attempt >= SLUG_ATTEMPTS:
                    raise
                logger.warning(f"Slug conflict creating store '{fields.name}', retrying ({attempt})")
                attempt += 1
                continue

            logger.info(f"Store created: {store.slug} (author={author_id})")
            return store

    async def update_store(self, store_id: int, data: Mapping[str, Any] | StoreIn) -> Store:
        """Replace the updatable fields of a store.

        The caller must have checked that the current user is the author.
        A new photo replaces the old one; no photo keeps the existing one.
        The slug is recomputed only when the name changes.
        """
        fields = _validate_store(data)

        attempt = 1
        while True:
            try:
                async with session_scope(self._sessions) as session:
                    store = await session.get(Store, store_id)
                    if store is None:
                        raise NotFoundError("Store", store_id)

                    if fields.name != store.name:
                        store.slug = await self._unique_slug(session, fields.name, exclude_id=store.id)
                    store.name = fields.name
                    store.description = fields.description
                    store.tags = fields.tags
                    store.longitude = fields.lng
                    store.latitude = fields.lat
                    store.address = fields.address
                    if fields.photo:
                        store.photo = fields.photo

                    await session.flush()
                    await session.refresh(store)
            except IntegrityError as exc:
                if not _is_slug_conflict(exc) or attempt >= SLUG_ATTEMPTS:
                    raise
                logger.warning(f"Slug conflict updating store {store_id}, retrying ({attempt})")
                attempt += 1
                continue

            return store

    async def _unique_slug(
        self,
        session: AsyncSession,
        name: str,
        exclude_id: int | None = None,
    ) -> str:
        base = slugify(name)
        query = select(Store.slug).where(Store.slug.op("~*")(slug_match_pattern(base)))
        if exclude_id is not None:
            query = query.where(Store.id != exclude_id)
        taken = (await session.scalars(query)).all()
        return next_slug(base, taken)

    # ============================================================
    # Reads
    # ============================================================

    async def get_store(self, store_id: int) -> Store:
        async with session_scope(self._sessions) as session:
            store = await session.get(Store, store_id)
        if store is None:
            raise NotFoundError("Store", store_id)
        return store

    async def list_stores(self, page: int = 1, page_size: int = DEFAULT_PAGE_SIZE) -> StorePage:
        """Page of stores, newest first, plus total count."""
        page = max(page, 1)
        query = (
            select(Store)
            .options(selectinload(Store.reviews))
            .order_by(Store.created.desc(), Store.id.desc())
            .offset(page_offset(page, page_size))
            .limit(page_size)
        )
        stores, count = await asyncio.gather(
            self._all(query),
            self._count(select(func.count(Store.id))),
        )
        return StorePage(stores=stores, page=page, page_size=page_size, count=count)

    async def find_by_slug(self, slug: str) -> Store:
        """Store with author, reviews and review authors populated."""
        query = (
            select(Store)
            .where(Store.slug == slug)
            .options(
                joinedload(Store.author),
                selectinload(Store.reviews).joinedload(Review.author),
            )
        )
        async with session_scope(self._sessions) as session:
            store = (await session.scalars(query)).first()
        if store is None:
            raise NotFoundError("Store", slug)
        return store

    async def find_by_tag(self, tag: str | None = None) -> list[Store]:
        """Stores carrying ``tag``; every tagged store when ``tag`` is empty."""
        query = select(Store).options(selectinload(Store.reviews)).order_by(Store.created.desc(), Store.id.desc())
        if tag:
            query = query.where(Store.tags.contains([tag]))
        else:
            query = query.where(func.cardinality(Store.tags) > 0)
        return await self._all(query)

    async def tag_list(self) -> list[tuple[str, int]]:
        """Distinct tags with store counts, most used first."""
        tags = select(func.unnest(Store.tags).label("tag")).subquery()
        query = (
            select(tags.c.tag, func.count().label("count"))
            .group_by(tags.c.tag)
            .order_by(desc("count"), tags.c.tag)
        )
        async with session_scope(self._sessions) as session:
            rows = (await session.execute(query)).all()
        return [(row.tag, row.count) for row in rows]

    async def hearted_stores(self, store_ids: Iterable[int]) -> list[Store]:
        ids = list(store_ids)
        if not ids:
            return []
        query = (
            select(Store)
            .where(Store.id.in_(ids))
            .options(selectinload(Store.reviews))
            .order_by(Store.created.desc(), Store.id.desc())
        )
        return await self._all(query)

    async def search(self, query_text: str, limit: int = SEARCH_LIMIT) -> list[SearchHit]:
        """Full-text search over name + description, best matches first."""
        if not query_text.strip():
            return []
        ts_query = func.websearch_to_tsquery("english", query_text)
        score = func.ts_rank(Store.search_vector, ts_query)
        query = (
            select(Store, score.label("score"))
            .where(Store.search_vector.op("@@")(ts_query))
            .order_by(score.desc(), Store.id)
            .limit(limit)
        )
        async with session_scope(self._sessions) as session:
            rows = (await session.execute(query)).all()
        return [SearchHit(**StoreOut.fields_from(store), score=float(s)) for store, s in rows]

    async def find_near(
        self,
        lng: float,
        lat: float,
        max_distance: float = NEAR_MAX_DISTANCE_M,
        limit: int = NEAR_LIMIT,
    ) -> list[NearStore]:
        """Stores within ``max_distance`` metres, nearest first."""
        box = bounding_box(lng, lat, max_distance)
        distance = distance_m(Store.longitude, Store.latitude, lng, lat)
        query = (
            select(
                Store.slug,
                Store.name,
                Store.description,
                Store.longitude,
                Store.latitude,
                Store.address,
                Store.photo,
                distance.label("distance"),
            )
            .where(Store.latitude.between(box.min_lat, box.max_lat))
            .where(Store.longitude.between(box.min_lng, box.max_lng))
            .where(distance <= max_distance)
            .order_by(distance, Store.id)
            .limit(limit)
        )
        async with session_scope(self._sessions) as session:
            rows = (await session.execute(query)).all()
        return [
            NearStore(
                slug=row.slug,
                name=row.name,
                description=row.description,
                location=Location(coordinates=[row.longitude, row.latitude], address=row.address),
                photo=row.photo,
                distance=float(row.distance),
            )
            for row in rows
        ]

    async def top_rated(self, limit: int = TOP_LIMIT) -> list[TopStore]:
        """Stores with at least two reviews, highest average rating first.

        Ties keep insertion order (store id).
        """
        review_count = func.count(Review.id)
        average = func.avg(Review.rating)
        query = (
            select(
                Store.id,
                Store.name,
                Store.slug,
                Store.photo,
                average.label("average_rating"),
                review_count.label("review_count"),
            )
            .join(Review, Review.store_id == Store.id)
            .group_by(Store.id)
            .having(review_count >= TOP_MIN_REVIEWS)
            .order_by(average.desc(), Store.id.asc())
            .limit(limit)
        )
        async with session_scope(self._sessions) as session:
            rows = (await session.execute(query)).all()
        return [
            TopStore(
                id=row.id,
                name=row.name,
                slug=row.slug,
                photo=row.photo,
                average_rating=float(row.average_rating),
                review_count=row.review_count,
            )
            for row in rows
        ]

    # ============================================================
    # Helpers
    # ============================================================

    async def _all(self, query: Select[Any]) -> list[Store]:
        async with session_scope(self._sessions) as session:
            return list((await session.scalars(query)).all())

    async def _count(self, query: Select[Any]) -> int:
        async with session_scope(self._sessions) as session:
            return (await session.scalar(query)) or 0


def _validate_store(data: Mapping[str, Any] | StoreIn) -> StoreIn:
    if isinstance(data, StoreIn):
        return data
    return validate_input(StoreIn, data, STORE_FIELD_MESSAGES)
