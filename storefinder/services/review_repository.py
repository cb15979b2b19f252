"""Review repository.

A member may review the same store any number of times; there is no
(author, store) uniqueness constraint.
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import joinedload

from storefinder.errors import NotFoundError
from storefinder.models import Review, Store
from storefinder.schemas import ReviewIn, validate_input
from storefinder.schemas.reviews import REVIEW_FIELD_MESSAGES
from storefinder.stores.postgres import session_scope

logger = logging.getLogger("uvicorn.error")


class ReviewRepository:
    def __init__(self, sessions: async_sessionmaker[AsyncSession]):
        self._sessions = sessions

    async def add_review(self, store_id: int, author_id: int, rating: object, text: str | None) -> Review:
        """Create a review.

        Raises:
            ValidationError: rating outside 1..5 or empty text.
            NotFoundError: unknown store.
        """
        fields = validate_input(ReviewIn, {"rating": rating, "text": text}, REVIEW_FIELD_MESSAGES)

        async with session_scope(self._sessions) as session:
            if await session.get(Store, store_id) is None:
                raise NotFoundError("Store", store_id)
            review = Review(
                store_id=store_id,
                author_id=author_id,
                rating=fields.rating,
                text=fields.text,
            )
            session.add(review)
            await session.flush()
            await session.refresh(review)

        logger.info(f"Review {review.id} added to store {store_id} by user {author_id}")
        return review

    async def reviews_for_store(self, store_id: int) -> list[Review]:
        """Reviews of a store with their authors, newest first."""
        query = (
            select(Review)
            .where(Review.store_id == store_id)
            .options(joinedload(Review.author))
            .order_by(Review.created.desc(), Review.id.desc())
        )
        async with session_scope(self._sessions) as session:
            return list((await session.scalars(query)).all())
