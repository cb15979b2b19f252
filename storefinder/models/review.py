"""Review model.

Many reviews per store; referenced by store_id, never embedded.
"""

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from storefinder.stores.postgres import Base

if TYPE_CHECKING:
    from storefinder.models.store import Store
    from storefinder.models.user import User


RATING_MIN = 1
RATING_MAX = 5


class Review(Base):
    __tablename__ = "reviews"

    id: Mapped[int] = mapped_column(primary_key=True)

    author_id: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True)
    store_id: Mapped[int] = mapped_column(ForeignKey("stores.id", ondelete="CASCADE"), index=True)

    text: Mapped[str] = mapped_column(Text)
    rating: Mapped[int] = mapped_column(Integer)

    created: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
    )

    author: Mapped["User"] = relationship(lazy="raise")
    store: Mapped["Store"] = relationship(back_populates="reviews", lazy="raise")

    __table_args__ = (
        CheckConstraint(
            f"rating BETWEEN {RATING_MIN} AND {RATING_MAX}",
            name="ck_reviews_rating_range",
        ),
    )

    def __repr__(self) -> str:
        return f"<Review {self.id} store={self.store_id} rating={self.rating}>"
