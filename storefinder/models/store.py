"""Store model.

A store listed by a member: name, unique slug, free-text tags, and a point
location (longitude/latitude + address).

Indexes:
- search_vector: generated tsvector over name + description (GIN) for text search
- (latitude, longitude): bounding-box prefilter for near-me queries
"""

from datetime import datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import (
    CheckConstraint,
    Computed,
    DateTime,
    Float,
    ForeignKey,
    Index,
    String,
    Text,
    func,
)
from sqlalchemy.dialects.postgresql import ARRAY, TSVECTOR
from sqlalchemy.orm import Mapped, mapped_column, relationship

from storefinder.stores.postgres import Base

if TYPE_CHECKING:
    from storefinder.models.review import Review
    from storefinder.models.user import User


SEARCH_VECTOR_SQL = "to_tsvector('english', coalesce(name, '') || ' ' || coalesce(description, ''))"


class Store(Base):
    """Store listed by a member."""

    __tablename__ = "stores"

    id: Mapped[int] = mapped_column(primary_key=True)

    name: Mapped[str] = mapped_column(String(200))
    # Unique; derived from name (see services.slugs)
    slug: Mapped[str] = mapped_column(String(240), unique=True, index=True)
    description: Mapped[str | None] = mapped_column(Text)
    tags: Mapped[list[str]] = mapped_column(
        ARRAY(String(100)),
        default=list,
        server_default="{}",
    )

    # Location (always a GeoJSON-style Point)
    longitude: Mapped[float] = mapped_column(Float)
    latitude: Mapped[float] = mapped_column(Float)
    address: Mapped[str] = mapped_column(String(500))

    # Uploaded photo filename (relative to uploads dir)
    photo: Mapped[str | None] = mapped_column(String(200))

    author_id: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True)

    search_vector: Mapped[Any] = mapped_column(
        TSVECTOR,
        Computed(SEARCH_VECTOR_SQL, persisted=True),
        nullable=True,
        deferred=True,
    )

    created: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        index=True,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )

    # Relations are never loaded implicitly; repositories populate explicitly.
    author: Mapped["User"] = relationship(lazy="raise")
    reviews: Mapped[list["Review"]] = relationship(
        back_populates="store",
        order_by="Review.created.desc()",
        lazy="raise",
    )

    __table_args__ = (
        Index("ix_stores_search_vector", "search_vector", postgresql_using="gin"),
        Index("ix_stores_lat_lng", "latitude", "longitude"),
        CheckConstraint("longitude BETWEEN -180 AND 180", name="ck_stores_longitude"),
        CheckConstraint("latitude BETWEEN -90 AND 90", name="ck_stores_latitude"),
    )

    @property
    def location(self) -> dict[str, Any]:
        return {
            "type": "Point",
            "coordinates": [self.longitude, self.latitude],
            "address": self.address,
        }

    def __repr__(self) -> str:
        return f"<Store {self.slug}>"
