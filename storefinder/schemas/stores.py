"""Schemas for stores: form input, JSON documents and view payloads."""

from datetime import datetime
from typing import TYPE_CHECKING, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from storefinder.schemas.common import ViewModel

if TYPE_CHECKING:
    from storefinder.models import Store


# User-facing messages per input field
STORE_FIELD_MESSAGES = {
    "name": "Please enter a store name!",
    "address": "You must supply an address!",
    "lng": "You must supply coordinates!",
    "lat": "You must supply coordinates!",
}


class StoreIn(BaseModel):
    """Validated store fields (add and edit forms)."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=1, max_length=200)
    description: str | None = None
    tags: list[str] = Field(default_factory=list)
    lng: float = Field(ge=-180, le=180)
    lat: float = Field(ge=-90, le=90)
    address: str = Field(min_length=1, max_length=500)
    photo: str | None = None

    @field_validator("tags", mode="before")
    @classmethod
    def _normalize_tags(cls, v: object) -> list[str]:
        """Accept a single tag or a list; drop blanks and repeats, keep order."""
        if v is None:
            return []
        if isinstance(v, str):
            v = [v]
        tags: list[str] = []
        for tag in v:  # type: ignore[union-attr]
            tag = str(tag).strip()
            if tag and tag not in tags:
                tags.append(tag)
        return tags

    @field_validator("description")
    @classmethod
    def _blank_description_is_none(cls, v: str | None) -> str | None:
        return v or None


class Location(BaseModel):
    """GeoJSON-style point with a postal address."""

    type: Literal["Point"] = "Point"
    coordinates: list[float]  # [lng, lat]
    address: str


class AuthorOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    gravatar: str


class ReviewOut(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: int
    rating: int
    text: str
    created: datetime
    store_id: int = Field(alias="storeId")
    author: AuthorOut | None = None


class StoreOut(BaseModel):
    """Store document."""

    id: int
    name: str
    slug: str
    description: str | None = None
    tags: list[str] = Field(default_factory=list)
    created: datetime
    location: Location
    photo: str | None = None
    author_id: int = Field(alias="authorId")

    model_config = {"populate_by_name": True}

    @classmethod
    def fields_from(cls, store: "Store") -> dict[str, Any]:
        return {
            "id": store.id,
            "name": store.name,
            "slug": store.slug,
            "description": store.description,
            "tags": list(store.tags or []),
            "created": store.created,
            "location": Location(**store.location),
            "photo": store.photo,
            "author_id": store.author_id,
        }

    @classmethod
    def from_model(cls, store: "Store") -> "StoreOut":
        return cls(**cls.fields_from(store))


class StoreCard(StoreOut):
    """Store in a listing, with its review count."""

    review_count: int = Field(alias="reviewCount", default=0)

    @classmethod
    def from_model(cls, store: "Store") -> "StoreCard":
        return cls(**cls.fields_from(store), review_count=len(store.reviews))


class StoreDetail(StoreOut):
    """Store with author and reviews populated."""

    author: AuthorOut
    reviews: list[ReviewOut] = Field(default_factory=list)

    @classmethod
    def from_model(cls, store: "Store") -> "StoreDetail":
        return cls(
            **cls.fields_from(store),
            author=AuthorOut.model_validate(store.author),
            reviews=[ReviewOut.model_validate(r) for r in store.reviews],
        )


class SearchHit(StoreOut):
    """Full-text search result."""

    score: float


class NearStore(BaseModel):
    """Reduced store projection for the map API."""

    slug: str
    name: str
    description: str | None = None
    location: Location
    photo: str | None = None
    distance: float = Field(description="Metres from the query point")


class TagCount(BaseModel):
    tag: str
    count: int


class TopStore(BaseModel):
    """Top-rated store (>= 2 reviews)."""

    id: int
    name: str
    slug: str
    photo: str | None = None
    average_rating: float = Field(alias="averageRating")
    review_count: int = Field(alias="reviewCount")

    model_config = {"populate_by_name": True}


# ============================================================
# View payloads
# ============================================================


class StoresView(ViewModel):
    stores: list[StoreCard]
    page: int = 1
    page_count: int = Field(alias="pageCount", default=1)
    count: int = 0


class StoreView(ViewModel):
    store: StoreDetail


class EditStoreView(ViewModel):
    store: StoreOut | None = None


class TagsView(ViewModel):
    tag: str | None = None
    tags: list[TagCount]
    stores: list[StoreCard]


class TopStoresView(ViewModel):
    stores: list[TopStore]
