"""Schemas for review input."""

from pydantic import BaseModel, ConfigDict, Field

from storefinder.models.review import RATING_MAX, RATING_MIN

REVIEW_FIELD_MESSAGES = {
    "rating": f"Rating must be between {RATING_MIN} and {RATING_MAX}!",
    "text": "Your review cannot be empty!",
}


class ReviewIn(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    rating: int = Field(ge=RATING_MIN, le=RATING_MAX)
    text: str = Field(min_length=1, max_length=5000)
