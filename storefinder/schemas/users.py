"""Schemas for members: validation input and outward representation."""

from collections.abc import Iterable
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from storefinder.schemas.common import ViewModel

if TYPE_CHECKING:
    from storefinder.models import User

USER_FIELD_MESSAGES = {
    "name": "You must supply a name!",
    "email": "That Email is not valid!",
    "password": "Password cannot be blank!",
}


class UserFields(BaseModel):
    """Profile fields validated on registration and on every profile update."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=1, max_length=200)
    email: EmailStr

    @field_validator("email", mode="before")
    @classmethod
    def _lowercase_email(cls, v: object) -> object:
        if isinstance(v, str):
            return v.strip().lower()
        return v


class Registration(UserFields):
    password: str = Field(min_length=1)


class UserOut(BaseModel):
    """Member as returned by the JSON API (never includes credentials)."""

    id: int
    name: str
    email: str
    gravatar: str
    hearts: list[int] = Field(default_factory=list)

    @classmethod
    def from_model(cls, user: "User", hearts: Iterable[int] = ()) -> "UserOut":
        return cls(
            id=user.id,
            name=user.name,
            email=user.email,
            gravatar=user.gravatar,
            hearts=sorted(hearts),
        )


class AccountView(ViewModel):
    user: UserOut


class FormView(ViewModel):
    """View with no data besides title and flashes (forms, map page)."""
