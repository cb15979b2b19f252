"""Common schemas used across the API."""

from typing import Any, Literal, TypeVar

from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from storefinder.errors import ValidationError

M = TypeVar("M", bound=BaseModel)


class ErrorDetail(BaseModel):
    """Structured error detail."""

    code: str
    message: str
    detail: dict[str, Any] | None = None


class ErrorResponse(BaseModel):
    """Standard error response format.

    Format: { "error": { "code": str, "message": str, "detail": object } }
    """

    error: ErrorDetail


class Flash(BaseModel):
    """One-shot message shown on the next rendered view."""

    category: Literal["success", "info", "error"]
    message: str


class ViewModel(BaseModel):
    """Base payload for browser-facing views.

    Every view carries its page title and the flashes pending for the visitor.
    """

    title: str
    flashes: list[Flash] = Field(default_factory=list)

    model_config = {"populate_by_name": True}


def validate_input(model: type[M], data: Any, messages: dict[str, str] | None = None) -> M:
    """Validate ``data`` against ``model``, raising the domain ValidationError.

    ``messages`` maps a field name to the user-facing message shown for any
    error on that field; other errors fall back to pydantic's message.
    """
    messages = messages or {}
    try:
        return model.model_validate(data)
    except PydanticValidationError as exc:
        errors: list[str] = []
        for err in exc.errors():
            field = str(err["loc"][0]) if err["loc"] else ""
            msg = messages.get(field)
            if msg is None:
                msg = str(err["msg"]).removeprefix("Value error, ")
                if field:
                    msg = f"{field}: {msg}"
            if msg not in errors:
                errors.append(msg)
        raise ValidationError(errors[0], errors=errors) from exc
