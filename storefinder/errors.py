"""Domain errors raised by repositories and collaborators.

Each error carries a stable ``code`` and an HTTP ``status_code`` so the
exception handlers in ``storefinder.main`` can turn it into either a JSON
error payload (API routes) or a flash message plus redirect (browser routes).
"""

from typing import Any


class StoreFinderError(Exception):
    """Base class for all domain-level errors."""

    code = "ERROR"
    status_code = 400

    def __init__(
        self,
        message: str,
        *,
        detail: dict[str, Any] | None = None,
        redirect_to: str | None = None,
    ):
        self.message = message
        self.detail = detail
        self.redirect_to = redirect_to
        super().__init__(message)


class ValidationError(StoreFinderError):
    """Missing or malformed required field."""

    code = "VALIDATION_ERROR"
    status_code = 422

    def __init__(self, message: str, *, errors: list[str] | None = None, **kwargs: Any):
        self.errors = errors or [message]
        kwargs.setdefault("detail", {"errors": self.errors})
        super().__init__(message, **kwargs)


class DuplicateEmailError(StoreFinderError):
    code = "DUPLICATE_EMAIL"
    status_code = 409

    def __init__(self, email: str, **kwargs: Any):
        self.email = email
        super().__init__("That email address is already registered.", **kwargs)


class AuthenticationError(StoreFinderError):
    code = "AUTHENTICATION_FAILED"
    status_code = 401


class LoginRequiredError(AuthenticationError):
    """Raised when an anonymous visitor hits a members-only route."""

    code = "LOGIN_REQUIRED"

    def __init__(self, message: str = "Oops, you must be logged in to do that!", **kwargs: Any):
        kwargs.setdefault("redirect_to", "/login")
        super().__init__(message, **kwargs)


class AuthorizationError(StoreFinderError):
    """Non-owner attempting to modify something they do not own."""

    code = "FORBIDDEN"
    status_code = 403


class ExpiredOrInvalidTokenError(StoreFinderError):
    code = "INVALID_RESET_TOKEN"
    status_code = 400

    def __init__(self, message: str = "Password token is invalid or expired.", **kwargs: Any):
        kwargs.setdefault("redirect_to", "/login")
        super().__init__(message, **kwargs)


class NotFoundError(StoreFinderError):
    code = "NOT_FOUND"
    status_code = 404

    def __init__(self, kind: str, identifier: object, **kwargs: Any):
        self.kind = kind
        self.identifier = identifier
        kwargs.setdefault("detail", {"kind": kind, "id": str(identifier)})
        super().__init__(f"{kind} {identifier} not found", **kwargs)


class UploadRejectedError(StoreFinderError):
    code = "UPLOAD_REJECTED"
    status_code = 415

    def __init__(self, message: str = "That filetype isn't allowed!", **kwargs: Any):
        super().__init__(message, **kwargs)


class MailDeliveryError(StoreFinderError):
    code = "MAIL_DELIVERY_FAILED"
    status_code = 502
