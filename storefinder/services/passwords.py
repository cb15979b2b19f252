"""Credential service.

Hashing and verification live here, independent of the User model: callers
hand over a user record and a candidate password.
"""

import secrets

from passlib.context import CryptContext

# 20 random bytes -> 40 hex characters
RESET_TOKEN_BYTES = 20


class PasswordHasher:
    """Hash and verify member passwords."""

    def __init__(self, context: CryptContext | None = None):
        self._context = context or CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

    def hash(self, password: str) -> str:
        return self._context.hash(password)

    def verify(self, user: object, password: str) -> bool:
        """Check ``password`` against ``user.password_hash``.

        Returns False for users without a stored hash.
        """
        hashed = getattr(user, "password_hash", None)
        if not hashed or not password:
            return False
        return self._context.verify(password, hashed)


def generate_reset_token() -> str:
    """Opaque, URL-safe password reset token."""
    return secrets.token_hex(RESET_TOKEN_BYTES)
