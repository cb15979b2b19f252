"""User model.

Registered members. Credentials are a password hash produced by
``storefinder.services.passwords``; password reset uses a one-time token with
an expiry stored on the row itself.
"""

from datetime import datetime
import hashlib

from sqlalchemy import Column, DateTime, ForeignKey, String, Table, func
from sqlalchemy.orm import Mapped, mapped_column

from storefinder.stores.postgres import Base


# Hearts: a set of stores per user (composite PK makes membership unique)
user_hearts = Table(
    "user_hearts",
    Base.metadata,
    Column("user_id", ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("store_id", ForeignKey("stores.id", ondelete="CASCADE"), primary_key=True, index=True),
    Column("created_at", DateTime(timezone=True), server_default=func.now(), nullable=False),
)


class User(Base):
    """Registered member."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True)

    # Stored lowercased and trimmed
    email: Mapped[str] = mapped_column(String(254), unique=True, index=True)
    name: Mapped[str] = mapped_column(String(200))
    password_hash: Mapped[str] = mapped_column(String(255))

    # Password reset (both cleared after a successful reset)
    reset_password_token: Mapped[str | None] = mapped_column(String(64), index=True)
    reset_password_expires: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )

    @property
    def gravatar(self) -> str:
        digest = hashlib.md5(self.email.encode("utf-8")).hexdigest()
        return f"https://gravatar.com/avatar/{digest}?s=200"

    def __repr__(self) -> str:
        return f"<User {self.id} {self.email}>"
