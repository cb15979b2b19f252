"""User repository: registration, login, profile, password reset and hearts.

Password reset flow:
1. request_password_reset(email) stores a random token + expiry (1 hour) and
   mails the reset link. Unknown e-mails are accepted silently.
2. consume_reset_token(token) checks the link before showing the form.
3. reset_password(token, password) re-checks expiry and swaps the password
   while clearing token + expiry in one conditional UPDATE, so a token works
   at most once.
"""

import logging
from datetime import datetime, timedelta, timezone

from sqlalchemy import delete, select, update
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from storefinder.errors import (
    AuthenticationError,
    DuplicateEmailError,
    ExpiredOrInvalidTokenError,
    NotFoundError,
    ValidationError,
)
from storefinder.models import Store, User, user_hearts
from storefinder.schemas import Registration, UserFields, validate_input
from storefinder.schemas.users import USER_FIELD_MESSAGES
from storefinder.services.mail import Mailer
from storefinder.services.passwords import PasswordHasher, generate_reset_token
from storefinder.stores.postgres import session_scope

logger = logging.getLogger("uvicorn.error")

RESET_TOKEN_TTL = timedelta(hours=1)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def normalize_email(email: str | None) -> str:
    return (email or "").strip().lower()


class UserRepository:
    """Data access for members."""

    def __init__(
        self,
        sessions: async_sessionmaker[AsyncSession],
        hasher: PasswordHasher | None = None,
        mailer: Mailer | None = None,
        reset_ttl: timedelta = RESET_TOKEN_TTL,
    ):
        self._sessions = sessions
        self._hasher = hasher or PasswordHasher()
        self._mailer = mailer or Mailer()
        self._reset_ttl = reset_ttl

    # ============================================================
    # Accounts
    # ============================================================

    async def register(self, email: str, name: str, password: str) -> User:
        """Create a member with a hashed password.

        Raises:
            ValidationError: malformed e-mail, empty name or password.
            DuplicateEmailError: e-mail already registered.
        """
        fields = validate_input(
            Registration,
            {"email": email, "name": name, "password": password},
            USER_FIELD_MESSAGES,
        )
        try:
            async with session_scope(self._sessions) as session:
                if await self._by_email(session, fields.email) is not None:
                    raise DuplicateEmailError(fields.email)
                user = User(
                    email=fields.email,
                    name=fields.name,
                    password_hash=self._hasher.hash(fields.password),
                )
                session.add(user)
                await session.flush()
                await session.refresh(user)
        except IntegrityError as exc:
            # Lost a race with a concurrent registration of the same e-mail
            raise DuplicateEmailError(fields.email) from exc

        logger.info(f"User registered: {user.id}")
        return user

    async def authenticate(self, email: str, password: str) -> User:
        async with session_scope(self._sessions) as session:
            user = await self._by_email(session, normalize_email(email))
        if user is None or not self._hasher.verify(user, password):
            raise AuthenticationError("Failed Login!")
        return user

    async def get_user(self, user_id: int) -> User:
        async with session_scope(self._sessions) as session:
            user = await session.get(User, user_id)
        if user is None:
            raise NotFoundError("User", user_id)
        return user

    async def update_profile(self, user_id: int, name: str | None, email: str | None) -> User:
        """Update name and e-mail, re-running the registration validation."""
        fields = validate_input(UserFields, {"name": name, "email": email}, USER_FIELD_MESSAGES)
        try:
            async with session_scope(self._sessions) as session:
                user = await session.get(User, user_id)
                if user is None:
                    raise NotFoundError("User", user_id)
                other = await self._by_email(session, fields.email)
                if other is not None and other.id != user.id:
                    raise DuplicateEmailError(fields.email)
                user.name = fields.name
                user.email = fields.email
                await session.flush()
                await session.refresh(user)
        except IntegrityError as exc:
            raise DuplicateEmailError(fields.email) from exc
        return user

    async def _by_email(self, session: AsyncSession, email: str) -> User | None:
        return (await session.scalars(select(User).where(User.email == email))).first()

    # ============================================================
    # Password reset
    # ============================================================

    async def request_password_reset(self, email: str, base_url: str) -> None:
        """Issue a reset token and mail the link if the member exists.

        Returns nothing either way so callers cannot tell whether the
        address is registered.
        """
        token = generate_reset_token()
        query = (
            update(User)
            .where(User.email == normalize_email(email))
            .values(reset_password_token=token, reset_password_expires=_utcnow() + self._reset_ttl)
            .returning(User)
        )
        async with session_scope(self._sessions) as session:
            user = (await session.scalars(query)).first()

        if user is None:
            logger.info("Password reset requested for unknown email")
            return

        reset_url = f"{base_url.rstrip('/')}/account/reset/{token}"
        await self._mailer.send_password_reset(user, reset_url)
        logger.info(f"Password reset issued for user {user.id}")

    async def consume_reset_token(self, token: str) -> User:
        """Member owning an unexpired ``token``.

        Raises:
            ExpiredOrInvalidTokenError: unknown, used or expired token.
        """
        if not token:
            raise ExpiredOrInvalidTokenError()
        query = select(User).where(
            User.reset_password_token == token,
            User.reset_password_expires > _utcnow(),
        )
        async with session_scope(self._sessions) as session:
            user = (await session.scalars(query)).first()
        if user is None:
            raise ExpiredOrInvalidTokenError()
        return user

    async def reset_password(self, token: str, new_password: str) -> User:
        """Set a new password for the owner of ``token`` and burn the token."""
        if not new_password:
            raise ValidationError(USER_FIELD_MESSAGES["password"])
        if not token:
            raise ExpiredOrInvalidTokenError()

        query = (
            update(User)
            .where(
                User.reset_password_token == token,
                User.reset_password_expires > _utcnow(),
            )
            .values(
                password_hash=self._hasher.hash(new_password),
                reset_password_token=None,
                reset_password_expires=None,
            )
            .returning(User)
        )
        async with session_scope(self._sessions) as session:
            user = (await session.scalars(query)).first()
        if user is None:
            raise ExpiredOrInvalidTokenError()

        logger.info(f"Password reset completed for user {user.id}")
        return user

    # ============================================================
    # Hearts
    # ============================================================

    async def toggle_heart(self, user_id: int, store_id: int) -> set[int]:
        """Remove ``store_id`` from the member's hearts if present, else add it.

        Returns:
            The member's hearts after the toggle.
        """
        async with session_scope(self._sessions) as session:
            if await session.get(Store, store_id) is None:
                raise NotFoundError("Store", store_id)

            removed = await session.execute(
                delete(user_hearts).where(
                    user_hearts.c.user_id == user_id,
                    user_hearts.c.store_id == store_id,
                )
            )
            if removed.rowcount == 0:
                await session.execute(
                    insert(user_hearts)
                    .values(user_id=user_id, store_id=store_id)
                    .on_conflict_do_nothing()
                )
            return await self._hearts(session, user_id)

    async def hearts(self, user_id: int) -> set[int]:
        async with session_scope(self._sessions) as session:
            return await self._hearts(session, user_id)

    async def _hearts(self, session: AsyncSession, user_id: int) -> set[int]:
        rows = await session.scalars(
            select(user_hearts.c.store_id).where(user_hearts.c.user_id == user_id)
        )
        return set(rows.all())
