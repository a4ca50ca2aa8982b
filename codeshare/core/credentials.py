"""Credential store: user lookup, creation and password/refresh-token checks.

All identity invariants live here:

* username and email are unique (exact, case-sensitive match); a duplicate
  raises :class:`Conflict` naming the field;
* passwords are hashed with bcrypt before they reach the session and are
  never logged;
* a failed login raises the same :class:`InvalidCredentials` whether the
  email is unknown, the account has no password, or the password is wrong;
* each user holds at most one refresh token; storing a new one replaces
  (and so revokes) the previous one.
"""

from __future__ import annotations

import re
import secrets
import time
import uuid
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from codeshare.core.auth import hash_password, verify_password
from codeshare.core.errors import Conflict, InvalidCredentials
from codeshare.core.logging import get_logger
from codeshare.models.user import User

logger = get_logger(__name__)

_EMAIL_TAKEN = "Email already registered"
_USERNAME_TAKEN = "Username already taken"


@dataclass(frozen=True)
class ExternalProfile:
    """Identity returned by an external provider after a successful login."""

    provider: str
    subject: str
    email: str | None = None
    display_name: str | None = None
    picture: str | None = None


class CredentialStore:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    # ── Lookups ──────────────────────────────────────────────────────────────

    async def find_by_id(self, user_id: uuid.UUID | str) -> User | None:
        if not isinstance(user_id, uuid.UUID):
            try:
                user_id = uuid.UUID(user_id)
            except (TypeError, ValueError):
                return None
        return await self._session.get(User, user_id)

    async def find_by_email(self, email: str) -> User | None:
        result = await self._session.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def find_by_username(self, username: str) -> User | None:
        result = await self._session.execute(select(User).where(User.username == username))
        return result.scalar_one_or_none()

    async def find_by_email_or_username(self, email: str, username: str) -> User | None:
        result = await self._session.execute(
            select(User).where((User.email == email) | (User.username == username)).limit(1)
        )
        return result.scalar_one_or_none()

    async def find_by_provider_sub(self, subject: str) -> User | None:
        result = await self._session.execute(select(User).where(User.provider_sub == subject))
        return result.scalar_one_or_none()

    # ── Writes ───────────────────────────────────────────────────────────────

    async def create(
        self,
        username: str,
        email: str,
        password: str | None = None,
        *,
        auth_provider: str = "local",
        provider_sub: str | None = None,
        profile_image: str | None = None,
    ) -> User:
        if password is None and provider_sub is None:
            raise ValueError("a user needs a password or an external identity")

        existing = await self.find_by_email_or_username(email, username)
        if existing is not None:
            if existing.email == email:
                raise Conflict("email", _EMAIL_TAKEN)
            raise Conflict("username", _USERNAME_TAKEN)

        user = User(
            username=username,
            email=email,
            hashed_password=hash_password(password) if password is not None else None,
            auth_provider=auth_provider,
            provider_sub=provider_sub,
            profile_image=profile_image,
            bio="",
        )
        self._session.add(user)
        await self._flush()
        await self._session.refresh(user)
        logger.info("User created", user_id=str(user.id), provider=auth_provider)
        return user

    async def save(self, user: User) -> User:
        """Flush pending changes on *user*; unique violations become Conflict."""
        self._session.add(user)
        await self._flush()
        await self._session.refresh(user)
        return user

    async def _flush(self) -> None:
        try:
            await self._session.flush()
        except IntegrityError as exc:
            # Lost a race with a concurrent insert of the same username/email
            message = str(exc.orig).lower()
            if "email" in message:
                raise Conflict("email", _EMAIL_TAKEN) from exc
            if "username" in message:
                raise Conflict("username", _USERNAME_TAKEN) from exc
            raise Conflict("account", "Account already exists") from exc

    # ── Passwords ────────────────────────────────────────────────────────────

    async def authenticate(self, email: str, password: str) -> User:
        user = await self.find_by_email(email)
        if user is None or user.hashed_password is None:
            raise InvalidCredentials()
        if not verify_password(password, user.hashed_password):
            raise InvalidCredentials()
        return user

    # ── Refresh tokens ───────────────────────────────────────────────────────

    async def store_refresh_token(self, user: User, token: str) -> None:
        user.refresh_token = token
        await self.save(user)

    async def clear_refresh_token(self, user: User) -> None:
        user.refresh_token = None
        await self.save(user)

    @staticmethod
    def refresh_token_matches(user: User, token: str) -> bool:
        if not user.refresh_token:
            return False
        return secrets.compare_digest(user.refresh_token.encode(), token.encode())

    # ── External identities ──────────────────────────────────────────────────

    async def link_or_create_external(self, profile: ExternalProfile) -> User:
        """Resolve an external login to a local account.

        Known subject → that account. Otherwise an account with the same
        email is linked in place. Otherwise a new account is created with a
        synthesized username (and email, if the provider sent none).
        """
        user = await self.find_by_provider_sub(profile.subject)
        if user is not None:
            return user

        if profile.email:
            user = await self.find_by_email(profile.email)
            if user is not None:
                user.provider_sub = profile.subject
                await self.save(user)
                logger.info("External identity linked", user_id=str(user.id),
                            provider=profile.provider)
                return user

        username = await self._available_username(profile.display_name)
        email = profile.email or f"{profile.subject}@{profile.provider}.oauth"
        return await self.create(
            username,
            email,
            auth_provider=profile.provider,
            provider_sub=profile.subject,
            profile_image=profile.picture,
        )

    async def _available_username(self, display_name: str | None) -> str:
        base = re.sub(r"\s+", "_", display_name.strip()).lower() if display_name else ""
        base = base[:90]
        if not base:
            base = f"user_{int(time.time() * 1000)}"
        candidate, suffix = base, 1
        while await self.find_by_username(candidate) is not None:
            suffix += 1
            candidate = f"{base}_{suffix}"
        return candidate
