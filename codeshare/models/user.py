"""User model: local accounts and externally-federated identities."""

from __future__ import annotations

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from codeshare.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin


class User(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "users"

    username: Mapped[str] = mapped_column(String(100), unique=True, nullable=False, index=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)

    # None for accounts created through an external identity provider
    hashed_password: Mapped[str | None] = mapped_column(Text, nullable=True)

    # "local" | "google": how the account was first created
    auth_provider: Mapped[str] = mapped_column(String(20), nullable=False, default="local")
    # Subject id at the external provider, set on first external login or link
    provider_sub: Mapped[str | None] = mapped_column(String(255), unique=True, nullable=True)

    profile_image: Mapped[str | None] = mapped_column(String(500), nullable=True)
    bio: Mapped[str] = mapped_column(String(500), nullable=False, default="")

    # Last issued refresh token; any other value is rejected. Cleared on logout.
    refresh_token: Mapped[str | None] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<User {self.username!r} provider={self.auth_provider!r}>"
