"""Post model: a shared code snippet."""

from __future__ import annotations

import uuid

from sqlalchemy import ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from codeshare.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin
from codeshare.models.user import User


class Post(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "posts"

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    code: Mapped[str] = mapped_column(Text, nullable=False)
    # Stored lower-cased
    language: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    description: Mapped[str] = mapped_column(String(1000), nullable=False, default="")
    image: Mapped[str | None] = mapped_column(String(500), nullable=True)

    # Cached AI explanation; regenerated only on explicit refresh
    ai_explanation: Mapped[str | None] = mapped_column(Text, nullable=True)

    likes_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    comments_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    author: Mapped[User] = relationship(lazy="selectin")

    def __repr__(self) -> str:
        return f"<Post {self.title!r} language={self.language!r}>"
