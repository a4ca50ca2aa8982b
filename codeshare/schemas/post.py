"""Schemas for Post resources."""

from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict

from codeshare.schemas.common import Pagination
from codeshare.schemas.user import AuthorOut


class PostOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    title: str
    code: str
    language: str
    description: str
    image: str | None
    ai_explanation: str | None
    likes_count: int
    comments_count: int
    author: AuthorOut
    is_liked: bool = False
    created_at: datetime
    updated_at: datetime


class PostList(BaseModel):
    items: list[PostOut]
    pagination: Pagination
