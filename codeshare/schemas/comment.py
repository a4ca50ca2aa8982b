"""Schemas for Comment resources."""

from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from codeshare.schemas.common import Pagination
from codeshare.schemas.user import AuthorOut


class CommentCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    content: str = Field(..., min_length=1, max_length=500)


class CommentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    post_id: uuid.UUID
    content: str
    author: AuthorOut
    created_at: datetime


class CommentList(BaseModel):
    items: list[CommentOut]
    pagination: Pagination
