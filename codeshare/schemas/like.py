"""Schemas for Like resources."""

from __future__ import annotations

from pydantic import BaseModel

from codeshare.schemas.common import Pagination
from codeshare.schemas.user import AuthorOut


class LikeToggleOut(BaseModel):
    is_liked: bool
    likes_count: int


class LikerList(BaseModel):
    items: list[AuthorOut]
    pagination: Pagination
