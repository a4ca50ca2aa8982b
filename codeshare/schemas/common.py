"""Pagination helpers shared by list endpoints."""

from __future__ import annotations

import math
from typing import Annotated

from fastapi import Query
from pydantic import BaseModel

MAX_PAGE_SIZE = 100


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int
    has_more: bool

    @classmethod
    def build(cls, page: int, limit: int, total: int, returned: int) -> "Pagination":
        return cls(
            page=page,
            limit=limit,
            total=total,
            pages=math.ceil(total / limit) if limit else 0,
            has_more=(page - 1) * limit + returned < total,
        )


class PageParams:
    """``?page=&limit=`` query parameters as a dependency."""

    def __init__(
        self,
        page: Annotated[int, Query(ge=1)] = 1,
        limit: Annotated[int, Query(ge=1, le=MAX_PAGE_SIZE)] = 10,
    ) -> None:
        self.page = page
        self.limit = limit

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit
