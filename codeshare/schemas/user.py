"""Schemas for User and Auth resources."""

from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field

USERNAME_PATTERN = r"^[A-Za-z0-9_]+$"


class UserRegister(BaseModel):
    username: str = Field(..., min_length=3, max_length=20, pattern=USERNAME_PATTERN)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=100)


class UserLogin(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class RefreshIn(BaseModel):
    refresh_token: str = Field(..., min_length=1)


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    username: str
    email: str
    profile_image: str | None
    bio: str
    auth_provider: str
    created_at: datetime


class AuthorOut(BaseModel):
    """Public summary embedded in posts, comments and like lists."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    username: str
    profile_image: str | None


class TokenPairOut(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class AuthOut(TokenPairOut):
    user: UserOut
