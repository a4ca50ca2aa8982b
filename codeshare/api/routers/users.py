"""Users router: public profiles, self-service profile edits, a user's posts."""

from __future__ import annotations

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy import func, select

from codeshare.api.dependencies import CurrentUserDep, DbDep, OptionalUserDep, StoreDep
from codeshare.api.routers.posts import serialize_posts
from codeshare.core.errors import Conflict, Forbidden, NotFound
from codeshare.core.logging import get_logger
from codeshare.core.uploads import delete_image, save_image
from codeshare.models.post import Post
from codeshare.models.user import User
from codeshare.schemas.common import PageParams, Pagination
from codeshare.schemas.post import PostList
from codeshare.schemas.user import USERNAME_PATTERN, UserOut

router = APIRouter(prefix="/users", tags=["users"])
logger = get_logger(__name__)

PageDep = Annotated[PageParams, Depends()]


async def _get_user_or_404(store, user_id: uuid.UUID) -> User:
    user = await store.find_by_id(user_id)
    if user is None:
        raise NotFound("User not found")
    return user


@router.get("/{user_id}", response_model=UserOut)
async def get_user(user_id: uuid.UUID, store: StoreDep) -> User:
    return await _get_user_or_404(store, user_id)


@router.put("/{user_id}", response_model=UserOut)
async def update_user(
    user_id: uuid.UUID,
    store: StoreDep,
    current_user: CurrentUserDep,
    username: Annotated[
        str | None, Form(min_length=3, max_length=20, pattern=USERNAME_PATTERN)
    ] = None,
    bio: Annotated[str | None, Form(max_length=500)] = None,
    profile_image: Annotated[UploadFile | None, File()] = None,
) -> User:
    """Update the caller's own username, bio and/or profile image."""
    if current_user.id != user_id:
        raise Forbidden("Not authorized to update this profile")

    user = current_user
    if username is not None and username != user.username:
        if await store.find_by_username(username) is not None:
            raise Conflict("username", "Username already taken")
        user.username = username

    if bio is not None:
        user.bio = bio

    if profile_image is not None and profile_image.filename:
        old_image = user.profile_image
        user.profile_image = await save_image(profile_image)
        delete_image(old_image)

    await store.save(user)
    logger.info("Profile updated", user_id=str(user.id))
    return user


@router.get("/{user_id}/posts", response_model=PostList)
async def list_user_posts(
    user_id: uuid.UUID,
    db: DbDep,
    store: StoreDep,
    viewer: OptionalUserDep,
    page: PageDep,
) -> PostList:
    await _get_user_or_404(store, user_id)

    total = (
        await db.execute(select(func.count()).select_from(Post).where(Post.user_id == user_id))
    ).scalar_one()
    result = await db.execute(
        select(Post)
        .where(Post.user_id == user_id)
        .order_by(Post.created_at.desc())
        .offset(page.offset)
        .limit(page.limit)
    )
    posts = list(result.scalars().all())
    return PostList(
        items=await serialize_posts(db, posts, viewer),
        pagination=Pagination.build(page.page, page.limit, total, len(posts)),
    )
