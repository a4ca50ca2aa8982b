"""Likes router: toggle a like, list who liked a post."""

from __future__ import annotations

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy import func, select, update

from codeshare.api.dependencies import CurrentUserDep, DbDep
from codeshare.api.routers.posts import get_post_or_404
from codeshare.models.like import Like
from codeshare.models.post import Post
from codeshare.schemas.common import PageParams, Pagination
from codeshare.schemas.like import LikerList, LikeToggleOut
from codeshare.schemas.user import AuthorOut

router = APIRouter(tags=["likes"])

PageDep = Annotated[PageParams, Depends()]


@router.post("/posts/{post_id}/like", response_model=LikeToggleOut)
async def toggle_like(post_id: uuid.UUID, db: DbDep, current_user: CurrentUserDep) -> LikeToggleOut:
    """Like the post, or remove the caller's like if it already exists."""
    await get_post_or_404(db, post_id)

    existing = (
        await db.execute(
            select(Like).where(Like.post_id == post_id, Like.user_id == current_user.id)
        )
    ).scalar_one_or_none()

    if existing is not None:
        await db.delete(existing)
        stmt = (
            update(Post)
            .where(Post.id == post_id, Post.likes_count > 0)
            .values(likes_count=Post.likes_count - 1)
        )
    else:
        db.add(Like(post_id=post_id, user_id=current_user.id))
        stmt = (
            update(Post)
            .where(Post.id == post_id)
            .values(likes_count=Post.likes_count + 1)
        )
    await db.flush()
    await db.execute(stmt)

    post = await get_post_or_404(db, post_id)
    return LikeToggleOut(is_liked=existing is None, likes_count=post.likes_count)


@router.get("/posts/{post_id}/likes", response_model=LikerList)
async def list_likes(post_id: uuid.UUID, db: DbDep, page: PageDep) -> LikerList:
    await get_post_or_404(db, post_id)

    total = (
        await db.execute(select(func.count()).select_from(Like).where(Like.post_id == post_id))
    ).scalar_one()
    result = await db.execute(
        select(Like)
        .where(Like.post_id == post_id)
        .order_by(Like.created_at.desc())
        .offset(page.offset)
        .limit(page.limit)
    )
    likes = list(result.scalars().all())
    return LikerList(
        items=[AuthorOut.model_validate(like.user) for like in likes],
        pagination=Pagination.build(page.page, page.limit, total, len(likes)),
    )
