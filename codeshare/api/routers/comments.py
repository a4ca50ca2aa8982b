"""Comments router: list/add comments on a post, delete own comments."""

from __future__ import annotations

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy import func, select, update

from codeshare.api.dependencies import CurrentUserDep, DbDep
from codeshare.api.routers.posts import get_post_or_404
from codeshare.core.errors import Forbidden, NotFound
from codeshare.core.logging import get_logger
from codeshare.models.comment import Comment
from codeshare.models.post import Post
from codeshare.schemas.comment import CommentCreate, CommentList, CommentOut
from codeshare.schemas.common import PageParams, Pagination

router = APIRouter(tags=["comments"])
logger = get_logger(__name__)

PageDep = Annotated[PageParams, Depends()]


@router.get("/posts/{post_id}/comments", response_model=CommentList)
async def list_comments(post_id: uuid.UUID, db: DbDep, page: PageDep) -> CommentList:
    await get_post_or_404(db, post_id)

    total = (
        await db.execute(
            select(func.count()).select_from(Comment).where(Comment.post_id == post_id)
        )
    ).scalar_one()
    result = await db.execute(
        select(Comment)
        .where(Comment.post_id == post_id)
        .order_by(Comment.created_at.desc())
        .offset(page.offset)
        .limit(page.limit)
    )
    comments = list(result.scalars().all())
    return CommentList(
        items=[CommentOut.model_validate(c) for c in comments],
        pagination=Pagination.build(page.page, page.limit, total, len(comments)),
    )


@router.post(
    "/posts/{post_id}/comments",
    response_model=CommentOut,
    status_code=status.HTTP_201_CREATED,
)
async def add_comment(
    post_id: uuid.UUID, payload: CommentCreate, db: DbDep, current_user: CurrentUserDep
) -> CommentOut:
    await get_post_or_404(db, post_id)

    comment = Comment(post_id=post_id, user_id=current_user.id, content=payload.content)
    db.add(comment)
    await db.execute(
        update(Post)
        .where(Post.id == post_id)
        .values(comments_count=Post.comments_count + 1)
    )
    await db.flush()
    result = await db.execute(
        select(Comment)
        .where(Comment.id == comment.id)
        .execution_options(populate_existing=True)
    )
    return CommentOut.model_validate(result.scalar_one())


@router.delete("/comments/{comment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_comment(comment_id: uuid.UUID, db: DbDep, current_user: CurrentUserDep) -> None:
    comment = await db.get(Comment, comment_id)
    if comment is None:
        raise NotFound("Comment not found")
    if comment.user_id != current_user.id:
        raise Forbidden("Not authorized to delete this comment")

    await db.delete(comment)
    await db.execute(
        update(Post)
        .where(Post.id == comment.post_id, Post.comments_count > 0)
        .values(comments_count=Post.comments_count - 1)
    )
    logger.info("Comment deleted", comment_id=str(comment_id))
