"""Posts router: code snippet CRUD with optional image attachment."""

from __future__ import annotations

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from codeshare.api.dependencies import CurrentUserDep, DbDep, OptionalUserDep
from codeshare.core.errors import Forbidden, NotFound
from codeshare.core.logging import get_logger
from codeshare.core.uploads import delete_image, save_image
from codeshare.models.comment import Comment
from codeshare.models.like import Like
from codeshare.models.post import Post
from codeshare.models.user import User
from codeshare.schemas.common import PageParams, Pagination
from codeshare.schemas.post import PostList, PostOut

router = APIRouter(prefix="/posts", tags=["posts"])
logger = get_logger(__name__)

PageDep = Annotated[PageParams, Depends()]

TitleForm = Annotated[str, Form(min_length=1, max_length=200)]
CodeForm = Annotated[str, Form(min_length=1, max_length=10000)]
LanguageForm = Annotated[str, Form(min_length=1, max_length=50)]
DescriptionForm = Annotated[str, Form(max_length=1000)]
ImageFile = Annotated[UploadFile | None, File()]


async def get_post_or_404(db: AsyncSession, post_id: uuid.UUID) -> Post:
    result = await db.execute(
        select(Post).where(Post.id == post_id).execution_options(populate_existing=True)
    )
    post = result.scalar_one_or_none()
    if post is None:
        raise NotFound("Post not found")
    return post


async def serialize_posts(
    db: AsyncSession, posts: list[Post], viewer: User | None
) -> list[PostOut]:
    """Convert posts to PostOut, marking the ones *viewer* has liked."""
    liked: set[uuid.UUID] = set()
    if viewer is not None and posts:
        result = await db.execute(
            select(Like.post_id).where(
                Like.user_id == viewer.id,
                Like.post_id.in_([p.id for p in posts]),
            )
        )
        liked = set(result.scalars().all())
    return [
        PostOut.model_validate(p).model_copy(update={"is_liked": p.id in liked})
        for p in posts
    ]


def _is_real_upload(file: UploadFile | None) -> bool:
    return file is not None and bool(file.filename)


@router.get("", response_model=PostList)
async def list_posts(db: DbDep, viewer: OptionalUserDep, page: PageDep) -> PostList:
    """Newest posts first. Signed-in viewers also get ``is_liked``."""
    total = (await db.execute(select(func.count()).select_from(Post))).scalar_one()
    result = await db.execute(
        select(Post).order_by(Post.created_at.desc()).offset(page.offset).limit(page.limit)
    )
    posts = list(result.scalars().all())
    return PostList(
        items=await serialize_posts(db, posts, viewer),
        pagination=Pagination.build(page.page, page.limit, total, len(posts)),
    )


@router.get("/{post_id}", response_model=PostOut)
async def get_post(post_id: uuid.UUID, db: DbDep, viewer: OptionalUserDep) -> PostOut:
    post = await get_post_or_404(db, post_id)
    return (await serialize_posts(db, [post], viewer))[0]


@router.post("", response_model=PostOut, status_code=status.HTTP_201_CREATED)
async def create_post(
    db: DbDep,
    current_user: CurrentUserDep,
    title: TitleForm,
    code: CodeForm,
    language: LanguageForm,
    description: DescriptionForm = "",
    image: ImageFile = None,
) -> PostOut:
    post = Post(
        user_id=current_user.id,
        title=title.strip(),
        code=code,
        language=language.strip().lower(),
        description=description,
        image=await save_image(image) if _is_real_upload(image) else None,
    )
    db.add(post)
    await db.flush()
    post = await get_post_or_404(db, post.id)
    logger.info("Post created", post_id=str(post.id), user_id=str(current_user.id))
    return PostOut.model_validate(post)


@router.put("/{post_id}", response_model=PostOut)
async def update_post(
    post_id: uuid.UUID,
    db: DbDep,
    current_user: CurrentUserDep,
    title: Annotated[str | None, Form(min_length=1, max_length=200)] = None,
    code: Annotated[str | None, Form(min_length=1, max_length=10000)] = None,
    language: Annotated[str | None, Form(min_length=1, max_length=50)] = None,
    description: Annotated[str | None, Form(max_length=1000)] = None,
    image: ImageFile = None,
) -> PostOut:
    post = await get_post_or_404(db, post_id)
    if post.user_id != current_user.id:
        raise Forbidden("Not authorized to update this post")

    if title is not None:
        post.title = title.strip()
    if code is not None:
        post.code = code
    if language is not None:
        post.language = language.strip().lower()
    if description is not None:
        post.description = description
    if _is_real_upload(image):
        old_image = post.image
        post.image = await save_image(image)
        delete_image(old_image)

    await db.flush()
    post = await get_post_or_404(db, post.id)
    return (await serialize_posts(db, [post], current_user))[0]


@router.delete("/{post_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_post(post_id: uuid.UUID, db: DbDep, current_user: CurrentUserDep) -> None:
    post = await get_post_or_404(db, post_id)
    if post.user_id != current_user.id:
        raise Forbidden("Not authorized to delete this post")

    await db.execute(delete(Like).where(Like.post_id == post_id))
    await db.execute(delete(Comment).where(Comment.post_id == post_id))
    await db.delete(post)
    await db.flush()
    delete_image(post.image)
    logger.info("Post deleted", post_id=str(post_id))
