"""SQLAlchemy ORM models."""

from codeshare.models.base import Base
from codeshare.models.comment import Comment
from codeshare.models.like import Like
from codeshare.models.post import Post
from codeshare.models.user import User

__all__ = ["Base", "Comment", "Like", "Post", "User"]
