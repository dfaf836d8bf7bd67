"""Core records of the board: posts, comments and anonymous users."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class Comment:
    """A comment on a post; ``parent_comment_id`` of 0 means a top-level comment."""

    id: int = 0
    user_name: str = ""
    user_avatar: str = ""
    post_id: int = 0
    parent_comment_id: int = 0
    content: str = ""
    created_at: datetime | None = None


@dataclass
class CommentNode:
    """A comment together with its direct replies.

    Attribute lookups that the node itself does not answer are passed on to
    the wrapped comment, so ``node.content`` reads ``node.comment.content``.
    """

    comment: Comment
    replies: list[CommentNode] = field(default_factory=list)

    def __getattr__(self, name: str):
        if name == "comment" or name.startswith("__"):
            raise AttributeError(name)
        return getattr(self.comment, name)


@dataclass
class Post:
    """A thread opener; ``archived_at`` is None while the thread is active."""

    id: int = 0
    user_name: str = ""
    user_avatar: str = ""
    title: str = ""
    content: str = ""
    image: str = ""
    created_at: datetime | None = None
    archived_at: datetime | None = None


@dataclass
class PostComments:
    """A post with all of its comments in creation order."""

    post: Post
    comments: list[Comment] = field(default_factory=list)


@dataclass
class User:
    """An anonymous session user with a generated name and avatar."""

    id: str = ""
    name: str = ""
    avatar: str = ""
    expires_at: datetime | None = None