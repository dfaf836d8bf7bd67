"""Interfaces between the core services and their adapters, and core errors."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from .domain import Comment, Post, PostComments, User


class NoRowsError(LookupError):
    """A query found nothing."""

    def __init__(self, message: str = "no rows in result set") -> None:
        super().__init__(message)


class NoPostsError(LookupError):
    """The requested post does not exist."""

    def __init__(self, message: str = "no posts") -> None:
        super().__init__(message)


class InvalidPostIdError(ValueError):
    """A post identifier is not an unsigned decimal integer."""

    def __init__(self, message: str = "invalid post ID") -> None:
        super().__init__(message)


class AvatarProvider(ABC):
    """Supplies a fresh display name and avatar URL for a new user."""

    @abstractmethod
    def next(self) -> tuple[str, str]:
        """Return ``(name, avatar_url)``."""


class CommentRepository(ABC):
    """Storage of comments."""

    @abstractmethod
    def get_last_comment(self, post_id: int) -> Comment:
        """Return the newest comment of a post; raise NoRowsError if there is none."""

    @abstractmethod
    def create_comment(self, comment: Comment) -> None:
        """Store a new comment."""


class PostRepository(ABC):
    """Storage of posts."""

    @abstractmethod
    def create_post(self, post: Post) -> None:
        """Store a new post."""

    @abstractmethod
    def list_posts(self) -> list[Post]:
        """Return every post; raise NoRowsError if there are none."""

    @abstractmethod
    def get_post_with_comments(self, post_id: int) -> PostComments:
        """Return a post and its comments; raise NoRowsError if it is missing."""

    @abstractmethod
    def update_post_archived_at(self, post_id: int, archived_at: datetime) -> None:
        """Mark a post as archived at the given moment."""


class UserRepository(ABC):
    """Storage of session users."""

    @abstractmethod
    def get_user(self, user_id: str) -> User | None:
        """Return the user with this id, or None."""

    @abstractmethod
    def save_user(self, user: User) -> None:
        """Insert or replace a user."""