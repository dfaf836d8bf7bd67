"""Core services: thread listing and archiving, comments, anonymous sessions."""

from __future__ import annotations

import re
import secrets
from collections.abc import Callable
from datetime import datetime, timedelta, timezone

from .domain import Comment, Post, PostComments, User
from .ports import (
    AvatarProvider,
    CommentRepository,
    InvalidPostIdError,
    NoRowsError,
    PostRepository,
    UserRepository,
)

SESSION_TTL = timedelta(days=7)
POST_LIFETIME = timedelta(minutes=10)
COMMENT_LIFETIME = timedelta(minutes=15)

_UINT64_LIMIT = 1 << 64
_DIGITS = re.compile(r"[0-9]+")

Clock = Callable[[], datetime]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_post_id(text: str) -> int:
    """Parse an unsigned 64-bit decimal post id, raising InvalidPostIdError otherwise."""
    if not _DIGITS.fullmatch(text):
        raise InvalidPostIdError()
    value = int(text)
    if value >= _UINT64_LIMIT:
        raise InvalidPostIdError()
    return value


def _is_recent(now: datetime, moment: datetime | None, lifetime: timedelta) -> bool:
    return moment is not None and now - moment < lifetime


class CommentService:
    """Operations on comments."""

    def __init__(self, repo: CommentRepository) -> None:
        self.repo = repo


class PostService:
    """Creates, lists and archives threads."""

    def __init__(
        self,
        repo: PostRepository,
        comment_repo: CommentRepository,
        clock: Clock | None = None,
    ) -> None:
        self._repo = repo
        self._comment_repo = comment_repo
        self._clock = clock if clock is not None else _utc_now

    def create_post(self, post: Post) -> None:
        self._repo.create_post(post)

    def list_posts(self) -> list[Post]:
        return self._repo.list_posts()

    def list_active(self) -> list[Post]:
        """Return threads still alive, archiving the ones that have gone quiet.

        A thread without comments lives for 10 minutes after it was posted;
        one with comments lives for 15 minutes after its newest comment.
        """
        posts = self._repo.list_posts()
        now = self._clock()
        active: list[Post] = []
        for post in posts:
            try:
                last = self._comment_repo.get_last_comment(post.id)
            except NoRowsError:
                alive = _is_recent(now, post.created_at, POST_LIFETIME)
            else:
                alive = _is_recent(now, last.created_at, COMMENT_LIFETIME)
            if alive:
                active.append(post)
            else:
                self._repo.update_post_archived_at(post.id, now)
        return active

    def get_post_with_comments(self, post_id: str) -> PostComments:
        return self._repo.get_post_with_comments(parse_post_id(post_id))

    def create_comment(self, comment: Comment, post_id: str) -> None:
        comment.post_id = parse_post_id(post_id)
        self._comment_repo.create_comment(comment)


class UserService:
    """Looks up anonymous session users and creates new ones on demand."""

    def __init__(
        self,
        repo: UserRepository,
        avatar: AvatarProvider,
        clock: Clock | None = None,
    ) -> None:
        self._repo = repo
        self._avatar = avatar
        self._clock = clock if clock is not None else _utc_now

    def find_or_create(self, session_id: str) -> tuple[User, bool]:
        """Return ``(user, is_new)`` for a session id, which may be empty."""
        now = self._clock()
        if session_id:
            existing = self._repo.get_user(session_id)
            if (
                existing is not None
                and existing.expires_at is not None
                and existing.expires_at > now
            ):
                return existing, False
        name, avatar_url = self._avatar.next()
        user = User(
            id=secrets.token_hex(16),
            name=name,
            avatar=avatar_url,
            expires_at=now + SESSION_TTL,
        )
        self._repo.save_user(user)
        return user, True