"""SQL-backed repositories over a DB-API 2.0 connection."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime, timezone
from typing import Any

from .domain import Comment, Post, PostComments, User
from . import ports
from .ports import NoRowsError

DEFAULT_PLACEHOLDER = "%s"


def _as_datetime(value: Any) -> datetime | None:
    """Normalise a stored timestamp to an aware datetime (naive means UTC)."""
    if value is None:
        return None
    if isinstance(value, str):
        value = datetime.fromisoformat(value)
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


class _Sql:
    """Runs queries written with ``{p}`` for each parameter marker."""

    def __init__(self, conn: Any, placeholder: str) -> None:
        self._conn = conn
        self._placeholder = placeholder

    def _render(self, template: str) -> str:
        return template.format(p=self._placeholder)

    def fetch_all(self, template: str, params: Sequence[Any] = ()) -> list[tuple]:
        cursor = self._conn.cursor()
        try:
            cursor.execute(self._render(template), tuple(params))
            return list(cursor.fetchall())
        finally:
            cursor.close()

    def execute(self, template: str, params: Sequence[Any] = ()) -> None:
        cursor = self._conn.cursor()
        try:
            cursor.execute(self._render(template), tuple(params))
        finally:
            cursor.close()
        self._conn.commit()


def _post_from_row(row: Sequence[Any]) -> Post:
    post_id, user_name, avatar, title, content, image, created_at, archived_at = row
    return Post(
        id=int(post_id),
        user_name=user_name,
        user_avatar=avatar,
        title=title,
        content=content,
        image=image or "",
        created_at=_as_datetime(created_at),
        archived_at=_as_datetime(archived_at),
    )


def _comment_from_row(row: Sequence[Any]) -> Comment:
    comment_id, user_name, avatar, post_id, parent_id, content, created_at = row
    return Comment(
        id=int(comment_id),
        user_name=user_name or "",
        user_avatar=avatar or "",
        post_id=int(post_id or 0),
        parent_comment_id=int(parent_id or 0),
        content=content or "",
        created_at=_as_datetime(created_at),
    )


_POST_COLUMNS = "post_id, user_name, user_avatar, title, content, image, created_at, archived_at"
_COMMENT_COLUMNS = (
    "comment_id, user_name, user_avatar, post_id, parent_comment_id, content, created_at"
)


class PostRepository(ports.PostRepository):
    """Posts stored in the ``posts`` table."""

    def __init__(self, conn: Any, placeholder: str = DEFAULT_PLACEHOLDER) -> None:
        self._db = _Sql(conn, placeholder)

    def create_post(self, post: Post) -> None:
        if post.image:
            self._db.execute(
                "INSERT INTO posts (user_name, user_avatar, title, content, image) "
                "VALUES ({p}, {p}, {p}, {p}, {p})",
                (post.user_name, post.user_avatar, post.title, post.content, post.image),
            )
        else:
            self._db.execute(
                "INSERT INTO posts (user_name, user_avatar, title, content) "
                "VALUES ({p}, {p}, {p}, {p})",
                (post.user_name, post.user_avatar, post.title, post.content),
            )

    def list_posts(self) -> list[Post]:
        rows = self._db.fetch_all(f"SELECT {_POST_COLUMNS} FROM posts ORDER BY post_id")
        if not rows:
            raise NoRowsError()
        return [_post_from_row(row) for row in rows]

    def get_post_with_comments(self, post_id: int) -> PostComments:
        rows = self._db.fetch_all(
            "SELECT p.post_id, p.user_name, p.user_avatar, p.title, p.content, "
            "p.image, p.created_at, p.archived_at, "
            "c.comment_id, c.user_name, c.user_avatar, c.post_id, "
            "c.parent_comment_id, c.content, c.created_at "
            "FROM posts p LEFT JOIN comments c ON c.post_id = p.post_id "
            "WHERE p.post_id = {p} "
            "ORDER BY c.created_at ASC, c.comment_id ASC",
            (post_id,),
        )
        if not rows:
            raise NoRowsError()
        post = _post_from_row(rows[0][:8])
        comments = [_comment_from_row(row[8:]) for row in rows if row[8] is not None]
        return PostComments(post=post, comments=comments)

    def update_post_archived_at(self, post_id: int, archived_at: datetime) -> None:
        self._db.execute(
            "UPDATE posts SET archived_at = {p} WHERE post_id = {p}",
            (archived_at, post_id),
        )


class CommentRepository(ports.CommentRepository):
    """Comments stored in the ``comments`` table."""

    def __init__(self, conn: Any, placeholder: str = DEFAULT_PLACEHOLDER) -> None:
        self._db = _Sql(conn, placeholder)

    def get_last_comment(self, post_id: int) -> Comment:
        rows = self._db.fetch_all(
            f"SELECT {_COMMENT_COLUMNS} FROM comments "
            "WHERE post_id = {p} ORDER BY comment_id DESC LIMIT 1",
            (post_id,),
        )
        if not rows:
            raise NoRowsError()
        return _comment_from_row(rows[0])

    def create_comment(self, comment: Comment) -> None:
        if comment.parent_comment_id == 0:
            self._db.execute(
                "INSERT INTO comments (user_name, user_avatar, post_id, content) "
                "VALUES ({p}, {p}, {p}, {p})",
                (comment.user_name, comment.user_avatar, comment.post_id, comment.content),
            )
        else:
            self._db.execute(
                "INSERT INTO comments "
                "(user_name, user_avatar, post_id, parent_comment_id, content) "
                "VALUES ({p}, {p}, {p}, {p}, {p})",
                (
                    comment.user_name,
                    comment.user_avatar,
                    comment.post_id,
                    comment.parent_comment_id,
                    comment.content,
                ),
            )


class UserRepository(ports.UserRepository):
    """Session users stored in the ``users`` table."""

    def __init__(self, conn: Any, placeholder: str = DEFAULT_PLACEHOLDER) -> None:
        self._db = _Sql(conn, placeholder)

    def get_user(self, user_id: str) -> User | None:
        rows = self._db.fetch_all(
            "SELECT user_id, name, avatar, expires_at FROM users WHERE user_id = {p}",
            (user_id,),
        )
        if not rows:
            return None
        found_id, name, avatar, expires_at = rows[0]
        return User(id=found_id, name=name, avatar=avatar, expires_at=_as_datetime(expires_at))

    def save_user(self, user: User) -> None:
        self._db.execute(
            "INSERT INTO users (user_id, name, avatar, expires_at) "
            "VALUES ({p}, {p}, {p}, {p}) "
            "ON CONFLICT(user_id) DO UPDATE SET "
            "name = excluded.name, avatar = excluded.avatar, expires_at = excluded.expires_at",
            (user.id, user.name, user.avatar, user.expires_at),
        )