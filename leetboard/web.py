"""HTTP front end: routing, anonymous sessions and thread pages."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from http import HTTPStatus
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, select_autoescape
from werkzeug.utils import redirect
from werkzeug.wrappers import Request, Response

from .domain import Comment, CommentNode, Post, User
from .ports import InvalidPostIdError, NoPostsError, NoRowsError
from .services import PostService, UserService, parse_post_id

SESSION_COOKIE = "session_id"
DEFAULT_ERROR_MESSAGE = "Failed to load threads."
NOT_FOUND_MESSAGE = "No such url path >,<"

_SESSION_KEY = "leetboard.session"

log = logging.getLogger("leetboard.web")

Handler = Callable[[Request], Response]


def build_comment_tree(comments: Iterable[Comment]) -> list[CommentNode]:
    """Arrange comments into trees of replies.

    A comment whose parent is unknown becomes a root. Roots and replies keep
    the order in which the comments were given.
    """
    nodes: dict[int, CommentNode] = {}
    for comment in comments:
        nodes[comment.id] = CommentNode(comment=comment)

    roots: list[CommentNode] = []
    for node in nodes.values():
        parent_id = node.comment.parent_comment_id
        parent = nodes.get(parent_id) if parent_id else None
        if parent is not None and parent is not node:
            parent.replies.append(node)
        else:
            roots.append(node)
    return roots


def _render(
    templates: Environment,
    name: str,
    status: int = HTTPStatus.OK,
    **context: Any,
) -> Response:
    body = templates.get_template(name).render(**context)
    return Response(body, status=int(status), mimetype="text/html")


def render_error(templates: Environment, status: int, message: str) -> Response:
    """Render the error page with the given status."""
    return _render(templates, "error.html", status, status_code=int(status), message=message)


def load_templates(directory: str | Path = "templates") -> Environment:
    """Load the HTML templates from a directory; it must hold at least one ``*.html``."""
    path = Path(directory)
    if not any(path.glob("*.html")):
        raise FileNotFoundError(f"no templates matched: {path / '*.html'}")
    return Environment(
        loader=FileSystemLoader(str(path)),
        autoescape=select_autoescape(["html"]),
    )


def _session(request: Request) -> User | None:
    return request.environ.get(_SESSION_KEY)


def _require_session(request: Request) -> User:
    user = _session(request)
    if user is None:
        raise RuntimeError("request has no session")
    return user


class PostHandler:
    """Pages for the catalog, the archive, single threads and new posts."""

    def __init__(self, service: PostService, templates: Environment) -> None:
        self._service = service
        self._templates = templates

    def _error(
        self,
        status: int = HTTPStatus.INTERNAL_SERVER_ERROR,
        message: str = DEFAULT_ERROR_MESSAGE,
    ) -> Response:
        return render_error(self._templates, status, message)

    def handle_catalog(self, request: Request) -> Response:
        if request.path != "/":
            return self._error(HTTPStatus.NOT_FOUND, NOT_FOUND_MESSAGE)
        try:
            posts = self._service.list_active()
        except NoRowsError:
            posts = []
        except Exception:  # any storage failure becomes the error page
            return self._error()
        return _render(self._templates, "catalog.html", posts=posts)

    def handle_archive(self, request: Request) -> Response:
        try:
            posts = self._service.list_posts()
        except NoRowsError:
            posts = []
        except Exception:  # any storage failure becomes the error page
            return self._error()
        return _render(self._templates, "archive.html", posts=posts)

    def handle_post(self, request: Request) -> Response:
        parts = request.path.removeprefix("/post/").split("/")
        post_id = parts[0]

        if len(parts) > 1 and parts[1] == "comment" and request.method == "POST":
            return self._add_comment(request, post_id)

        try:
            thread = self._service.get_post_with_comments(post_id)
        except NoRowsError:
            return self._error(HTTPStatus.NOT_FOUND, str(NoPostsError()))
        except InvalidPostIdError as err:
            return self._error(HTTPStatus.BAD_REQUEST, str(err))
        except Exception:  # any storage failure becomes the error page
            return self._error()

        post: Post = thread.post
        template = "archive-post.html" if post.archived_at is not None else "post.html"
        return _render(
            self._templates,
            template,
            post=post,
            comment_tree=build_comment_tree(thread.comments),
            user=_session(request),
        )

    def handle_create(self, request: Request) -> Response:
        if request.method == "GET":
            return _render(self._templates, "create-post.html")

        user = _require_session(request)
        post = Post(
            title=request.values.get("title", ""),
            content=request.values.get("content", ""),
            user_name=user.name,
            user_avatar=user.avatar,
        )
        try:
            self._service.create_post(post)
        except Exception:  # any storage failure becomes the error page
            return self._error()
        log.info("created post")
        return redirect("/", code=HTTPStatus.SEE_OTHER)

    def _add_comment(self, request: Request, post_id: str) -> Response:
        user = _require_session(request)
        parent = 0
        parent_text = request.values.get("parent_id", "")
        if parent_text:
            try:
                parent = parse_post_id(parent_text)
            except InvalidPostIdError:
                parent = 0
        comment = Comment(
            user_name=user.name,
            user_avatar=user.avatar,
            parent_comment_id=parent,
            content=request.values.get("content", ""),
        )
        try:
            self._service.create_comment(comment, post_id)
        except InvalidPostIdError as err:
            return self._error(HTTPStatus.BAD_REQUEST, str(err))
        except Exception:  # any storage failure becomes the error page
            return self._error()
        return redirect(f"/post/{post_id}", code=HTTPStatus.SEE_OTHER)


class SessionMiddleware:
    """Attaches an anonymous user to every request, creating one when needed."""

    def __init__(self, users: UserService) -> None:
        self._users = users

    def wrap(self, handler: Handler) -> Handler:
        def wrapped(request: Request) -> Response:
            log.info("http request", extra={"method": request.method, "path": request.path})
            session_id = request.cookies.get(SESSION_COOKIE, "")
            try:
                user, is_new = self._users.find_or_create(session_id)
            except Exception as err:  # reported to the client as plain text
                return Response(
                    f"{err}\n",
                    status=HTTPStatus.INTERNAL_SERVER_ERROR,
                    mimetype="text/plain",
                )
            request.environ[_SESSION_KEY] = user
            response = handler(request)
            if is_new:
                log.info("new session", extra={"id": user.id})
                response.set_cookie(
                    SESSION_COOKIE,
                    user.id,
                    path="/",
                    expires=user.expires_at,
                    httponly=True,
                    samesite="Lax",
                    secure=True,
                )
            return response

        return wrapped


def create_app(post_handler: PostHandler, user_service: UserService) -> Callable:
    """Build the WSGI application routing requests to the post handler."""
    sessions = SessionMiddleware(user_service)
    post = sessions.wrap(post_handler.handle_post)
    archive = sessions.wrap(post_handler.handle_archive)
    create = sessions.wrap(post_handler.handle_create)
    catalog = sessions.wrap(post_handler.handle_catalog)

    @Request.application
    def application(request: Request) -> Response:
        path = request.path
        if path == "/post":
            return redirect("/post/", code=HTTPStatus.MOVED_PERMANENTLY)
        if path.startswith("/post/"):
            return post(request)
        if path == "/archive":
            return archive(request)
        if path == "/create":
            return create(request)
        return catalog(request)

    return application