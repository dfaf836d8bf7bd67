"""Command-line entry point: wires storage, services and the web server together."""

from __future__ import annotations

import sqlite3
import sys
from collections.abc import Sequence
from contextlib import closing
from datetime import datetime

from werkzeug.serving import run_simple

from .avatar import RickAndMortyClient
from .config import DBConfig, FlagError, endpoints_text, help_text, load_config, parse_flags
from .logger import configure_logging
from .repository import CommentRepository, PostRepository, UserRepository
from .services import PostService, UserService
from .web import PostHandler, create_app, load_templates

TEMPLATE_DIR = "templates"
DEFAULT_DATABASE = "leetboard.db"
LISTEN_HOST = "0.0.0.0"
SQLITE_PLACEHOLDER = "?"

_SQLITE_NAMES = frozenset({"", "sqlite", "sqlite3"})

_SCHEMA = """
CREATE TABLE IF NOT EXISTS posts (
    post_id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_name TEXT NOT NULL,
    user_avatar TEXT NOT NULL,
    title TEXT NOT NULL,
    content TEXT NOT NULL,
    image TEXT,
    created_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
    archived_at TIMESTAMP
);
CREATE TABLE IF NOT EXISTS comments (
    comment_id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_name TEXT NOT NULL,
    user_avatar TEXT NOT NULL,
    post_id INTEGER NOT NULL REFERENCES posts(post_id),
    parent_comment_id INTEGER REFERENCES comments(comment_id),
    content TEXT NOT NULL,
    created_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP
);
CREATE TABLE IF NOT EXISTS users (
    user_id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    avatar TEXT NOT NULL,
    expires_at TIMESTAMP NOT NULL
);
"""


def _open_database(db: DBConfig) -> sqlite3.Connection:
    """Open the board's database, creating its tables when missing."""
    if db.connection.lower() not in _SQLITE_NAMES:
        raise ValueError(f"unsupported database connection: {db.connection}")
    sqlite3.register_adapter(datetime, datetime.isoformat)
    conn = sqlite3.connect(db.name or DEFAULT_DATABASE, check_same_thread=False)
    try:
        conn.executescript(_SCHEMA)
    except sqlite3.Error:
        conn.close()
        raise
    return conn


def run(argv: Sequence[str] | None = None) -> int:
    """Start the board; returns the process exit status.

    Raises FlagError for a bad command line.
    """
    args = sys.argv[1:] if argv is None else list(argv)
    flags = parse_flags(args)
    if flags.show_help:
        print(help_text())
        return 0
    if flags.show_endpoints:
        print(endpoints_text())
        return 0

    config = load_config()
    log = configure_logging(config.app)
    log.info("Starting application", extra={"app": config.app.name, "env": config.app.env})

    try:
        conn = _open_database(config.db)
    except (ValueError, sqlite3.Error) as err:
        log.error("Failed to connect to the database", extra={"error": err})
        return 1

    with closing(conn):
        avatars = RickAndMortyClient()
        post_repo = PostRepository(conn, SQLITE_PLACEHOLDER)
        comment_repo = CommentRepository(conn, SQLITE_PLACEHOLDER)
        user_repo = UserRepository(conn, SQLITE_PLACEHOLDER)

        post_service = PostService(post_repo, comment_repo)
        user_service = UserService(user_repo, avatars)

        try:
            templates = load_templates(TEMPLATE_DIR)
        except FileNotFoundError as err:
            log.error("Failed to load templates", extra={"error": err})
            return 1

        application = create_app(PostHandler(post_service, templates), user_service)
        log.info(f"Listening on port: {flags.port}")
        try:
            run_simple(LISTEN_HOST, flags.port, application)
        except OSError as err:
            log.error("Server stopped", extra={"error": err})
            return 1
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Command entry point: reports bad flags on standard error."""
    try:
        return run(argv)
    except FlagError as err:
        print(err, file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())