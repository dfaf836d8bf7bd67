import sqlite3
from http import HTTPStatus
from unittest.mock import patch

import pytest
from werkzeug.test import Client

from leetboard.app import main, run
from leetboard.config import FlagError, endpoints_text, help_text


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("APP_NAME", "APP_ENV", "DB_CONNECTION", "DB_HOST", "DB_PORT",
                 "DB_USER", "DB_PASSWORD", "DB_NAME"):
        monkeypatch.delenv(name, raising=False)


def test_help_prints_usage(capsys):
    assert run(["--port", "5000", "--help"]) == 0
    assert capsys.readouterr().out == help_text() + "\n"


def test_endpoints_prints_listing(capsys):
    assert run(["--endpoints"]) == 0
    assert capsys.readouterr().out == endpoints_text() + "\n"


def test_bad_port_raises():
    with pytest.raises(FlagError):
        run(["--port", "80"])


def test_main_reports_unknown_flag(capsys):
    assert main(["--bogus"]) == 1
    assert "unknown flag: --bogus" in capsys.readouterr().err


def test_unsupported_database_fails(monkeypatch):
    monkeypatch.setenv("DB_CONNECTION", "postgres")
    with patch("leetboard.app.run_simple") as serve:
        assert run([]) == 1
    serve.assert_not_called()


def test_missing_templates_fail(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("DB_NAME", str(tmp_path / "board.db"))
    with patch("leetboard.app.run_simple") as serve:
        assert run([]) == 1
    serve.assert_not_called()


def test_run_serves_working_board(monkeypatch, tmp_path):
    templates = tmp_path / "templates"
    templates.mkdir()
    (templates / "catalog.html").write_text(
        "{% for p in posts %}[{{ p.title }}]{% endfor %}", encoding="utf-8"
    )
    (templates / "create-post.html").write_text("create-form", encoding="utf-8")
    (templates / "error.html").write_text("{{ message }}", encoding="utf-8")
    db_path = tmp_path / "board.db"
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("DB_CONNECTION", "sqlite")
    monkeypatch.setenv("DB_NAME", str(db_path))

    seen = {}

    def serve(host, port, application):
        seen["port"] = port
        with sqlite3.connect(db_path) as conn:
            conn.execute(
                "INSERT INTO users (user_id, name, avatar, expires_at) VALUES (?, ?, ?, ?)",
                ("abc", "Rick", "https://example.com/rick.png", "2999-01-01T00:00:00+00:00"),
            )
        client = Client(application, use_cookies=False)
        cookie = {"Cookie": "session_id=abc"}
        seen["form"] = client.get("/create", headers=cookie).get_data(as_text=True)
        created = client.post("/create", data={"title": "Hello", "content": "World"}, headers=cookie)
        seen["created"] = created.status_code
        seen["catalog"] = client.get("/", headers=cookie).get_data(as_text=True)

    with patch("leetboard.app.run_simple", side_effect=serve):
        assert run(["--port", "4500"]) == 0

    assert seen["port"] == 4500
    assert seen["form"] == "create-form"
    assert seen["created"] == HTTPStatus.SEE_OTHER
    assert seen["catalog"] == "[Hello]"
    with sqlite3.connect(db_path) as conn:
        tables = {row[0] for row in conn.execute("SELECT name FROM sqlite_master WHERE type='table'")}
        authors = [row[0] for row in conn.execute("SELECT user_name FROM posts")]
    assert {"posts", "comments", "users"} <= tables
    assert authors == ["Rick"]