import logging

import pytest

from leetboard.config import AppConfig
from leetboard.logger import configure_logging

APP = AppConfig(name="board", env="dev")


@pytest.fixture(autouse=True)
def _reset_logging():
    yield
    logger = configure_logging(APP)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


def test_info_line_is_key_value(capsys):
    configure_logging(APP)
    logging.getLogger("leetboard.web").info(
        "http request", extra={"method": "GET", "path": "/"}
    )
    line = capsys.readouterr().err.strip()
    assert line.startswith("time=")
    assert 'level=INFO msg="http request" method=GET path=/' in line


def test_debug_is_suppressed(capsys):
    logger = configure_logging(APP)
    logging.getLogger("leetboard.services").debug("quiet")
    logger.debug("also quiet")
    assert capsys.readouterr().err == ""


def test_warning_uses_short_level_name(capsys):
    logger = configure_logging(APP)
    logger.warning("careful")
    assert "level=WARN msg=careful" in capsys.readouterr().err


def test_empty_and_spaced_values_are_quoted(capsys):
    logger = configure_logging(APP)
    logger.info("x", extra={"empty": "", "phrase": "a b"})
    err = capsys.readouterr().err
    assert 'empty=""' in err
    assert 'phrase="a b"' in err


def test_reconfiguring_does_not_duplicate_output(capsys):
    first = configure_logging(APP)
    logger = configure_logging(AppConfig())
    assert logger is first
    logger.info("once")
    assert len(capsys.readouterr().err.strip().splitlines()) == 1


def test_exception_is_attached(capsys):
    logger = configure_logging(APP)
    try:
        raise RuntimeError("boom")
    except RuntimeError:
        logger.exception("failed")
    err = capsys.readouterr().err
    assert "level=ERROR msg=failed" in err
    assert "RuntimeError: boom" in err