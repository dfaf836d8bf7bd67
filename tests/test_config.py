import pytest

from leetboard.config import (
    AppConfig,
    Container,
    DBConfig,
    FlagError,
    Flags,
    endpoints_text,
    help_text,
    load_config,
    parse_flags,
)


def test_no_flags_gives_defaults():
    flags = parse_flags([])
    assert flags.port == 4000
    assert flags.storage_path == "data"
    assert not flags.show_help and not flags.show_endpoints


def test_port_flag():
    assert parse_flags(["--port", "5000"]).port == 5000


def test_port_flag_without_dashes():
    assert parse_flags(["port", "8080"]).port == 8080


@pytest.mark.parametrize("value", ["1024", "65535"])
def test_port_range_edges_accepted(value):
    assert parse_flags(["--port", value]).port == int(value)


@pytest.mark.parametrize("value", ["1023", "65536", "80"])
def test_port_out_of_range(value):
    with pytest.raises(FlagError, match="port must me between 1024 and 65535"):
        parse_flags(["--port", value])


@pytest.mark.parametrize("value", ["abc", "", "12 ", "4_000"])
def test_port_not_an_integer(value):
    with pytest.raises(FlagError, match="error while parsing the port"):
        parse_flags(["--port", value])


def test_port_flag_missing_value():
    with pytest.raises(FlagError, match="error while parsing the port"):
        parse_flags(["--port"])


def test_unknown_flag():
    with pytest.raises(FlagError, match="unknown flag: --dir"):
        parse_flags(["--dir", "x"])


def test_help_wins_even_over_bad_flags():
    assert parse_flags(["--port", "abc", "--help"]) == Flags(show_help=True)


def test_endpoints_stops_parsing():
    flags = parse_flags(["--port", "5000", "--endpoints", "junk", "--bogus"])
    assert flags.show_endpoints
    assert flags.port == 5000


def test_endpoints_consumes_next_argument_as_value():
    assert parse_flags(["--endpoints", "--port"]).show_endpoints


def test_load_config_reads_environment():
    environ = {
        "APP_NAME": "board",
        "APP_ENV": "dev",
        "DB_CONNECTION": "postgres",
        "DB_HOST": "localhost",
        "DB_PORT": "5432",
        "DB_USER": "user",
        "DB_PASSWORD": "password",
        "DB_NAME": "board",
    }
    container = load_config(environ)
    assert container.app == AppConfig(name="board", env="dev")
    assert container.db == DBConfig("postgres", "localhost", "5432", "user", "password", "board")


def test_load_config_missing_values_are_empty():
    assert load_config({}) == Container(AppConfig(), DBConfig())


def test_load_config_defaults_to_process_environment(monkeypatch):
    monkeypatch.setenv("APP_NAME", "from-env")
    assert load_config().app.name == "from-env"


def test_help_text_lists_options():
    text = help_text()
    for option in ("--help", "--port N", "--endpoints"):
        assert option in text


def test_endpoints_text_lists_routes():
    text = endpoints_text()
    assert "POST    /orders" in text
    assert "/reports/orderedItemsByPeriod" in text