"""Settings from the environment and command-line flags."""

from __future__ import annotations

import os
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

PROGRAM = "leetboard"
DEFAULT_PORT = 4000
DEFAULT_STORAGE_PATH = "data"
MIN_PORT = 1024
MAX_PORT = 65535

_INTEGER = re.compile(r"[+-]?[0-9]+")


class FlagError(ValueError):
    """A command-line flag is unknown or has a bad value."""


@dataclass(frozen=True)
class AppConfig:
    name: str = ""
    env: str = ""


@dataclass(frozen=True)
class DBConfig:
    connection: str = ""
    host: str = ""
    port: str = ""
    user: str = ""
    password: str = ""
    name: str = ""


@dataclass(frozen=True)
class Container:
    app: AppConfig = field(default_factory=AppConfig)
    db: DBConfig = field(default_factory=DBConfig)


@dataclass(frozen=True)
class Flags:
    """Parsed command line; ``show_help``/``show_endpoints`` ask the caller to print and stop."""

    port: int = DEFAULT_PORT
    storage_path: str = DEFAULT_STORAGE_PATH
    show_help: bool = False
    show_endpoints: bool = False


def load_config(environ: Mapping[str, str] | None = None) -> Container:
    """Read application and database settings from the environment."""
    env = os.environ if environ is None else environ
    app = AppConfig(name=env.get("APP_NAME", ""), env=env.get("APP_ENV", ""))
    db = DBConfig(
        connection=env.get("DB_CONNECTION", ""),
        host=env.get("DB_HOST", ""),
        port=env.get("DB_PORT", ""),
        user=env.get("DB_USER", ""),
        password=env.get("DB_PASSWORD", ""),
        name=env.get("DB_NAME", ""),
    )
    return Container(app=app, db=db)


def _parse_port(value: str) -> int:
    if not _INTEGER.fullmatch(value):
        raise FlagError(f"error while parsing the port: invalid syntax {value!r}")
    port = int(value)
    if not MIN_PORT <= port <= MAX_PORT:
        raise FlagError(
            f"incorrect range port, port must me between {MIN_PORT} and {MAX_PORT}"
        )
    return port


def parse_flags(args: Iterable[str]) -> Flags:
    """Parse flags given as name/value pairs.

    ``--help`` anywhere wins over everything else; ``--endpoints`` stops
    parsing where it is met.
    """
    args = list(args)
    if "--help" in args:
        return Flags(show_help=True)

    port = DEFAULT_PORT
    items = iter(args)
    for name in items:
        value = next(items, "")
        key = name.removeprefix("--")
        if key == "port":
            port = _parse_port(value)
        elif key == "endpoints":
            return Flags(port=port, show_endpoints=True)
        else:
            raise FlagError(f"unknown flag: {name}")
    return Flags(port=port)


_OPTIONS = (
    ("--help", "Show this screen."),
    ("--port N", "Port number."),
    ("--endpoints", "Show the api endpoints."),
)


def help_text() -> str:
    """Usage screen."""
    width = max(len(flag) for flag, _ in _OPTIONS)
    lines = [
        PROGRAM,
        "",
        "Usage:",
        f"  {PROGRAM} [--port <N>] [--dir <S>]",
        f"  {PROGRAM} --help",
        "",
        "Options:",
        *(f"  {flag.ljust(width)}  {text}" for flag, text in _OPTIONS),
    ]
    return "\n".join(lines) + "\n"


@dataclass(frozen=True)
class _Param:
    name: str
    required: bool
    text: str


@dataclass(frozen=True)
class _Endpoint:
    method: str
    path: str
    summary: str
    query: str = ""
    params: tuple[_Param, ...] = ()


def _opt(name: str, text: str) -> _Param:
    return _Param(name, False, text)


def _req(name: str, text: str) -> _Param:
    return _Param(name, True, text)


_ENDPOINTS: tuple[tuple[str, tuple[_Endpoint, ...]], ...] = (
    (
        "Orders",
        (
            _Endpoint("POST", "/orders", "Create a new order."),
            _Endpoint("GET", "/orders", "Retrieve all orders."),
            _Endpoint("GET", "/orders/open", "Get a list of open orders."),
            _Endpoint("GET", "/orders/{id}", "Retrieve a specific order by ID."),
            _Endpoint("PUT", "/orders/{id}", "Update an existing order."),
            _Endpoint("DELETE", "/orders/{id}", "Delete an order."),
            _Endpoint("POST", "/orders/{id}/close", "Close an order."),
            _Endpoint(
                "GET",
                "/orders/numberOfOrderedItems",
                "Returns a list of ordered items and their quantities"
                " for a specified time period.",
                query="startDate={startDate}&endDate={endDate}",
                params=(
                    _opt("startDate", "Start date in YYYY-MM-DD format."),
                    _opt("endDate", "End date in YYYY-MM-DD format."),
                ),
            ),
        ),
    ),
    (
        "Menu Items",
        (
            _Endpoint("POST", "/menu", "Add a new menu item."),
            _Endpoint("GET", "/menu", "Retrieve all menu items."),
            _Endpoint("GET", "/menu/{id}", "Retrieve a specific menu item."),
            _Endpoint("PUT", "/menu/{id}", "Update a menu item."),
            _Endpoint("DELETE", "/menu/{id}", "Delete a menu item."),
        ),
    ),
    (
        "Inventory",
        (
            _Endpoint("POST", "/inventory", "Add a new inventory item."),
            _Endpoint("GET", "/inventory", "Retrieve all inventory items."),
            _Endpoint("GET", "/inventory/{id}", "Retrieve a specific inventory item."),
            _Endpoint("PUT", "/inventory/{id}", "Update an inventory item."),
            _Endpoint("DELETE", "/inventory/{id}", "Delete an inventory item."),
            _Endpoint(
                "GET",
                "/inventory/getLeftOvers",
                "Returns the inventory leftovers in the coffee shop,"
                " including sorting and pagination options.",
                query="sortBy={value}&page={page}&pageSize={pageSize}",
                params=(
                    _opt("sortBy", 'Sort method, e.g., "price" or "quantity".'),
                    _opt("page", "Page number, starting from 1."),
                    _opt("pageSize", "Number of items per page (default: 10)."),
                ),
            ),
        ),
    ),
    (
        "Aggregations",
        (
            _Endpoint("GET", "/reports/total-sales", "Get the total sales amount."),
            _Endpoint(
                "GET", "/reports/popular-items", "Get a list of popular menu items."
            ),
            _Endpoint(
                "GET",
                "/reports/search",
                "Search through orders, menu items, and customers"
                " with partial matching and ranking.",
                query="q={query}&filter={orders|menu|all}"
                "&minPrice={minPrice}&maxPrice={maxPrice}",
                params=(
                    _req("q", "Search query string."),
                    _opt("filter", '"orders", "menu", or "all" (default).'),
                    _opt("minPrice", "Minimum price filter."),
                    _opt("maxPrice", "Maximum price filter."),
                ),
            ),
            _Endpoint(
                "GET",
                "/reports/orderedItemsByPeriod",
                "Returns the number of orders for the specified period.",
                query="period={day|month}&month={month}&year={year}",
                params=(
                    _req("period", '"day" (group by day) or "month" (group by month).'),
                    _opt(
                        "month",
                        'Month name (e.g., "October"). Required if period=day.',
                    ),
                    _opt("year", "Year. Required if period=month."),
                ),
            ),
        ),
    ),
)

_INDENT = " " * 10


def _endpoint_lines(endpoint: _Endpoint, last: bool) -> Iterable[str]:
    branch = "└─" if last else "├─"
    rail = " " if last else "│"
    yield f"  {branch} {endpoint.method.ljust(8)}{endpoint.path}"
    if endpoint.query:
        yield f"  {rail}{_INDENT}?{endpoint.query}"
    yield f"  {rail}{_INDENT}→ {endpoint.summary}"
    if endpoint.params:
        width = max(len(param.name) for param in endpoint.params)
        yield f"  {rail}"
        yield f"  {rail}{_INDENT}Parameters:"
        for param in endpoint.params:
            kind = "required" if param.required else "optional"
            yield f"  {rail}{_INDENT}  - {param.name.ljust(width)} ({kind}): {param.text}"


def endpoints_text() -> str:
    """Listing printed for ``--endpoints``."""
    lines = ["", "=" * 58, ""]
    for title, endpoints in _ENDPOINTS:
        lines.append(f"▶ {title}")
        for position, endpoint in enumerate(endpoints, start=1):
            lines.extend(_endpoint_lines(endpoint, position == len(endpoints)))
        lines.append("")
    lines.append("=" * 42)
    return "\n".join(line.rstrip() for line in lines)