"""
CLI utility helpers - output formatting and connection management.
"""

from __future__ import annotations

import json
from dataclasses import asdict
from datetime import datetime
from enum import Enum
from typing import Any, NoReturn

import typer
from rich.console import Console
from rich.table import Table

from uptimer.core.connection import ConnectionInfo, create_connection
from uptimer.core.errors import UptimerError
from uptimer.core.settings import UptimerSettings, get_settings
from uptimer.core.sqlite_conn import SqliteConnection

console = Console()
err_console = Console(stderr=True)


# ── Settings / connection helpers ────────────────────────────────────────


def load_settings(database: str | None = None) -> UptimerSettings:
    """Process settings, with ``--database`` taking precedence."""
    try:
        settings = get_settings()
    except ValueError as e:
        err_console.print(f"[bold red]Error[/bold red] (CONFIG): {e}")
        raise typer.Exit(code=1) from e
    if database:
        settings = settings.model_copy(update={"database_url": database})
    return settings


def get_connection(database: str | None = None) -> tuple[SqliteConnection, ConnectionInfo]:
    """Open the database and make sure the schema exists."""
    settings = load_settings(database)
    try:
        return create_connection(settings.database_url, init_schema=True)
    except UptimerError as e:
        fail(e)


def fail(error: UptimerError) -> NoReturn:
    """Print an uptimer error and exit non-zero."""
    err_console.print(f"[bold red]Error[/bold red] ({error.category.value}): {error.message}")
    raise typer.Exit(code=1)


# ── Output helpers ───────────────────────────────────────────────────────


def _to_dict(obj: Any) -> dict[str, Any]:
    """Convert dataclass / pydantic model / dict to plain dict."""
    if hasattr(obj, "to_dict"):
        return obj.to_dict()
    if hasattr(obj, "model_dump"):
        return obj.model_dump()
    if hasattr(obj, "__dataclass_fields__"):
        return asdict(obj)
    if isinstance(obj, dict):
        return obj
    return {"value": str(obj)}


def _fmt(value: Any) -> str:
    if value is None:
        return "-"
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)


def output_items(items: list, *, as_json: bool = False, title: str = "") -> None:
    """Render a list of dataclasses/dicts as JSON or a Rich table."""
    if as_json:
        payload = [_to_dict(item) for item in items]
        console.print_json(json.dumps(payload, default=_fmt))
        return

    if not items:
        console.print("[dim]No items.[/dim]")
        return

    first = _to_dict(items[0])
    table = Table(title=title or None, show_lines=False, pad_edge=False)
    for col in first:
        table.add_column(col, overflow="fold")
    for item in items:
        table.add_row(*(_fmt(v) for v in _to_dict(item).values()))
    console.print(table)


def output_dict(obj: Any, *, as_json: bool = False, title: str = "") -> None:
    """Render a single object as JSON or key-value pairs."""
    data = _to_dict(obj)
    if as_json:
        console.print_json(json.dumps(data, default=_fmt))
        return
    if title:
        console.print(f"[bold]{title}[/bold]")
    for k, v in data.items():
        console.print(f"  [cyan]{k}[/cyan]: {_fmt(v)}")
