"""
CLI: ``uptimer db`` - database management commands.
"""

from __future__ import annotations

import typer

from uptimer.cli.utils import console, get_connection, output_dict

app = typer.Typer(no_args_is_help=True)


@app.command()
def init(
    database: str | None = typer.Option(None, "--database", "-d", help="Database URL or path"),
    json_out: bool = typer.Option(False, "--json", help="JSON output"),
) -> None:
    """Initialise database schema (create tables)."""
    from uptimer.core.schema_loader import get_table_list

    conn, info = get_connection(database)
    try:
        tables = get_table_list(conn)
    finally:
        conn.close()

    output_dict(
        {
            "backend": info.backend,
            "path": info.resolved_path or info.url,
            "tables": ", ".join(tables),
        },
        as_json=json_out,
        title="Database Init",
    )
    if not json_out:
        console.print("[green]Schema is up to date.[/green]")
