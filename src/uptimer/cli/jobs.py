"""
CLI: ``uptimer jobs`` - inspect the pending job queue.
"""

from __future__ import annotations

import typer

from uptimer.cli.utils import fail, get_connection, output_items
from uptimer.core.errors import UptimerError

app = typer.Typer(no_args_is_help=True)


@app.command("list")
def list_jobs(
    database: str | None = typer.Option(None, "--database", "-d"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """List pending jobs, soonest first."""
    from uptimer.core.scheduling import JobRepository

    conn, _ = get_connection(database)
    try:
        jobs = JobRepository(conn).list_all()
    except UptimerError as e:
        fail(e)
    finally:
        conn.close()

    output_items(jobs, as_json=json_out, title="Pending Jobs")
