"""
Root Typer application for the uptimer CLI.
"""

from __future__ import annotations

import typer
from typer import Typer

from uptimer import __version__

app = Typer(
    name="uptimer",
    help="uptimer - cron-driven uptime monitoring.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# ── Version callback ─────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"uptimer {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log at DEBUG level."),
) -> None:
    """uptimer CLI - manage monitored targets, inspect jobs, run the scheduler."""
    from uptimer.core.logging import configure_logging

    # One-shot commands stay quiet; `run` reconfigures from settings.
    configure_logging(level="DEBUG" if verbose else "WARNING", cache_logger=False)


# ── Sub-command registration ─────────────────────────────────────────────

from uptimer.cli.db import app as db_app  # noqa: E402
from uptimer.cli.jobs import app as jobs_app  # noqa: E402
from uptimer.cli.run import health as health_cmd  # noqa: E402
from uptimer.cli.run import run as run_cmd  # noqa: E402
from uptimer.cli.schedule import app as sched_app  # noqa: E402

app.add_typer(db_app, name="db", help="Database operations.")
app.add_typer(sched_app, name="schedule", help="Monitored target management.")
app.add_typer(jobs_app, name="jobs", help="Pending job queue.")
app.command("run")(run_cmd)
app.command("health")(health_cmd)


if __name__ == "__main__":
    app()
