"""
CLI: ``uptimer run`` and ``uptimer health`` - scheduler process commands.
"""

from __future__ import annotations

import signal
import threading

import typer

from uptimer.cli.utils import console, fail, get_connection, load_settings, output_dict
from uptimer.core.errors import UptimerError


def run(
    database: str | None = typer.Option(None, "--database", "-d"),
    interval: float | None = typer.Option(
        None, "--interval", "-i", min=0.1, help="Seconds between dispatch cycles"
    ),
) -> None:
    """Reconcile jobs and run the scheduler until interrupted.

    Example::

        uptimer run --database sqlite:///uptimer.db --interval 10
    """
    from uptimer.core.logging import configure_logging
    from uptimer.core.scheduling import initialize_scheduler

    settings = load_settings(database)
    if interval is not None:
        settings = settings.model_copy(update={"tick_interval_seconds": interval})
    configure_logging(level=settings.log_level, json_format=settings.log_json)

    conn, info = get_connection(database)
    try:
        service = initialize_scheduler(conn, settings)
    except UptimerError as e:
        conn.close()
        fail(e)

    console.print(
        f"[bold green]uptimer running[/bold green] "
        f"(db={info.resolved_path or info.url}, interval={service.interval}s)"
    )

    stop = threading.Event()

    def _handle_signal(signum: int, _frame: object) -> None:
        stop.set()

    signal.signal(signal.SIGINT, _handle_signal)
    signal.signal(signal.SIGTERM, _handle_signal)

    try:
        while not stop.wait(1.0):
            if not service.backend.health().get("healthy", False):
                console.print("[red]Scheduler loop exited unexpectedly[/red]")
                raise typer.Exit(code=1)
    finally:
        service.stop()
        conn.close()
        console.print("[yellow]uptimer stopped[/yellow]")


def health(
    database: str | None = typer.Option(None, "--database", "-d"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Reconcile once and print the scheduler health report (loop not started)."""
    from uptimer.core.scheduling import check_scheduler_health, create_scheduler

    settings = load_settings(database)
    conn, _ = get_connection(database)
    try:
        service = create_scheduler(conn, settings)
        report = service.refresh()
        health_report = check_scheduler_health(service, require_running=False)
    except UptimerError as e:
        fail(e)
    finally:
        conn.close()

    payload = health_report.to_dict()
    payload["reconcile"] = report.to_dict()
    output_dict(payload, as_json=json_out, title="Scheduler Health")
    if not health_report.healthy:
        raise typer.Exit(code=1)
