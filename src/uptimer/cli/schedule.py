"""
CLI: ``uptimer schedule`` - monitored target commands.
"""

from __future__ import annotations

import typer

from uptimer.cli.utils import console, fail, get_connection, output_dict, output_items
from uptimer.core.errors import UptimerError
from uptimer.core.models.monitoring import CheckMethod

app = typer.Typer(no_args_is_help=True)


@app.command("add")
def add_schedule(
    name: str = typer.Argument(..., help="Display name"),
    target: str = typer.Argument(..., help="URL to check"),
    cron: str = typer.Option(
        "0 */5 * * * *",
        "--cron",
        "-c",
        help="Cron expression (5 fields, or 6/7 with seconds first)",
    ),
    method: CheckMethod = typer.Option(CheckMethod.GET, "--method", "-m", case_sensitive=False),
    enabled: bool = typer.Option(True, "--enabled/--disabled"),
    database: str | None = typer.Option(None, "--database", "-d"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Add a monitored target; an enabled one gets its first job right away."""
    from uptimer.core.scheduling import (
        JobRepository,
        ScheduleCreate,
        ScheduleRepository,
        reconcile,
        validate_cron,
    )

    try:
        validate_cron(cron)
    except UptimerError as e:
        fail(e)

    conn, _ = get_connection(database)
    try:
        schedules = ScheduleRepository(conn)
        schedule = schedules.create(
            ScheduleCreate(name=name, target=target, cron=cron, method=method, enabled=enabled)
        )
        if schedule.enabled:
            reconcile(schedules, JobRepository(conn))
    except UptimerError as e:
        fail(e)
    finally:
        conn.close()

    output_dict(schedule, as_json=json_out, title="Schedule Created")


@app.command("list")
def list_schedules(
    database: str | None = typer.Option(None, "--database", "-d"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """List monitored targets and their current status."""
    from uptimer.core.scheduling import ScheduleRepository

    conn, _ = get_connection(database)
    try:
        schedules = ScheduleRepository(conn).list_all()
    except UptimerError as e:
        fail(e)
    finally:
        conn.close()

    output_items(schedules, as_json=json_out, title="Schedules")


def _set_enabled(schedule_id: int, enabled: bool, database: str | None) -> None:
    """Flip ``enabled`` and bring the schedule's pending job in line.

    Disabling deletes the pending job; enabling schedules the next one.
    """
    from uptimer.core.scheduling import JobRepository, ScheduleRepository, reconcile

    conn, _ = get_connection(database)
    try:
        schedules = ScheduleRepository(conn)
        found = schedules.set_enabled(schedule_id, enabled)
        if found and enabled:
            reconcile(schedules, JobRepository(conn))
    except UptimerError as e:
        fail(e)
    finally:
        conn.close()

    if not found:
        console.print(f"[bold red]Error[/bold red]: schedule {schedule_id} not found")
        raise typer.Exit(code=1)
    state = "enabled" if enabled else "disabled"
    console.print(f"Schedule {schedule_id} {state}.")


@app.command("enable")
def enable_schedule(
    schedule_id: int = typer.Argument(..., help="Schedule ID"),
    database: str | None = typer.Option(None, "--database", "-d"),
) -> None:
    """Enable a schedule and enqueue its next check."""
    _set_enabled(schedule_id, True, database)


@app.command("disable")
def disable_schedule(
    schedule_id: int = typer.Argument(..., help="Schedule ID"),
    database: str | None = typer.Option(None, "--database", "-d"),
) -> None:
    """Disable a schedule and delete its pending job."""
    _set_enabled(schedule_id, False, database)
