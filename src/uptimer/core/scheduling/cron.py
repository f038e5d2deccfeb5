"""Cron evaluation - the only module that talks to croniter.

Accepted expression shapes:

- 5 fields: ``minute hour day-of-month month day-of-week``
- 6 fields: ``second minute hour day-of-month month day-of-week``
- 7 fields: the 6-field shape followed by ``year``
- croniter aliases such as ``@hourly`` and ``@daily``

Six and seven field expressions put seconds first, so ``"0 0 * * * *"``
fires at the top of every hour.

Example:
    >>> from datetime import datetime, UTC
    >>> next_run("0 0 * * * *", datetime(2024, 1, 1, 10, 15, tzinfo=UTC))
    datetime.datetime(2024, 1, 1, 11, 0, tzinfo=datetime.timezone.utc)

Tags:
    uptimer, scheduling, cron, croniter
"""

from __future__ import annotations

from datetime import UTC, datetime

from croniter import CroniterBadCronError, CroniterBadDateError, CroniterError, croniter

from uptimer.core.errors import InvalidCronExpression, NoUpcomingOccurrence
from uptimer.core.timestamps import ensure_utc


def _iterator(cron_expression: str, start: datetime) -> croniter:
    try:
        return croniter(
            cron_expression,
            start,
            ret_type=datetime,
            second_at_beginning=True,
        )
    except (CroniterBadCronError, ValueError, KeyError) as e:
        raise InvalidCronExpression(
            f"Invalid cron expression {cron_expression!r}: {e}", cause=e
        ).with_context(cron=cron_expression) from e


def next_run(cron_expression: str, now: datetime) -> datetime:
    """Return the first occurrence of ``cron_expression`` strictly after ``now``.

    ``now`` may be naive (taken as UTC) or aware; the result is always an
    aware UTC datetime.

    Raises:
        InvalidCronExpression: The expression does not parse.
        NoUpcomingOccurrence: The expression can never fire again.
    """
    start = ensure_utc(now)
    itr = _iterator(cron_expression, start)
    try:
        candidate = itr.get_next(datetime)
        while candidate <= start:
            candidate = itr.get_next(datetime)
    except CroniterBadDateError as e:
        raise NoUpcomingOccurrence(
            f"Cron expression {cron_expression!r} has no occurrence after {start.isoformat()}",
            cause=e,
        ).with_context(cron=cron_expression) from e
    except CroniterError as e:
        raise InvalidCronExpression(
            f"Invalid cron expression {cron_expression!r}: {e}", cause=e
        ).with_context(cron=cron_expression) from e
    return candidate.astimezone(UTC)


def validate_cron(cron_expression: str) -> None:
    """Raise ``InvalidCronExpression`` unless ``cron_expression`` parses."""
    if not cron_expression or not cron_expression.strip():
        raise InvalidCronExpression("Cron expression is empty").with_context(
            cron=cron_expression
        )
    if not croniter.is_valid(cron_expression, second_at_beginning=True):
        raise InvalidCronExpression(
            f"Invalid cron expression {cron_expression!r}"
        ).with_context(cron=cron_expression)


__all__ = ["next_run", "validate_cron"]
