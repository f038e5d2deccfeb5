"""Schedule repository - monitored targets and their status.

Manifesto:
    Schedule persistence is a pure data operation that belongs in a
    repository, not in the dispatch loop.  Separating it enables testing
    with in-memory connections and keeps the service focused on
    orchestration.

Tags:
    uptimer, scheduling, repository, CRUD, status

Doc-Types:
    api-reference, architecture-diagram


┌──────────────────────────────────────────────────────────────────────────────┐
│  SCHEDULE REPOSITORY                                                          │
│                                                                               │
│  Responsibility: Schedule persistence + status writes                        │
│                                                                               │
│  ┌────────────────────────────────────────────────────────────────────┐      │
│  │                      ScheduleRepository                            │      │
│  │                                                                    │      │
│  │   CRUD Operations:                                                 │      │
│  │   ├── create(spec) → Schedule                                      │      │
│  │   ├── get(id) → Schedule | None                                   │      │
│  │   ├── list_enabled() / list_all() → list[Schedule]                │      │
│  │   ├── count_enabled() → int                                       │      │
│  │   └── set_enabled(id, enabled) → bool                             │      │
│  │                                                                    │      │
│  │   Status Operations:                                               │      │
│  │   └── set_status(id, is_up, down_reason, touch_last_down, now)    │      │
│  └────────────────────────────────────────────────────────────────────┘      │
│                                                                               │
│  Storage: ``schedules`` table (01_monitoring.sql)                             │
│                                                                               │
│  The core never deletes a schedule. Rows are created by the CLI and           │
│  mutated by the status updater.                                               │
└──────────────────────────────────────────────────────────────────────────────┘
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from uptimer.core.dialect import Dialect, SQLiteDialect
from uptimer.core.models.monitoring import CheckMethod, Schedule
from uptimer.core.protocols import Connection
from uptimer.core.timestamps import from_iso8601, to_iso8601, utc_now

_COLUMNS = [
    "id",
    "name",
    "cron",
    "enabled",
    "target",
    "method",
    "is_up",
    "last_down",
    "down_reason",
    "created_at",
]

_SELECT = f"SELECT {', '.join(_COLUMNS)} FROM schedules"


# ---------------------------------------------------------------------------
# Create DTO
# ---------------------------------------------------------------------------


@dataclass
class ScheduleCreate:
    """DTO for creating a new schedule."""

    name: str
    target: str
    cron: str
    method: CheckMethod = CheckMethod.GET
    enabled: bool = True


# ---------------------------------------------------------------------------
# Repository Implementation
# ---------------------------------------------------------------------------


class ScheduleRepository:
    """Repository for monitored targets.

    Every method raises ``RepositoryUnavailable`` (from the connection
    adapter) when the store cannot be reached.

    Example:
        >>> repo = ScheduleRepository(conn)
        >>> schedule = repo.create(ScheduleCreate(
        ...     name="homepage",
        ...     target="https://example.com",
        ...     cron="0 */5 * * * *",
        ... ))
        >>> repo.set_status(schedule.id, False, "503 Service Unavailable",
        ...                 touch_last_down=True)
    """

    def __init__(self, conn: Connection, dialect: Dialect | None = None) -> None:
        """Initialize repository with database connection.

        Args:
            conn: Database connection satisfying the Connection protocol
            dialect: SQL dialect for portable queries. Defaults to SQLiteDialect.
        """
        self.conn = conn
        self.dialect: Dialect = dialect or SQLiteDialect()

    def _ph(self, count: int) -> str:
        """Generate placeholder string for this dialect."""
        return self.dialect.placeholders(count)

    # === CRUD Operations ===

    def create(self, spec: ScheduleCreate) -> Schedule:
        """Create a new schedule. New targets start out up.

        Returns:
            Created Schedule with generated ID
        """
        cursor = self.conn.execute(
            f"""
            INSERT INTO schedules (
                name, cron, enabled, target, method, is_up, created_at
            ) VALUES ({self._ph(7)})
            """,
            (
                spec.name,
                spec.cron,
                1 if spec.enabled else 0,
                spec.target,
                CheckMethod(spec.method).value,
                1,
                to_iso8601(utc_now()),
            ),
        )
        schedule_id = cursor.lastrowid
        self.conn.commit()

        return self.get(schedule_id)  # type: ignore[return-value]

    def get(self, schedule_id: int) -> Schedule | None:
        """Get schedule by ID, or None if it does not exist."""
        cursor = self.conn.execute(
            f"{_SELECT} WHERE id = {self._ph(1)}",
            (schedule_id,),
        )
        row = cursor.fetchone()
        if not row:
            return None
        return self._row_to_schedule(row)

    def list_enabled(self) -> list[Schedule]:
        """List all enabled schedules, ordered by id."""
        cursor = self.conn.execute(f"{_SELECT} WHERE enabled = 1 ORDER BY id")
        return [self._row_to_schedule(row) for row in cursor.fetchall()]

    def list_all(self) -> list[Schedule]:
        """List all schedules (enabled and disabled), ordered by id."""
        cursor = self.conn.execute(f"{_SELECT} ORDER BY id")
        return [self._row_to_schedule(row) for row in cursor.fetchall()]

    def count_enabled(self) -> int:
        """Count enabled schedules."""
        cursor = self.conn.execute("SELECT COUNT(*) FROM schedules WHERE enabled = 1")
        return cursor.fetchone()[0]

    def set_enabled(self, schedule_id: int, enabled: bool) -> bool:
        """Enable or disable a schedule.

        Disabling also deletes the schedule's pending jobs in the same
        transaction, so a disabled schedule never has a job waiting.

        Returns:
            True if the schedule exists, False otherwise
        """
        cursor = self.conn.execute(
            f"UPDATE schedules SET enabled = {self._ph(1)} WHERE id = {self._ph(1)}",
            (1 if enabled else 0, schedule_id),
        )
        found = cursor.rowcount > 0
        if found and not enabled:
            self.conn.execute(
                f"DELETE FROM jobs WHERE linked_id = {self._ph(1)}",
                (schedule_id,),
            )
        self.conn.commit()
        return found

    # === Status Operations ===

    def set_status(
        self,
        schedule_id: int,
        is_up: bool,
        down_reason: str | None,
        touch_last_down: bool,
        now: datetime | None = None,
    ) -> None:
        """Persist a schedule's status.

        Args:
            schedule_id: Schedule to update
            is_up: New up/down flag
            down_reason: Stored verbatim; ``None`` clears it
            touch_last_down: Also set ``last_down`` to ``now``
            now: Timestamp for ``last_down`` (defaults to current UTC time)
        """
        if touch_last_down:
            self.conn.execute(
                f"""
                UPDATE schedules
                SET is_up = {self._ph(1)}, down_reason = {self._ph(1)}, last_down = {self._ph(1)}
                WHERE id = {self._ph(1)}
                """,
                (1 if is_up else 0, down_reason, to_iso8601(now or utc_now()), schedule_id),
            )
        else:
            self.conn.execute(
                f"""
                UPDATE schedules
                SET is_up = {self._ph(1)}, down_reason = {self._ph(1)}
                WHERE id = {self._ph(1)}
                """,
                (1 if is_up else 0, down_reason, schedule_id),
            )
        self.conn.commit()

    # === Private Helpers ===

    def _row_to_schedule(self, row: tuple) -> Schedule:
        """Convert database row to Schedule model."""
        data = dict(zip(_COLUMNS, row, strict=True))
        return Schedule(
            id=data["id"],
            name=data["name"],
            cron=data["cron"],
            target=data["target"],
            enabled=bool(data["enabled"]),
            method=CheckMethod(data["method"]),
            is_up=bool(data["is_up"]),
            last_down=from_iso8601(data["last_down"]),
            down_reason=data["down_reason"],
            created_at=from_iso8601(data["created_at"]),
        )


__all__ = ["ScheduleCreate", "ScheduleRepository"]
