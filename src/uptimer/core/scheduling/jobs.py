"""Job repository - the durable queue of pending due-jobs.

A job row says "run this kind of work at ``run_at``".  The dispatch loop
claims a job by deleting its row; whichever caller removes the row owns
the job, so a job is processed at most once.

Tags:
    uptimer, scheduling, repository, queue, claim
"""

from __future__ import annotations

from datetime import datetime

from uptimer.core.dialect import Dialect, SQLiteDialect
from uptimer.core.models.monitoring import Job, JobType
from uptimer.core.protocols import Connection
from uptimer.core.timestamps import from_iso8601, to_iso8601

_COLUMNS = ["id", "type", "linked_id", "run_at"]

_SELECT = f"SELECT {', '.join(_COLUMNS)} FROM jobs"


class JobRepository:
    """Repository for pending jobs (``jobs`` table).

    Example:
        >>> jobs = JobRepository(conn)
        >>> job_id = jobs.create(JobType.MONITORING, run_at, linked_id=schedule.id)
        >>> for job in jobs.due(utc_now()):
        ...     if jobs.delete(job.id):
        ...         process(job)
    """

    def __init__(self, conn: Connection, dialect: Dialect | None = None) -> None:
        self.conn = conn
        self.dialect: Dialect = dialect or SQLiteDialect()

    def _ph(self, count: int) -> str:
        """Generate placeholder string for this dialect."""
        return self.dialect.placeholders(count)

    def due(self, now: datetime) -> list[Job]:
        """List jobs whose ``run_at`` is at or before ``now``, oldest first."""
        cursor = self.conn.execute(
            f"{_SELECT} WHERE run_at <= {self._ph(1)} ORDER BY run_at, id",
            (to_iso8601(now),),
        )
        return [self._row_to_job(row) for row in cursor.fetchall()]

    def get_by_linked_id(self, schedule_id: int) -> Job | None:
        """Return the pending job for a schedule, or None."""
        cursor = self.conn.execute(
            f"{_SELECT} WHERE linked_id = {self._ph(1)} ORDER BY run_at, id LIMIT 1",
            (schedule_id,),
        )
        row = cursor.fetchone()
        if not row:
            return None
        return self._row_to_job(row)

    def create(
        self,
        job_type: JobType,
        run_at: datetime,
        linked_id: int | None = None,
    ) -> int:
        """Insert a pending job and return its id.

        Raises:
            ValueError: A MONITORING job without ``linked_id``.
        """
        job_type = JobType(job_type)
        if job_type is JobType.MONITORING and linked_id is None:
            raise ValueError("monitoring jobs require a linked schedule id")
        cursor = self.conn.execute(
            f"INSERT INTO jobs (type, linked_id, run_at) VALUES ({self._ph(3)})",
            (job_type.value, linked_id, to_iso8601(run_at)),
        )
        job_id = cursor.lastrowid
        self.conn.commit()
        return job_id

    def delete(self, job_id: int) -> bool:
        """Delete (claim) a job.

        Returns:
            True if this call removed the row, False if it was already gone
        """
        cursor = self.conn.execute(
            f"DELETE FROM jobs WHERE id = {self._ph(1)}",
            (job_id,),
        )
        self.conn.commit()
        return cursor.rowcount > 0

    def list_all(self) -> list[Job]:
        """List every pending job, soonest first."""
        cursor = self.conn.execute(f"{_SELECT} ORDER BY run_at, id")
        return [self._row_to_job(row) for row in cursor.fetchall()]

    def count(self) -> int:
        """Count pending jobs."""
        cursor = self.conn.execute("SELECT COUNT(*) FROM jobs")
        return cursor.fetchone()[0]

    def _row_to_job(self, row: tuple) -> Job:
        """Convert database row to Job model.

        Unknown ``type`` values are kept as the raw string so the dispatch
        loop can log and drop them.
        """
        data = dict(zip(_COLUMNS, row, strict=True))
        try:
            job_type = JobType(data["type"])
        except ValueError:
            job_type = data["type"]
        return Job(
            id=data["id"],
            job_type=job_type,
            linked_id=data["linked_id"],
            run_at=from_iso8601(data["run_at"]),
        )


__all__ = ["JobRepository"]
