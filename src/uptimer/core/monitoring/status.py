"""Status updater - persist check outcomes with debounced writes.

A write happens only when the stored state would observably change:

=================  ==================  ================================  ================
Stored             Observed            Write                             Result
=================  ==================  ================================  ================
up                 up                  none                              NONE
up                 down (R)            is_up=0, reason=R, last_down=now  WENT_DOWN
down (R1)          down (R1)           none                              NONE
down (R1)          down (R2)           reason=R2                         REASON_CHANGED
down (R1)          up                  is_up=1, reason=NULL              WENT_UP
=================  ==================  ================================  ================

``last_down`` records when the current or most recent outage began, so a
reason change mid-outage leaves it alone and so does recovery.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING

from uptimer.core.errors import ScheduleMissingForJob, UptimerError
from uptimer.core.logging import get_logger
from uptimer.core.models.monitoring import Schedule
from uptimer.core.timestamps import utc_now

if TYPE_CHECKING:
    from uptimer.core.scheduling.lock_manager import ScheduleLockPool
    from uptimer.core.scheduling.repository import ScheduleRepository

logger = get_logger(__name__)

UNKNOWN_REASON = "Unknown"


class StatusChange(str, Enum):
    """What ``StatusUpdater.apply`` did."""

    NONE = "none"
    WENT_DOWN = "went_down"
    WENT_UP = "went_up"
    REASON_CHANGED = "reason_changed"
    FAILED = "failed"


def decide(
    stored_is_up: bool,
    stored_reason: str | None,
    is_up: bool,
    reason: str | None,
) -> StatusChange:
    """Pure debounce decision against the stored state."""
    if is_up != stored_is_up:
        return StatusChange.WENT_UP if is_up else StatusChange.WENT_DOWN
    if not is_up and (reason or UNKNOWN_REASON) != stored_reason:
        return StatusChange.REASON_CHANGED
    return StatusChange.NONE


class StatusUpdater:
    """Apply check outcomes to the ``schedules`` table.

    Work for one schedule id is serialized through the lock pool and the
    row is re-read inside the lock, so overlapping cycles decide against
    what is actually stored.
    """

    def __init__(self, schedules: ScheduleRepository, locks: ScheduleLockPool) -> None:
        self._schedules = schedules
        self._locks = locks

    async def apply(
        self,
        schedule: Schedule,
        is_up: bool,
        reason: str | None,
        now: datetime | None = None,
    ) -> StatusChange:
        """Persist the outcome of one check. Never raises for storage failures."""
        async with self._locks.hold(schedule.id):
            try:
                return self._apply_locked(schedule.id, is_up, reason, now)
            except UptimerError as e:
                logger.error("status_update_failed", schedule_id=schedule.id, **e.to_dict())
                return StatusChange.FAILED

    def _apply_locked(
        self,
        schedule_id: int,
        is_up: bool,
        reason: str | None,
        now: datetime | None,
    ) -> StatusChange:
        current = self._schedules.get(schedule_id)
        if current is None:
            error = ScheduleMissingForJob(
                "Schedule disappeared before its status could be written"
            ).with_context(schedule_id=schedule_id)
            logger.warning("status_schedule_missing", **error.to_dict())
            return StatusChange.NONE

        change = decide(current.is_up, current.down_reason, is_up, reason)

        if change is StatusChange.WENT_DOWN:
            self._schedules.set_status(
                schedule_id,
                False,
                reason or UNKNOWN_REASON,
                touch_last_down=True,
                now=now or utc_now(),
            )
            logger.warning("target_down", schedule_id=schedule_id, reason=reason or UNKNOWN_REASON)
        elif change is StatusChange.WENT_UP:
            self._schedules.set_status(schedule_id, True, None, touch_last_down=False)
            logger.info("target_up", schedule_id=schedule_id)
        elif change is StatusChange.REASON_CHANGED:
            self._schedules.set_status(
                schedule_id,
                False,
                reason or UNKNOWN_REASON,
                touch_last_down=False,
            )
            logger.info(
                "target_down_reason_changed",
                schedule_id=schedule_id,
                previous=current.down_reason,
                reason=reason or UNKNOWN_REASON,
            )

        return change


__all__ = ["StatusChange", "StatusUpdater", "UNKNOWN_REASON", "decide"]
