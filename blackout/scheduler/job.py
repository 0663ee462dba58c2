"""
ScheduledJob — one live daily timer for one subscriber.

Lives only in memory. The scheduler keeps at most one per subscriber id and
rebuilds the whole table from the store on startup.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import datetime

from blackout.scheduler.triggers import DailyTrigger


@dataclass
class ScheduledJob:
    """An armed daily trigger and the task sleeping towards it."""

    subscriber_id: int
    trigger: DailyTrigger
    task: asyncio.Task | None = None
    next_fire: datetime | None = None   # in the trigger's timezone
    fire_count: int = 0

    @property
    def is_live(self) -> bool:
        return self.task is not None and not self.task.done()

    def cancel(self) -> None:
        if self.task is not None and not self.task.done():
            self.task.cancel()
