"""
Daily trigger — computes the next wall-clock occurrence of HH:MM in a
fixed timezone.

No cron expressions: the scheduler arms a one-shot sleep for the next
occurrence and re-arms after each firing, which keeps replace and cancel
semantics explicit.

Usage:
    trigger = DailyTrigger.from_schedule("08:00", ZoneInfo("Asia/Tehran"))
    fire_at = trigger.next_fire_time(now=datetime.now(timezone.utc))
    delay = trigger.seconds_until(fire_at, now=datetime.now(timezone.utc))
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, time, timedelta, timezone, tzinfo

from blackout.core.errors import ValidationError

SCHEDULE_TIME_RE = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")


def is_valid_schedule_time(value: str) -> bool:
    """True for zero-padded 24h ``HH:MM`` strings ("08:00", "23:59")."""
    return bool(SCHEDULE_TIME_RE.match(value))


def parse_schedule_time(value: str) -> tuple[int, int]:
    """
    Split ``HH:MM`` into (hour, minute).

    Raises ValidationError for anything that is not zero-padded 24h time;
    "8:00", "25:00" and "08:60" are all rejected.
    """
    match = SCHEDULE_TIME_RE.match(value)
    if not match:
        raise ValidationError(f"Invalid schedule time: {value!r}", value=value)
    return int(match.group(1)), int(match.group(2))


@dataclass(frozen=True)
class DailyTrigger:
    """Fires once per calendar day at hour:minute in ``tz``."""

    hour: int
    minute: int
    tz: tzinfo

    @classmethod
    def from_schedule(cls, schedule_time: str, tz: tzinfo) -> "DailyTrigger":
        hour, minute = parse_schedule_time(schedule_time)
        return cls(hour=hour, minute=minute, tz=tz)

    def next_fire_time(self, now: datetime) -> datetime:
        """
        Return the first occurrence strictly after ``now``.

        ``now`` must be timezone-aware. The result is expressed in ``tz``.
        """
        local_now = now.astimezone(self.tz)
        candidate = datetime.combine(
            local_now.date(), time(self.hour, self.minute), tzinfo=self.tz
        )
        if _utc(candidate) <= _utc(now):
            candidate = datetime.combine(
                local_now.date() + timedelta(days=1),
                time(self.hour, self.minute),
                tzinfo=self.tz,
            )
        return candidate

    @staticmethod
    def seconds_until(fire_at: datetime, now: datetime) -> float:
        """Real elapsed seconds from ``now`` to ``fire_at`` (never negative)."""
        return max(0.0, (_utc(fire_at) - _utc(now)).total_seconds())

    @property
    def description(self) -> str:
        """Human-readable description, e.g. 'daily at 08:00 (Asia/Tehran)'."""
        return f"daily at {self.hour:02d}:{self.minute:02d} ({self.tz})"


def _utc(dt: datetime) -> datetime:
    # Same-tzinfo subtraction ignores offset changes, so compare in UTC
    return dt.astimezone(timezone.utc)
