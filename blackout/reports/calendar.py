"""
Calendar helpers for the report window.

The upstream and its users work in the Jalali (Solar Hijri) calendar, so
dates shown to subscribers and sent to the endpoint are rendered with
jdatetime. "Today" is always taken in the reference timezone, not in the
server's local zone.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, tzinfo

import jdatetime

JALALI_FORMAT = "%Y/%m/%d"


def local_today(tz: tzinfo, now: datetime | None = None) -> date:
    """Calendar date in ``tz`` at ``now`` (aware) or at the current instant."""
    current = now.astimezone(tz) if now is not None else datetime.now(tz)
    return current.date()


def report_window(tz: tzinfo, now: datetime | None = None) -> tuple[date, date]:
    """The (today, tomorrow) pair every report request covers."""
    today = local_today(tz, now)
    return today, today + timedelta(days=1)


def jalali(d: date) -> str:
    """Render a Gregorian date as a zero-padded Jalali ``YYYY/MM/DD`` string."""
    return jdatetime.date.fromgregorian(date=d).strftime(JALALI_FORMAT)
