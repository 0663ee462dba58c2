"""Shared test fixtures for Blackout."""

from __future__ import annotations

from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

import pytest
import pytest_asyncio

from blackout.bot.actions import Keyboard
from blackout.bot.engine import SchedulingEngine
from blackout.bot.texts import Texts
from blackout.notifications.base import Notifier
from blackout.reports.base import OutageEntry, OutageReport, ReportSource
from blackout.scheduler.jobs import JobScheduler
from blackout.store.memory import InMemorySubscriberStore


class FakeClock:
    """Frozen, settable clock. Always returns an aware datetime."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


class FakeNotifier(Notifier):
    """Records every message instead of delivering it."""

    def __init__(self) -> None:
        self.sent: list[tuple[int, str, Keyboard | None]] = []
        self.fail = False

    @property
    def name(self) -> str:
        return "fake"

    async def send(self, subscriber_id: int, text: str, keyboard: Keyboard | None = None) -> bool:
        self.sent.append((subscriber_id, text, keyboard))
        return not self.fail

    def texts_for(self, subscriber_id: int) -> list[str]:
        return [text for sid, text, _ in self.sent if sid == subscriber_id]

    @property
    def last_keyboard(self) -> Keyboard | None:
        return self.sent[-1][2] if self.sent else None


class FakeReportSource(ReportSource):
    """Returns canned entries, or raises ``error`` when set."""

    def __init__(self) -> None:
        self.entries: tuple[OutageEntry, ...] = ()
        self.error: Exception | None = None
        self.calls: list[tuple[str, str, date, date]] = []

    async def fetch(
        self,
        billing_id: str,
        auth_token: str,
        date_from: date,
        date_to: date,
    ) -> OutageReport:
        self.calls.append((billing_id, auth_token, date_from, date_to))
        if self.error is not None:
            raise self.error
        return OutageReport(date_from=date_from, date_to=date_to, entries=self.entries)


@pytest.fixture
def tz():
    return ZoneInfo("Asia/Tehran")


@pytest.fixture
def clock():
    """06:00 UTC on 2024-03-20, which is 09:30 in Tehran (1 Farvardin 1403)."""
    return FakeClock(datetime(2024, 3, 20, 6, 0, tzinfo=timezone.utc))


@pytest.fixture
def texts():
    return Texts("en")


@pytest.fixture
def store():
    return InMemorySubscriberStore()


@pytest.fixture
def source():
    return FakeReportSource()


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest_asyncio.fixture
async def scheduler(store, source, notifier, texts, tz, clock):
    """A scheduler on the frozen clock; all timers are torn down after the test."""
    sched = JobScheduler(store, source, notifier, texts, tz, clock=clock)
    yield sched
    await sched.shutdown()


@pytest.fixture
def engine(store, scheduler, notifier, texts):
    return SchedulingEngine(store, scheduler, notifier, texts)


@pytest.fixture
def sample_entry():
    return OutageEntry(
        start="10:00",
        end="12:00",
        address="Valiasr St, Tehran",
        reason="Planned maintenance",
    )
