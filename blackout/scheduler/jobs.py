"""
JobScheduler — owns one daily timer per active subscriber.

Design:
- The job table (subscriber id → ScheduledJob) is in-memory only and is
  rebuilt from the store by reconcile() on startup
- install() reads the record, then cancels and re-arms with no suspension
  point in between, so a subscriber never has two live timers
- Each timer is an asyncio task that sleeps towards the next HH:MM in the
  reference timezone, fires, then re-arms for the following day
- A firing runs as its own task (tracked in _in_flight): cancelling or
  replacing the timer never interrupts a fetch that is already underway
- Firings re-read the record, call the ReportSource once and always tell the
  subscriber something: a report or an error line. Nothing is retried and
  a failed fetch never deactivates anyone
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone, tzinfo
from typing import Callable

from blackout.bot.texts import Texts
from blackout.core.errors import FetchError, StorageError, ValidationError
from blackout.notifications.base import Notifier
from blackout.reports.base import ReportSource
from blackout.reports.calendar import report_window
from blackout.reports.format import format_fetch_error, format_report
from blackout.scheduler.job import ScheduledJob
from blackout.scheduler.triggers import DailyTrigger
from blackout.store.base import SubscriberStore
from blackout.store.subscriber import Subscriber

logger = logging.getLogger(__name__)

MAX_SLEEP = 300   # seconds; long waits are chunked so wall-clock jumps are noticed

Clock = Callable[[], datetime]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class JobScheduler:
    """
    Per-subscriber daily report scheduler.

    Usage:
        scheduler = JobScheduler(store, source, notifier, texts, ZoneInfo("Asia/Tehran"))
        await scheduler.reconcile()          # on startup
        await scheduler.install(chat_id)     # after activation / schedule edit
        scheduler.cancel(chat_id)            # after deactivation
        await scheduler.shutdown()
    """

    def __init__(
        self,
        store: SubscriberStore,
        source: ReportSource,
        notifier: Notifier,
        texts: Texts,
        tz: tzinfo,
        clock: Clock | None = None,
    ) -> None:
        self._store = store
        self._source = source
        self._notifier = notifier
        self._texts = texts
        self._tz = tz
        self._clock = clock or _utc_now
        self._jobs: dict[int, ScheduledJob] = {}
        self._in_flight: set[asyncio.Task] = set()   # firings currently executing

    # ── Lifecycle ─────────────────────────────────────────────────────────────

    async def install(self, subscriber_id: int) -> bool:
        """
        Arm (or re-arm) the daily timer for a subscriber.

        Returns False without touching the job table when the record is
        missing, inactive, or lacks credentials.
        """
        sub = await self._store.get(subscriber_id)
        if sub is None or not sub.active or not sub.has_credentials:
            logger.debug(f"Not installing job for {subscriber_id}: not eligible")
            return False
        try:
            trigger = DailyTrigger.from_schedule(sub.schedule_time, self._tz)
        except ValidationError:
            logger.warning(
                f"Subscriber {subscriber_id} has malformed schedule_time {sub.schedule_time!r}"
            )
            return False

        # Cancel and re-arm with no await between the two
        self.cancel(subscriber_id)
        job = ScheduledJob(subscriber_id=subscriber_id, trigger=trigger)
        job.next_fire = trigger.next_fire_time(self._clock())
        job.task = asyncio.create_task(self._run(job), name=f"daily-report:{subscriber_id}")
        self._jobs[subscriber_id] = job
        logger.info(
            f"Scheduled job for {subscriber_id}: {trigger.description}, "
            f"next at {job.next_fire.isoformat()}"
        )
        return True

    def cancel(self, subscriber_id: int) -> bool:
        """Stop and discard the subscriber's timer. Returns True if one existed."""
        job = self._jobs.pop(subscriber_id, None)
        if job is None:
            return False
        job.cancel()
        logger.debug(f"Cancelled job for {subscriber_id}")
        return True

    async def reconcile(self) -> list[int]:
        """
        Rebuild the job table from the store: every persisted active
        subscriber gets a timer. Returns the ids that were installed.
        """
        active_ids = await self._store.list_active()
        logger.info(f"Found {len(active_ids)} active subscribers. Scheduling their jobs...")

        installed: list[int] = []
        for subscriber_id in active_ids:
            try:
                ok = await self.install(subscriber_id)
            except StorageError as e:
                logger.warning(f"Failed to schedule job for {subscriber_id}: {e}")
                continue
            if ok:
                installed.append(subscriber_id)
            else:
                logger.warning(f"Failed to schedule job for subscriber {subscriber_id}")

        logger.info(f"Reconciliation done: {len(installed)}/{len(active_ids)} jobs installed")
        return installed

    async def shutdown(self) -> None:
        """Cancel every timer, then let in-flight firings finish."""
        jobs = list(self._jobs.values())
        self._jobs.clear()
        for job in jobs:
            job.cancel()
        timers = [job.task for job in jobs if job.task is not None]
        if timers:
            await asyncio.gather(*timers, return_exceptions=True)
        if self._in_flight:
            await asyncio.gather(*list(self._in_flight), return_exceptions=True)
        logger.info("JobScheduler stopped")

    # ── Introspection ─────────────────────────────────────────────────────────

    def has_job(self, subscriber_id: int) -> bool:
        job = self._jobs.get(subscriber_id)
        return job is not None and job.is_live

    @property
    def job_ids(self) -> list[int]:
        return sorted(sid for sid, job in self._jobs.items() if job.is_live)

    def get_job(self, subscriber_id: int) -> ScheduledJob | None:
        return self._jobs.get(subscriber_id)

    def next_fire(self, subscriber_id: int) -> datetime | None:
        job = self._jobs.get(subscriber_id)
        return job.next_fire if job else None

    # ── Fetch-and-deliver ─────────────────────────────────────────────────────

    async def deliver_report(self, subscriber_id: int) -> bool:
        """
        On-demand fetch-and-deliver with the subscriber's current credentials,
        independent of any timer. Returns whether the message was delivered.
        """
        sub = await self._store.get(subscriber_id)
        if sub is None or not sub.has_credentials:
            logger.debug(f"No report for {subscriber_id}: credentials not set")
            return False
        return await self._deliver(sub)

    async def _deliver(self, sub: Subscriber) -> bool:
        date_from, date_to = report_window(self._tz, self._clock())
        try:
            report = await self._source.fetch(
                sub.billing_id or "", sub.auth_token or "", date_from, date_to
            )
            text = format_report(report, self._texts)
        except FetchError as e:
            logger.warning(f"Report fetch failed for {sub.id}: {e}")
            text = format_fetch_error(self._texts)
        except Exception as e:
            logger.warning(f"Report source error for {sub.id} (non-fatal): {e}")
            text = format_fetch_error(self._texts)
        return await self._notifier.send(sub.id, text)

    # ── Internal loop ─────────────────────────────────────────────────────────

    async def _run(self, job: ScheduledJob) -> None:
        """Sleep towards job.next_fire, fire, re-arm for the next day. Forever."""
        while True:
            assert job.next_fire is not None
            delay = DailyTrigger.seconds_until(job.next_fire, self._clock())
            if delay > MAX_SLEEP:
                await asyncio.sleep(MAX_SLEEP)
                continue
            await asyncio.sleep(delay)

            if self._jobs.get(job.subscriber_id) is not job:
                return  # replaced or cancelled while waking up
            job.fire_count += 1
            self._spawn_firing(job.subscriber_id)
            job.next_fire = job.trigger.next_fire_time(job.next_fire)
            logger.debug(f"Job for {job.subscriber_id} next at {job.next_fire.isoformat()}")

    def _spawn_firing(self, subscriber_id: int) -> None:
        task = asyncio.create_task(
            self._fire(subscriber_id), name=f"daily-report-fire:{subscriber_id}"
        )
        self._in_flight.add(task)
        task.add_done_callback(self._in_flight.discard)

    async def _fire(self, subscriber_id: int) -> None:
        logger.info(f"Firing daily report for {subscriber_id}")
        try:
            # Fresh read: schedule or credentials may have changed since install
            sub = await self._store.get(subscriber_id)
            if sub is None or not sub.active or not sub.has_credentials:
                logger.info(f"Subscriber {subscriber_id} no longer eligible, dropping job")
                self.cancel(subscriber_id)
                return
            delivered = await self._deliver(sub)
            if not delivered:
                logger.warning(f"Daily report for {subscriber_id} was not delivered")
        except Exception as e:
            logger.warning(f"Daily report for {subscriber_id} failed (non-fatal): {e}")
