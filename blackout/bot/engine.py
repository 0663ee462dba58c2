"""
SchedulingEngine — wires store, conversation state and job scheduler
together behind the user-facing actions.

Every handler completes its store write before returning, so events for one
subscriber processed in order leave the store, the conversation tracker and
the job table consistent with each other:

    active == True   ⇔   scheduler.has_job(id)

On startup the job table is rebuilt from the store (reconcile) and the
conversation tracker starts empty, so pending prompts don't survive restarts.
"""

from __future__ import annotations

import logging
from typing import Awaitable, Callable

from blackout.bot.actions import (
    CANCEL_KEYBOARD,
    Action,
    Awaiting,
    InboundEvent,
    main_menu,
)
from blackout.bot.conversation import ConversationTracker
from blackout.bot.texts import TOKEN_PLACEHOLDER, Texts
from blackout.core.errors import PreconditionError, ValidationError
from blackout.notifications.base import Notifier
from blackout.scheduler.jobs import JobScheduler
from blackout.scheduler.triggers import parse_schedule_time
from blackout.store.base import SubscriberStore
from blackout.store.subscriber import Subscriber

logger = logging.getLogger(__name__)

_PROMPTS: dict[Awaiting, str] = {
    Awaiting.BILLING_ID: "prompt_billing_id",
    Awaiting.AUTH_TOKEN: "prompt_auth_token",
    Awaiting.SCHEDULE_TIME: "prompt_schedule_time",
}


class SchedulingEngine:
    """
    Orchestrates subscriber actions.

    Usage:
        engine = SchedulingEngine(store, scheduler, notifier, texts)
        await engine.start()                       # reconcile jobs
        await engine.handle(InboundEvent(42, action=Action.ACTIVATE))
        await engine.handle(InboundEvent(42, text="09:30"))
        await engine.stop()
    """

    def __init__(
        self,
        store: SubscriberStore,
        scheduler: JobScheduler,
        notifier: Notifier,
        texts: Texts,
        conversation: ConversationTracker | None = None,
    ) -> None:
        self._store = store
        self._scheduler = scheduler
        self._notifier = notifier
        self._texts = texts
        self._conversation = conversation or ConversationTracker()
        self._handlers: dict[Action, Callable[[int], Awaitable[None]]] = {
            Action.WELCOME: self.welcome,
            Action.ACTIVATE: self.activate,
            Action.DEACTIVATE: self.deactivate,
            Action.SET_BILLING_ID: self.request_billing_id,
            Action.SET_AUTH_TOKEN: self.request_auth_token,
            Action.SET_SCHEDULE_TIME: self.request_schedule_time,
            Action.SHOW_SETTINGS: self.show_settings,
            Action.CANCEL: self.cancel,
        }

    @property
    def conversation(self) -> ConversationTracker:
        return self._conversation

    @property
    def scheduler(self) -> JobScheduler:
        return self._scheduler

    # ── Lifecycle ─────────────────────────────────────────────────────────────

    async def start(self) -> list[int]:
        """Startup reconciliation. Returns the ids that got a timer."""
        self._conversation.reset()
        return await self._scheduler.reconcile()

    async def stop(self) -> None:
        await self._scheduler.shutdown()

    # ── Dispatch ──────────────────────────────────────────────────────────────

    async def handle(self, event: InboundEvent) -> None:
        """Route one inbound event. Actions always win over free text."""
        if event.action is not None:
            await self._handlers[event.action](event.subscriber_id)
        elif event.text is not None:
            await self.receive_text(event.subscriber_id, event.text)

    # ── Actions ───────────────────────────────────────────────────────────────

    async def welcome(self, subscriber_id: int) -> None:
        sub = await self._store.get(subscriber_id)
        if sub is None:
            sub = await self._store.upsert(subscriber_id)
            logger.info(f"New subscriber {subscriber_id}")
        await self._notifier.send(subscriber_id, self._texts.get("welcome"), main_menu(sub.active))

    async def activate(self, subscriber_id: int) -> None:
        sub = await self._store.get(subscriber_id)
        try:
            self._require_credentials(subscriber_id, sub)
        except PreconditionError as e:
            logger.debug(f"Activation refused for {subscriber_id}: missing {e.missing}")
            await self._notifier.send(
                subscriber_id,
                self._texts.get("missing_credentials"),
                main_menu(bool(sub and sub.active)),
            )
            return

        sub = await self._store.upsert(subscriber_id, active=True)
        if not await self._scheduler.install(subscriber_id):
            logger.warning(f"Activated {subscriber_id} but job install was refused")

        await self._notifier.send(subscriber_id, self._texts.get("fetching"))
        await self._scheduler.deliver_report(subscriber_id)

        logger.info(f"Subscriber {subscriber_id} activated at {sub.schedule_time}")
        await self._notifier.send(
            subscriber_id,
            self._texts.get("activated", schedule_time=sub.schedule_time),
            main_menu(True),
        )

    async def deactivate(self, subscriber_id: int) -> None:
        await self._store.upsert(subscriber_id, active=False)
        self._scheduler.cancel(subscriber_id)
        logger.info(f"Subscriber {subscriber_id} deactivated")
        await self._notifier.send(subscriber_id, self._texts.get("deactivated"), main_menu(False))

    async def request_billing_id(self, subscriber_id: int) -> None:
        await self._request_field(subscriber_id, Awaiting.BILLING_ID)

    async def request_auth_token(self, subscriber_id: int) -> None:
        await self._request_field(subscriber_id, Awaiting.AUTH_TOKEN)

    async def request_schedule_time(self, subscriber_id: int) -> None:
        await self._request_field(subscriber_id, Awaiting.SCHEDULE_TIME)

    async def cancel(self, subscriber_id: int) -> None:
        self._conversation.clear(subscriber_id)
        sub = await self._store.get(subscriber_id)
        await self._notifier.send(
            subscriber_id, self._texts.get("cancelled"), main_menu(bool(sub and sub.active))
        )

    async def show_settings(self, subscriber_id: int) -> None:
        sub = await self._store.get(subscriber_id)
        if sub is None:
            await self._notifier.send(subscriber_id, self._texts.get("no_settings"), main_menu(False))
            return
        await self._notifier.send(subscriber_id, self.render_settings(sub), main_menu(sub.active))

    def render_settings(self, sub: Subscriber) -> str:
        """Settings summary. The stored token is never echoed, only whether it is set."""
        not_set = self._texts.get("not_set")
        return self._texts.get(
            "settings",
            billing_id=sub.billing_id or not_set,
            auth_token=TOKEN_PLACEHOLDER if sub.auth_token else not_set,
            schedule_time=sub.schedule_time,
            status=self._texts.get("status_active" if sub.active else "status_inactive"),
        )

    # ── Field input ───────────────────────────────────────────────────────────

    async def receive_text(self, subscriber_id: int, text: str) -> None:
        """Bind free text to the pending field, if any. Ignored otherwise."""
        awaiting = self._conversation.awaiting(subscriber_id)
        if awaiting is Awaiting.NONE:
            return

        value = text.strip()
        if not value:
            await self._notifier.send(subscriber_id, self._texts.get("empty_input"), CANCEL_KEYBOARD)
            return

        if awaiting is Awaiting.BILLING_ID:
            sub = await self._store.upsert(subscriber_id, billing_id=value)
            self._conversation.clear(subscriber_id)
            await self._notifier.send(
                subscriber_id,
                self._texts.get("billing_id_saved", billing_id=value),
                main_menu(sub.active),
            )

        elif awaiting is Awaiting.AUTH_TOKEN:
            sub = await self._store.upsert(subscriber_id, auth_token=value)
            self._conversation.clear(subscriber_id)
            await self._notifier.send(
                subscriber_id, self._texts.get("auth_token_saved"), main_menu(sub.active)
            )

        elif awaiting is Awaiting.SCHEDULE_TIME:
            await self._commit_schedule_time(subscriber_id, value)

    async def _commit_schedule_time(self, subscriber_id: int, value: str) -> None:
        try:
            parse_schedule_time(value)
        except ValidationError:
            # Stay in awaiting SCHEDULE_TIME; nothing is written
            await self._notifier.send(subscriber_id, self._texts.get("invalid_time"), CANCEL_KEYBOARD)
            return

        sub = await self._store.upsert(subscriber_id, schedule_time=value)
        self._conversation.clear(subscriber_id)
        if sub.active:
            await self._scheduler.install(subscriber_id)
        logger.info(f"Subscriber {subscriber_id} schedule set to {value}")
        await self._notifier.send(
            subscriber_id,
            self._texts.get("schedule_time_saved", schedule_time=value),
            main_menu(sub.active),
        )

    # ── Helpers ───────────────────────────────────────────────────────────────

    async def _request_field(self, subscriber_id: int, field: Awaiting) -> None:
        self._conversation.begin(subscriber_id, field)
        await self._notifier.send(subscriber_id, self._texts.get(_PROMPTS[field]), CANCEL_KEYBOARD)

    @staticmethod
    def _require_credentials(subscriber_id: int, sub: Subscriber | None) -> None:
        missing = tuple(
            name
            for name, value in (
                ("billing_id", sub.billing_id if sub else None),
                ("auth_token", sub.auth_token if sub else None),
            )
            if not value
        )
        if missing:
            raise PreconditionError(
                f"Subscriber {subscriber_id} cannot be activated yet", missing=missing
            )
