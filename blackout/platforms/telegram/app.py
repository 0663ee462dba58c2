"""
TelegramPlatform — long-polls the Bot API and feeds decoded events to the
engine.

Ordering:
- Updates for the same chat are handled strictly in arrival order (one
  FIFO asyncio.Lock per chat id), so each action finishes its store write
  before the next event for that chat starts
- Different chats proceed independently; a slow report fetch for one
  subscriber never holds up another

Failures while handling one update are logged and dropped; they never stop
the polling loop or leak into another chat.
"""

from __future__ import annotations

import asyncio
import logging
from collections import defaultdict

from blackout.bot.actions import SLASH_COMMANDS, InboundEvent
from blackout.bot.texts import Texts
from blackout.core.errors import TransportError
from blackout.platforms.base import EventHandler, Platform
from blackout.platforms.telegram.client import TelegramClient

logger = logging.getLogger(__name__)

ERROR_BACKOFF = 5.0  # seconds to wait after a failed getUpdates


def decode_update(update: dict) -> InboundEvent | None:
    """
    Turn a raw Telegram update into an InboundEvent.

    Inline-button presses decode by payload; messages decode slash commands
    into actions and anything else into free text. Returns None for updates
    the bot doesn't act on (stickers, unknown commands, unknown payloads).
    """
    if "callback_query" in update:
        cb = update["callback_query"]
        chat_id = cb.get("message", {}).get("chat", {}).get("id")
        if chat_id is None:
            return None
        event = InboundEvent.from_payload(int(chat_id), cb.get("data") or "")
    else:
        message = update.get("message") or {}
        chat_id = message.get("chat", {}).get("id")
        text = message.get("text")
        if chat_id is None or not text:
            return None
        event = InboundEvent.from_message_text(int(chat_id), text)

    return None if event.is_empty else event


class TelegramPlatform(Platform):
    """
    Telegram long-polling platform.

    Usage:
        platform = TelegramPlatform(client, texts)
        await platform.run(engine.handle)   # until stop() or cancellation
    """

    def __init__(
        self,
        client: TelegramClient,
        texts: Texts,
        poll_timeout: int = 30,
    ) -> None:
        self._client = client
        self._texts = texts
        self._poll_timeout = poll_timeout
        self._offset = 0
        self._running = False
        self._locks: defaultdict[int, asyncio.Lock] = defaultdict(asyncio.Lock)
        self._tasks: set[asyncio.Task] = set()

    @property
    def name(self) -> str:
        return "telegram"

    @property
    def is_running(self) -> bool:
        return self._running

    async def run(self, handler: EventHandler) -> None:
        self._running = True
        await self._register_commands()
        logger.info("Telegram polling started")

        while self._running:
            try:
                updates = await self._client.get_updates(self._offset, timeout=self._poll_timeout)
            except TransportError as e:
                logger.warning(f"Polling error (retrying in {ERROR_BACKOFF}s): {e}")
                await asyncio.sleep(ERROR_BACKOFF)
                continue

            for update in updates:
                await self.process_update(update, handler)

        logger.info("Telegram polling stopped")

    async def process_update(self, update: dict, handler: EventHandler) -> None:
        """Acknowledge, decode and dispatch a single update."""
        update_id = update.get("update_id")
        if isinstance(update_id, int):
            self._offset = max(self._offset, update_id + 1)

        callback_id = update.get("callback_query", {}).get("id")
        if callback_id:
            await self._answer_callback(callback_id)

        event = decode_update(update)
        if event is None:
            return
        task = asyncio.create_task(self._dispatch(event, handler))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def stop(self) -> None:
        """Stop polling and wait for events already being handled."""
        self._running = False
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    # ── Internals ─────────────────────────────────────────────────────────────

    async def _dispatch(self, event: InboundEvent, handler: EventHandler) -> None:
        async with self._locks[event.subscriber_id]:
            try:
                await handler(event)
            except Exception as e:
                logger.error(
                    f"Handling event for {event.subscriber_id} failed: {e}", exc_info=True
                )

    async def _answer_callback(self, callback_id: str) -> None:
        try:
            await self._client.answer_callback_query(callback_id)
        except TransportError as e:
            logger.debug(f"answerCallbackQuery failed: {e}")

    async def _register_commands(self) -> None:
        commands = [
            {"command": name, "description": self._texts.command_description(action)}
            for name, action in SLASH_COMMANDS.items()
        ]
        try:
            await self._client.set_my_commands(commands)
        except TransportError as e:
            logger.warning(f"Could not register bot commands: {e}")
