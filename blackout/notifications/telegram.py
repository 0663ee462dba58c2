"""
TelegramNotifier — delivers bot messages via the Telegram Bot API.

Keyboards are rendered as inline keyboards: each button shows the
localized label and carries the action's payload ("action:<tag>"), so a
button press reaches the engine as an Action, never as text.
"""

from __future__ import annotations

import logging

from blackout.bot.actions import Keyboard
from blackout.bot.texts import Texts
from blackout.core.errors import TransportError
from blackout.notifications.base import Notifier
from blackout.platforms.telegram.client import TelegramClient

logger = logging.getLogger(__name__)


class TelegramNotifier(Notifier):
    """
    Sends subscriber messages as Telegram chat messages.

    Failures are logged for the operator and reported as False, never
    raised, never retried.
    """

    def __init__(self, client: TelegramClient, texts: Texts) -> None:
        self._client = client
        self._texts = texts

    @property
    def name(self) -> str:
        return "telegram"

    async def send(
        self,
        subscriber_id: int,
        text: str,
        keyboard: Keyboard | None = None,
    ) -> bool:
        markup = self.render_keyboard(keyboard) if keyboard else None
        try:
            await self._client.send_message(subscriber_id, text, reply_markup=markup)
            logger.debug(f"Telegram message sent to {subscriber_id}")
            return True
        except TransportError as e:
            logger.warning(f"Telegram delivery to {subscriber_id} failed: {e}")
            return False

    def render_keyboard(self, keyboard: Keyboard) -> dict:
        return {
            "inline_keyboard": [
                [
                    {"text": self._texts.label(action), "callback_data": action.payload}
                    for action in row
                ]
                for row in keyboard
            ]
        }
