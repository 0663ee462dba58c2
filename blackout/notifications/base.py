"""
Notifier — the delivery contract every messaging transport implements.

Delivery is fire-and-forget: send() reports success as a bool and never
raises, so one subscriber's broken chat can't stall anyone else's
processing. Transport failures belong in the operator log.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from blackout.bot.actions import Keyboard


class Notifier(ABC):
    """
    Abstract delivery target.

    Implement this to add a new platform. ``keyboard`` is a small layout of
    Action rows; the transport decides how to render the labels.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Short identifier, e.g. 'telegram'."""
        ...

    @abstractmethod
    async def send(
        self,
        subscriber_id: int,
        text: str,
        keyboard: Keyboard | None = None,
    ) -> bool:
        """
        Attempt to deliver ``text`` to the subscriber.

        Returns True if the message was accepted by the transport.
        """
        ...
