"""
Platform interface — the contract for inbound messaging transports.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Awaitable, Callable

from blackout.bot.actions import InboundEvent

# Type for the event handler (SchedulingEngine.handle)
EventHandler = Callable[[InboundEvent], Awaitable[None]]


class Platform(ABC):
    """
    Abstract base class for platforms.

    A platform receives user updates (Telegram, a test harness, ...),
    decodes them into InboundEvents and hands them to the engine.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Platform identifier."""
        ...

    @abstractmethod
    async def run(self, handler: EventHandler) -> None:
        """
        Run the platform until stopped.

        Args:
            handler: Async function that processes one decoded event.
        """
        ...

    @abstractmethod
    async def stop(self) -> None:
        """Stop the platform."""
        ...
