"""
Subscriber store interface.

Durable record per subscriber, keyed by chat id. The store is the single
source of truth: the scheduler's job table and the conversation state are
derived from it and rebuilt (or reset) on restart.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from blackout.store.subscriber import Subscriber


class SubscriberStore(ABC):
    """
    Abstract base class for subscriber backends.

    Writes are partial merges: any field passed as None keeps its previous
    value (or its default on first insert). Last writer wins per field.

    Implementations:
        SQLiteSubscriberStore — file-based, default
        InMemorySubscriberStore — for testing
    """

    async def initialize(self) -> None:
        """Prepare the backend. No-op by default."""
        return None

    @abstractmethod
    async def get(self, subscriber_id: int) -> Subscriber | None:
        """Get a subscriber by id. Returns None if not found."""
        ...

    @abstractmethod
    async def upsert(
        self,
        subscriber_id: int,
        *,
        billing_id: str | None = None,
        auth_token: str | None = None,
        schedule_time: str | None = None,
        active: bool | None = None,
    ) -> Subscriber:
        """Insert or partially update a subscriber and return the stored record."""
        ...

    @abstractmethod
    async def list_active(self) -> list[int]:
        """Ids of all subscribers whose active flag is set, oldest first."""
        ...

    @abstractmethod
    async def list_all(self) -> list[Subscriber]:
        """Every stored subscriber, oldest first."""
        ...

    @abstractmethod
    async def close(self) -> None:
        """Close the storage backend."""
        ...
