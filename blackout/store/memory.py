"""
In-memory subscriber store — for testing.

Simple dict-based storage. Data lost when process exits.
"""

from __future__ import annotations

from dataclasses import replace

from blackout.store.base import SubscriberStore
from blackout.store.subscriber import Subscriber


class InMemorySubscriberStore(SubscriberStore):
    """
    In-memory subscriber store for testing.

    Usage:
        store = InMemorySubscriberStore()
        await store.upsert(42, billing_id="12345")
        assert (await store.get(42)).billing_id == "12345"
    """

    def __init__(self) -> None:
        self._data: dict[int, Subscriber] = {}

    async def get(self, subscriber_id: int) -> Subscriber | None:
        sub = self._data.get(subscriber_id)
        # Hand out copies so callers can't mutate stored state behind our back
        return replace(sub) if sub else None

    async def upsert(
        self,
        subscriber_id: int,
        *,
        billing_id: str | None = None,
        auth_token: str | None = None,
        schedule_time: str | None = None,
        active: bool | None = None,
    ) -> Subscriber:
        current = self._data.get(subscriber_id) or Subscriber(id=subscriber_id)
        updated = replace(
            current,
            billing_id=billing_id if billing_id is not None else current.billing_id,
            auth_token=auth_token if auth_token is not None else current.auth_token,
            schedule_time=schedule_time if schedule_time is not None else current.schedule_time,
            active=active if active is not None else current.active,
        )
        self._data[subscriber_id] = updated
        return replace(updated)

    async def list_active(self) -> list[int]:
        return [s.id for s in self._ordered() if s.active]

    async def list_all(self) -> list[Subscriber]:
        return [replace(s) for s in self._ordered()]

    async def close(self) -> None:
        self._data.clear()

    def _ordered(self) -> list[Subscriber]:
        return sorted(self._data.values(), key=lambda s: (s.created_at, s.id))
