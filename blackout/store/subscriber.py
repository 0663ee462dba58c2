"""
Subscriber — the persisted per-user record.

One row per chat. Created lazily with defaults on first interaction and
updated through partial-merge writes; never deleted in normal operation.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field

DEFAULT_SCHEDULE_TIME = "08:00"  # reference-timezone wall clock, 24h


@dataclass
class Subscriber:
    """A single bot user and their report settings."""

    id: int                          # Telegram chat id
    billing_id: str | None = None
    auth_token: str | None = None    # secret, never echoed back to the user
    schedule_time: str = DEFAULT_SCHEDULE_TIME
    active: bool = False
    created_at: int = field(default_factory=lambda: int(time.time()))

    @property
    def has_credentials(self) -> bool:
        """Both fields needed to call the report endpoint are present."""
        return bool(self.billing_id and self.auth_token)

    @classmethod
    def from_dict(cls, d: dict) -> "Subscriber":
        return cls(
            id=int(d["id"]),
            billing_id=d.get("billing_id"),
            auth_token=d.get("auth_token"),
            schedule_time=d.get("schedule_time") or DEFAULT_SCHEDULE_TIME,
            active=bool(d.get("active", False)),
            created_at=int(d["created_at"]),
        )
