"""
Report primitives — OutageEntry / OutageReport dataclasses and the
ReportSource ABC.

Every upstream that can answer "which planned outages affect this bill
between two days" implements ReportSource. Failures of any kind surface as
FetchError so the scheduler has exactly one thing to catch.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date


@dataclass(frozen=True)
class OutageEntry:
    """One planned outage window."""

    start: str     # as reported upstream, e.g. "10:00"
    end: str
    address: str
    reason: str


@dataclass(frozen=True)
class OutageReport:
    """Ordered outage entries for a bill over [date_from, date_to]. May be empty."""

    date_from: date
    date_to: date
    entries: tuple[OutageEntry, ...] = field(default_factory=tuple)

    @property
    def is_empty(self) -> bool:
        return not self.entries


class ReportSource(ABC):
    """
    Abstract outage-report upstream.

    fetch() either returns an OutageReport or raises FetchError. Network,
    auth and malformed-response failures all map to FetchError.
    """

    @abstractmethod
    async def fetch(
        self,
        billing_id: str,
        auth_token: str,
        date_from: date,
        date_to: date,
    ) -> OutageReport:
        """Fetch planned outages for ``billing_id`` between the two dates."""
        ...

    async def close(self) -> None:
        """Release network resources. No-op by default."""
        return None
