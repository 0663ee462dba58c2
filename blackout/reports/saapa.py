"""
SaapaReportSource — planned-blackouts report over HTTP.

Endpoint contract:
    GET <endpoint>?bill_id=<id>&from_date=YYYY/MM/DD&to_date=YYYY/MM/DD
    Authorization: Bearer <token>

Dates are Jalali. A successful body looks like:
    {"data": [{"outage_start_time": "10:00", "outage_stop_time": "12:00",
               "address": "...", "reason_outage": "..."}]}

A missing or null "data" means no outages. Everything else that goes wrong
(connect errors, non-2xx, non-JSON, unexpected shape) becomes FetchError.
One attempt per call; there is no retry here.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any

import httpx

from blackout.core.config import DEFAULT_REPORT_ENDPOINT, DEFAULT_USER_AGENT
from blackout.core.errors import FetchError
from blackout.reports.base import OutageEntry, OutageReport, ReportSource
from blackout.reports.calendar import jalali

logger = logging.getLogger(__name__)


class SaapaReportSource(ReportSource):
    """
    Report source for the Saapa planned-blackouts API.

    Usage:
        source = SaapaReportSource()
        report = await source.fetch("12345", "tok", date_from, date_to)
        await source.close()
    """

    def __init__(
        self,
        endpoint: str = DEFAULT_REPORT_ENDPOINT,
        timeout: float = 15.0,
        user_agent: str = DEFAULT_USER_AGENT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._endpoint = endpoint
        self._timeout = timeout
        self._user_agent = user_agent
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self._timeout, connect=10.0),
                transport=self._transport,
            )
        return self._client

    async def fetch(
        self,
        billing_id: str,
        auth_token: str,
        date_from: date,
        date_to: date,
    ) -> OutageReport:
        client = await self._get_client()
        params = {
            "bill_id": billing_id,
            "from_date": jalali(date_from),
            "to_date": jalali(date_to),
        }
        headers = {
            "Content-Type": "application/json",
            "User-Agent": self._user_agent,
            "Authorization": f"Bearer {auth_token}",
        }

        try:
            response = await client.get(self._endpoint, params=params, headers=headers)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            logger.warning(f"Report API returned HTTP {status} for bill {billing_id}")
            raise FetchError(
                f"Report API returned HTTP {status}", status_code=status
            ) from e
        except httpx.HTTPError as e:
            logger.warning(f"Report API request failed for bill {billing_id}: {e}")
            raise FetchError(f"Network error contacting report API: {e}") from e

        try:
            body = response.json()
        except ValueError as e:
            raise FetchError("Report API returned a non-JSON body") from e

        return OutageReport(
            date_from=date_from,
            date_to=date_to,
            entries=_parse_entries(body),
        )

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None


def _parse_entries(body: Any) -> tuple[OutageEntry, ...]:
    if not isinstance(body, dict):
        raise FetchError("Unexpected report payload: expected a JSON object")
    rows = body.get("data") or []
    if not isinstance(rows, list):
        raise FetchError("Unexpected report payload: 'data' is not a list")

    entries: list[OutageEntry] = []
    for row in rows:
        if not isinstance(row, dict):
            raise FetchError("Unexpected report payload: outage entry is not an object")
        entries.append(
            OutageEntry(
                start=_text(row.get("outage_start_time")),
                end=_text(row.get("outage_stop_time")),
                address=_text(row.get("address")),
                reason=_text(row.get("reason_outage")),
            )
        )
    return tuple(entries)


def _text(value: Any) -> str:
    return "" if value is None else str(value).strip()
