"""
Message formatting for outage reports.

Both outcomes of a fetch produce something the subscriber can read: a
report (possibly "no outages") or a plain error line. Silence is never an
outcome.
"""

from __future__ import annotations

from blackout.bot.texts import Texts
from blackout.reports.base import OutageReport
from blackout.reports.calendar import jalali


def format_report(report: OutageReport, texts: Texts) -> str:
    """Header with the (Jalali) report date, then one block per outage."""
    header = texts.get("report_header", date=jalali(report.date_from))
    if report.is_empty:
        return f"{header}\n\n{texts.get('report_empty')}"

    blocks = [
        texts.get(
            "report_entry",
            start=entry.start,
            end=entry.end,
            address=entry.address,
            reason=entry.reason,
        )
        for entry in report.entries
    ]
    return header + "\n\n" + "\n\n".join(blocks)


def format_fetch_error(texts: Texts) -> str:
    """
    User-facing error line. The upstream detail stays in the operator log;
    subscribers get the same fixed message for every failure kind.
    """
    return texts.get("report_error")
