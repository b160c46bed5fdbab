"""First-entry status transition extraction.

Scans an issue's change history for the earliest entry into two named
statuses. Only ``status`` field changes count, and once a status has a
recorded time later entries into it are ignored.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from functools import reduce
from typing import NamedTuple

from jira_timing.core.models import HistoryEntry


class FirstEntries(NamedTuple):
    status1: datetime | None = None
    status2: datetime | None = None


def order_histories(entries: Iterable[HistoryEntry]) -> list[HistoryEntry]:
    """Drop entries without a timestamp and sort the rest chronologically.

    The sort is stable, so entries sharing a timestamp keep API order.
    """
    dated = [e for e in entries if e.created is not None]
    dated.sort(key=lambda e: e.created)
    return dated


def _status_targets(entry: HistoryEntry) -> list[str]:
    return [
        item.to_string
        for item in entry.items
        if str(item.field or "").lower() == "status" and item.to_string is not None
    ]


def extract_transitions(
    entries: Iterable[HistoryEntry],
    status1: str,
    status2: str,
) -> FirstEntries:
    """Return the first timestamp each of ``status1``/``status2`` was entered.

    ``entries`` are scanned in the order given; pass them through
    ``order_histories`` first when the source order is not trusted.
    """

    def step(acc: FirstEntries, entry: HistoryEntry) -> FirstEntries:
        targets = _status_targets(entry)
        if acc.status1 is None and status1 in targets:
            acc = acc._replace(status1=entry.created)
        if acc.status2 is None and status2 in targets:
            acc = acc._replace(status2=entry.created)
        return acc

    return reduce(step, entries, FirstEntries())
