"""Domain data models for issues, change histories, and report rows."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any


@dataclass(slots=True, frozen=True)
class FieldChange:
    field: str | None
    to_string: str | None
    from_string: str | None = None


@dataclass(slots=True, frozen=True)
class HistoryEntry:
    created: datetime | None
    items: tuple[FieldChange, ...] = ()


@dataclass(slots=True, frozen=True)
class IssueSummary:
    key: str
    created: datetime | None
    summary: str | None
    status: str
    priority: str
    assignee: str
    custom_value: Any = None


@dataclass(slots=True, frozen=True)
class TransitionTimes:
    start: datetime | None
    first_status1: datetime | None
    first_status2: datetime | None


@dataclass(slots=True, frozen=True)
class TimingMetrics:
    backlog_days: int | None = None
    time_spent_minutes: int | None = None
    time_spent_days: int | None = None


@dataclass(slots=True)
class ReportRow:
    issue_key: str
    summary: str | None
    status: str
    priority: str
    start_time: datetime | None
    backlog_days: int | None
    status2_time: datetime | None
    time_spent_minutes: int | None
    time_spent_days: int | None
    assignee: str
    custom_value: Any = None
