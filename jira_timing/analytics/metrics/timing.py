"""Duration metrics derived from start, transition, and cutoff times (pure functions)."""

from __future__ import annotations

import math
import re
from datetime import datetime, time, timedelta

import pandas as pd
import pytz

from jira_timing.core.models import TimingMetrics, TransitionTimes

_DATE_ONLY = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def parse_cutoff(value, tz=pytz.UTC) -> datetime | None:
    """Parse the end-date cutoff into an aware datetime.

    A bare ``YYYY-MM-DD`` includes the whole day: the cutoff becomes the last
    instant of that day in ``tz``. Naive timestamps are localized to ``tz``.
    Returns None when the value cannot be parsed.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        ts = pd.Timestamp(value)
    elif hasattr(value, "year") and not isinstance(value, str):
        ts = pd.Timestamp(datetime.combine(value, time.max))
    else:
        text = str(value).strip()
        ts = pd.to_datetime(text, errors="coerce")
        if ts is None or pd.isna(ts):
            return None
        if _DATE_ONLY.match(text):
            ts = pd.Timestamp(datetime.combine(ts.date(), time.max))
    if ts.tzinfo is None:
        return tz.localize(ts.to_pydatetime())
    return ts.to_pydatetime()


def resolve_start(
    created: datetime | None,
    first_status1: datetime | None,
    use_created_date: bool,
) -> datetime | None:
    return created if use_created_date else first_status1


def whole_days(delta: timedelta) -> int:
    """Floor a duration to whole days (towards the earlier instant)."""
    return math.floor(delta.total_seconds() / 86400.0)


def whole_minutes(delta: timedelta) -> int:
    return math.floor(delta.total_seconds() / 60.0)


def compute_timing(
    start: datetime | None,
    first_status2: datetime | None,
    now: datetime,
    cutoff: datetime | None,
) -> TimingMetrics:
    """Compute backlog age and time spent reaching the second status.

    Time spent is only reported when both timestamps exist and the
    transition happened on or before ``cutoff``. A missing cutoff never
    admits a transition.
    """
    backlog_days = whole_days(now - start) if start is not None else None
    if start is None or first_status2 is None or cutoff is None or first_status2 > cutoff:
        return TimingMetrics(backlog_days=backlog_days)
    spent = first_status2 - start
    return TimingMetrics(
        backlog_days=backlog_days,
        time_spent_minutes=whole_minutes(spent),
        time_spent_days=whole_days(spent),
    )


def transition_times(
    created: datetime | None,
    first_status1: datetime | None,
    first_status2: datetime | None,
    use_created_date: bool,
) -> TransitionTimes:
    return TransitionTimes(
        start=resolve_start(created, first_status1, use_created_date),
        first_status1=first_status1,
        first_status2=first_status2,
    )
