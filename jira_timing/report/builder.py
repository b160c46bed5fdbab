"""Report accumulation and CSV serialization."""

from __future__ import annotations

import logging
from dataclasses import asdict
from datetime import datetime
from pathlib import Path
from typing import Any

import pandas as pd

from jira_timing.core.config import DEFAULT_CUSTOM_FIELD_LABEL
from jira_timing.core.models import ReportRow

logger = logging.getLogger(__name__)

# ReportRow attribute for each column; the status2 and custom columns are
# renamed per run by ``report_columns``
_ROW_ATTRS: tuple[str, ...] = (
    "issue_key",
    "summary",
    "status",
    "priority",
    "start_time",
    "backlog_days",
    "status2_time",
    "time_spent_minutes",
    "time_spent_days",
    "assignee",
    "custom_value",
)


def report_columns(status2: str, custom_label: str = DEFAULT_CUSTOM_FIELD_LABEL) -> list[str]:
    return [
        "Issue Key",
        "Summary",
        "Status",
        "Priority",
        "Start Time",
        "Currently in Backlog for",
        f"{status2} Time",
        "Time Spent (Minutes)",
        "Time Spent (Days)",
        "Assignee",
        custom_label,
    ]


def format_cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and pd.isna(value):
        return ""
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)


def quote_field(value: Any) -> str:
    text = format_cell(value)
    return '"' + text.replace('"', '""') + '"'


class ReportBuilder:
    """Collects one row per processed issue, in processing order."""

    def __init__(self, status2: str, custom_label: str = DEFAULT_CUSTOM_FIELD_LABEL):
        self.status2 = status2
        self.custom_label = custom_label
        self._rows: list[ReportRow] = []

    def add(self, row: ReportRow) -> None:
        self._rows.append(row)

    @property
    def rows(self) -> list[ReportRow]:
        return list(self._rows)

    def __len__(self) -> int:
        return len(self._rows)

    @property
    def columns(self) -> list[str]:
        return report_columns(self.status2, self.custom_label)

    def to_dataframe(self) -> pd.DataFrame:
        columns = self.columns
        records = []
        for row in self._rows:
            data = asdict(row)
            records.append({col: data[attr] for col, attr in zip(columns, _ROW_ATTRS)})
        return pd.DataFrame(records, columns=columns)

    def average_time_spent_days(self) -> float:
        """Mean of the present ``Time Spent (Days)`` values, 0.0 when none."""
        values = pd.Series([r.time_spent_days for r in self._rows], dtype="float64")
        mean = values.dropna().mean()
        if pd.isna(mean):
            return 0.0
        return float(mean)

    def render_row(self, row: ReportRow) -> str:
        cells = []
        for attr in _ROW_ATTRS:
            value = getattr(row, attr)
            # Summary is the only free-text column; the rest are simple tokens
            cells.append(quote_field(value) if attr == "summary" else format_cell(value))
        return ",".join(cells)

    def render(self) -> str:
        lines = [",".join(self.columns)]
        lines.extend(self.render_row(r) for r in self._rows)
        return "\n".join(lines)

    def write(self, path: str | Path, encoding: str = "utf-8") -> Path:
        """Write the full report to ``path``, replacing any previous file."""
        target = Path(path)
        if target.parent and not target.parent.exists():
            target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(self.render(), encoding=encoding)
        logger.info("Wrote %s rows to %s", len(self._rows), target)
        return target
