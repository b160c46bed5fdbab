"""Mapping raw Jira JSON into issue summaries and history entries."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from typing import Any

import pandas as pd

from .config import CUSTOM_FIELD_MISSING, UNASSIGNED, UNKNOWN
from .errors import MalformedDataError
from .models import FieldChange, HistoryEntry, IssueSummary


def _to_datetime(value: Any) -> datetime:
    if value is None or value == "":
        raise MalformedDataError("empty timestamp")
    if not isinstance(value, (str, datetime)):
        raise MalformedDataError(f"unsupported timestamp type {type(value).__name__}")
    try:
        ts = pd.to_datetime(value, utc=True, errors="coerce")
    except (TypeError, ValueError) as exc:
        raise MalformedDataError(f"unparseable timestamp {value!r}") from exc
    if ts is None or pd.isna(ts):
        raise MalformedDataError(f"unparseable timestamp {value!r}")
    return ts.to_pydatetime()


def parse_timestamp(value: Any) -> datetime | None:
    """Parse a Jira timestamp into an aware UTC datetime, or None."""
    try:
        return _to_datetime(value)
    except MalformedDataError:
        return None


def _name_of(node: Any, attr: str, default: str) -> str:
    if not isinstance(node, dict):
        return default
    value = node.get(attr)
    return str(value) if value else default


def custom_field_text(value: Any) -> Any:
    """Reduce a custom field payload to something printable.

    Option fields arrive as ``{"value": ...}``, user pickers as
    ``{"displayName": ...}`` and multi-selects as lists of either.
    """
    if value is None or value == "" or value == []:
        return CUSTOM_FIELD_MISSING
    if isinstance(value, dict):
        for attr in ("value", "name", "displayName"):
            if value.get(attr) is not None:
                return value[attr]
        return CUSTOM_FIELD_MISSING
    if isinstance(value, list):
        parts = [custom_field_text(v) for v in value]
        return "; ".join(str(p) for p in parts if p != CUSTOM_FIELD_MISSING) or CUSTOM_FIELD_MISSING
    return value


def map_issue_summary(raw: dict[str, Any], custom_field: str | None = None) -> IssueSummary:
    fields = raw.get("fields") or {}
    custom_raw = fields.get(custom_field) if custom_field else None
    return IssueSummary(
        key=raw.get("key"),
        created=parse_timestamp(fields.get("created")),
        summary=fields.get("summary"),
        status=_name_of(fields.get("status"), "name", UNKNOWN),
        priority=_name_of(fields.get("priority"), "name", UNKNOWN),
        assignee=_name_of(fields.get("assignee"), "displayName", UNASSIGNED),
        custom_value=custom_field_text(custom_raw),
    )


def map_field_change(item: dict[str, Any]) -> FieldChange:
    return FieldChange(
        field=item.get("field"),
        to_string=item.get("toString"),
        from_string=item.get("fromString"),
    )


def map_history_entry(raw: dict[str, Any]) -> HistoryEntry:
    items = raw.get("items") or []
    return HistoryEntry(
        created=parse_timestamp(raw.get("created")),
        items=tuple(map_field_change(i) for i in items if isinstance(i, dict)),
    )


def map_histories(raws: Iterable[dict[str, Any]]) -> list[HistoryEntry]:
    return [map_history_entry(r) for r in raws if isinstance(r, dict)]
