"""Central configuration, constants, and the immutable run configuration."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field, replace
from datetime import datetime

import pytz

from jira_timing.analytics.metrics.timing import parse_cutoff

from .errors import ConfigError

# =============================================================================
# Jira Connection Settings
# =============================================================================
TIMEZONE = "UTC"
SEARCH_PATH = "/rest/api/3/search/jql"
CHANGELOG_PATH = "/rest/api/3/issue/{key}/changelog"

# Page sizes for the two paginated endpoints
SEARCH_PAGE_SIZE = 50
CHANGELOG_PAGE_SIZE = 100

# =============================================================================
# Query Defaults
# =============================================================================
DEFAULT_PROJECT = "Some Project Name"
DEFAULT_ISSUE_TYPE = "Bug"
DEFAULT_STATUS1 = "Backlog"
DEFAULT_STATUS2 = "In Progress"
DEFAULT_ALLOWED_STATUSES: Sequence[str] = ("Backlog", "Planning", "In Progress")
DEFAULT_END_DATE = "2025-01-01"

# =============================================================================
# Jira Custom Field IDs
# =============================================================================
# Replace with the real id, e.g. the "Affected customers[Number]" field
DEFAULT_CUSTOM_FIELD = "customfield_999"
DEFAULT_CUSTOM_FIELD_LABEL = "Affected Customers"

# Placeholders used when an issue field is missing
UNASSIGNED = "Unassigned"
UNKNOWN = "Unknown"
CUSTOM_FIELD_MISSING = "N/A"

# Canonical field list for the search fetch (custom field appended per run)
JIRA_FETCH_BASE_FIELDS = [
    "summary",
    "created",
    "assignee",
    "status",
    "priority",
]

DEFAULT_OUTPUT_FILE = "issue_transition_times.csv"


@dataclass(frozen=True, slots=True)
class RetryPolicy:
    """Backoff policy for 429/5xx responses.

    ``jitter`` defaults to zero so successive delays never decrease unless
    the server sends a ``Retry-After`` header.
    """

    max_attempts: int = 5
    base_delay: float = 1.0
    max_delay: float = 60.0
    jitter: float = 0.0
    respect_retry_after: bool = True


def _quote_jql(value: str) -> str:
    text = str(value)
    if any(ch.isspace() for ch in text) or '"' in text:
        escaped = text.replace('"', '\\"')
        return f'"{escaped}"'
    return text


@dataclass(frozen=True, slots=True)
class ReportConfig:
    project: str = DEFAULT_PROJECT
    issue_type: str = DEFAULT_ISSUE_TYPE
    allowed_statuses: tuple[str, ...] = tuple(DEFAULT_ALLOWED_STATUSES)
    status1: str = DEFAULT_STATUS1
    status2: str = DEFAULT_STATUS2
    end_date: str = DEFAULT_END_DATE
    use_created_date: bool = True
    custom_field: str | None = DEFAULT_CUSTOM_FIELD
    custom_field_label: str = DEFAULT_CUSTOM_FIELD_LABEL
    output_path: str = DEFAULT_OUTPUT_FILE
    timezone: str = TIMEZONE
    search_page_size: int = SEARCH_PAGE_SIZE
    changelog_page_size: int = CHANGELOG_PAGE_SIZE
    retry: RetryPolicy = field(default_factory=RetryPolicy)
    # Raw JQL wins over project/issue_type/allowed_statuses when set
    jql: str | None = None

    def build_jql(self) -> str:
        if self.jql:
            return self.jql
        clauses = [f"project = {_quote_jql(self.project)}"]
        if self.issue_type:
            clauses.append(f"type = {_quote_jql(self.issue_type)}")
        if self.allowed_statuses:
            statuses = ",".join(_quote_jql(s) for s in self.allowed_statuses)
            clauses.append(f"status in ({statuses})")
        return " AND ".join(clauses) + " ORDER BY created ASC"

    def fetch_fields(self) -> list[str]:
        fields = list(JIRA_FETCH_BASE_FIELDS)
        if self.custom_field:
            fields.append(self.custom_field)
        return fields

    def tz(self):
        try:
            return pytz.timezone(self.timezone)
        except pytz.UnknownTimeZoneError as exc:
            raise ConfigError(f"Unknown timezone: {self.timezone!r}") from exc

    def cutoff(self) -> datetime | None:
        return parse_cutoff(self.end_date, self.tz())

    def with_overrides(self, **overrides) -> ReportConfig:
        """Return a copy with the non-``None`` overrides applied."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        if "allowed_statuses" in changes:
            changes["allowed_statuses"] = tuple(changes["allowed_statuses"])
        return replace(self, **changes)
