"""In-memory stand-ins for the Jira REST endpoints used by the report."""

from __future__ import annotations

from jira_timing.core.config import CHANGELOG_PATH, SEARCH_PATH, RetryPolicy
from jira_timing.core.jira_client import JiraAPI

FAST_RETRY = RetryPolicy(max_attempts=3, base_delay=0.0, max_delay=0.0)


def make_issue(key, created, summary="Test", status="Backlog", assignee="Alice", priority="High", **extra):
    fields = {
        "summary": summary,
        "created": created,
        "status": {"name": status} if status else None,
        "priority": {"name": priority} if priority else None,
        "assignee": {"displayName": assignee} if assignee else None,
    }
    fields.update(extra)
    return {"key": key, "fields": fields}


def status_change(created, to_status, from_status=None):
    return {
        "created": created,
        "items": [{"field": "status", "fromString": from_status, "toString": to_status}],
    }


class DummyAPI(JiraAPI):
    """Serves canned search pages and paginated changelogs.

    ``issues`` is split into search pages of ``search_page_size`` linked by
    ``nextPageToken``; ``changelogs`` maps issue keys to full history lists
    served ``changelog_cap`` entries at a time.
    """

    def __init__(self, issues=(), changelogs=None, *, changelog_cap=100, retry=FAST_RETRY):
        self.server = "https://example.atlassian.net"
        self.retry = retry
        self.issues = list(issues)
        self.changelogs = changelogs or {}
        self.changelog_cap = changelog_cap
        self.calls: list[tuple[str, dict]] = []

    def _request_json(self, path, params):
        self.calls.append((path, dict(params)))
        if path == SEARCH_PATH:
            size = int(params["maxResults"])
            start = int(params.get("nextPageToken") or 0)
            chunk = self.issues[start : start + size]
            nxt = start + size
            if nxt >= len(self.issues):
                return {"issues": chunk, "isLast": True}
            return {"issues": chunk, "isLast": False, "nextPageToken": str(nxt)}
        for key, values in self.changelogs.items():
            if path == CHANGELOG_PATH.format(key=key):
                start = int(params["startAt"])
                size = min(int(params["maxResults"]), self.changelog_cap)
                chunk = values[start : start + size]
                return {
                    "values": chunk,
                    "startAt": start,
                    "maxResults": size,
                    "total": len(values),
                    "isLast": start + size >= len(values),
                }
        return {"values": [], "startAt": 0, "maxResults": 0, "total": 0, "isLast": True}

    def pages_requested(self, path):
        return [params for p, params in self.calls if p == path]
