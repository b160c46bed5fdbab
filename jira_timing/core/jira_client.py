"""Jira API client wrapper (REST v3 enhanced search + issue changelog pagination)."""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field
from typing import Any

import requests
from jira import JIRA, JIRAError

from .config import CHANGELOG_PAGE_SIZE, CHANGELOG_PATH, SEARCH_PAGE_SIZE, SEARCH_PATH, RetryPolicy
from .errors import FatalError, TransportError, classify_status
from .retry import with_retry

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class SearchPage:
    issues: list[dict[str, Any]] = field(default_factory=list)
    is_last: bool = True
    next_page_token: str | None = None


@dataclass(slots=True)
class ChangelogPage:
    values: list[dict[str, Any]] = field(default_factory=list)
    start_at: int = 0
    max_results: int = 0
    total: int | None = None
    is_last: bool | None = None


class JiraAPI:
    def __init__(self, server: str, email: str, token: str, *, retry: RetryPolicy | None = None):
        self.server = server.rstrip("/")
        self.retry = retry or RetryPolicy()
        # Library retries are disabled; RetryPolicy is the only backoff layer
        self.client = JIRA(
            basic_auth=(email, token),
            options={"server": self.server, "rest_api_version": "3"},
            max_retries=0,
            get_server_info=False,
        )

    # ------------------ HTTP seam ------------------
    def _request_json(self, path: str, params: dict[str, Any]) -> dict[str, Any]:
        session = getattr(self.client, "_session", None)
        if session is None:
            raise FatalError("JIRA session unavailable")
        url = f"{self.server}{path}"
        try:
            resp = session.get(url, params=params)
        except JIRAError as exc:
            headers = getattr(exc.response, "headers", None) or {}
            raise classify_status(
                exc.status_code,
                f"GET {path} failed {exc.status_code}: {str(exc.text or '')[:200]}",
                url=url,
                retry_after=headers.get("Retry-After"),
            ) from exc
        except (requests.exceptions.ConnectionError, requests.exceptions.Timeout) as exc:
            raise TransportError(f"GET {path} failed: {exc}", url=url) from exc
        if resp.status_code >= 400:
            raise classify_status(
                resp.status_code,
                f"GET {path} failed {resp.status_code}: {resp.text[:200]}",
                url=url,
                retry_after=resp.headers.get("Retry-After"),
            )
        try:
            return resp.json()
        except ValueError as exc:
            raise FatalError(f"GET {path} returned invalid JSON", status_code=resp.status_code, url=url) from exc

    def _get_json(self, path: str, params: dict[str, Any]) -> dict[str, Any]:
        fetch = with_retry(self._request_json, self.retry, describe=f"GET {path}")
        return fetch(path, params)

    # ------------------ Issue search ------------------
    def search_page(
        self,
        jql: str,
        fields: Sequence[str] | None = None,
        page_size: int = SEARCH_PAGE_SIZE,
        next_page_token: str | None = None,
    ) -> SearchPage:
        params: dict[str, Any] = {"jql": jql, "maxResults": page_size}
        if fields:
            params["fields"] = ",".join(fields)
        if next_page_token:
            params["nextPageToken"] = next_page_token
        data = self._get_json(SEARCH_PATH, params)
        token = data.get("nextPageToken")
        return SearchPage(
            issues=list(data.get("issues") or []),
            is_last=bool(data.get("isLast", token is None)),
            next_page_token=token,
        )

    def iter_search_pages(
        self,
        jql: str,
        fields: Sequence[str] | None = None,
        page_size: int = SEARCH_PAGE_SIZE,
    ) -> Iterator[SearchPage]:
        token = None
        while True:
            page = self.search_page(jql, fields, page_size, token)
            yield page
            token = page.next_page_token
            if page.is_last or not token:
                break

    # ------------------ Changelog ------------------
    def changelog_page(self, issue_key: str, start_at: int = 0, max_results: int = CHANGELOG_PAGE_SIZE) -> ChangelogPage:
        data = self._get_json(
            CHANGELOG_PATH.format(key=issue_key),
            {"startAt": start_at, "maxResults": max_results},
        )
        return ChangelogPage(
            values=list(data.get("values") or []),
            start_at=int(data.get("startAt", start_at) or 0),
            max_results=int(data.get("maxResults", max_results) or 0),
            total=data.get("total"),
            is_last=data.get("isLast"),
        )

    def fetch_changelog(self, issue_key: str, page_size: int = CHANGELOG_PAGE_SIZE) -> list[dict[str, Any]]:
        """Return every raw history entry for ``issue_key`` across all pages."""
        out: list[dict[str, Any]] = []
        start_at = 0
        while True:
            page = self.changelog_page(issue_key, start_at, page_size)
            out.extend(page.values)
            if not page.values or page.is_last is True:
                break
            if page.total is not None and page.start_at + len(page.values) >= int(page.total):
                break
            # Server may cap maxResults below the requested size
            start_at = page.start_at + (page.max_results or page_size)
        logger.debug("Fetched %s changelog entries for %s", len(out), issue_key)
        return out
