"""TransitionReportService: orchestrates fetching, extraction, and timing."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from datetime import datetime

import pytz

from jira_timing.analytics.metrics.timing import compute_timing, transition_times
from jira_timing.analytics.metrics.transitions import extract_transitions, order_histories
from jira_timing.report.builder import ReportBuilder
from jira_timing.visual.progress import ProgressCallback

from .config import ReportConfig
from .jira_client import JiraAPI
from .mappers import map_histories, map_issue_summary
from .models import HistoryEntry, IssueSummary, ReportRow

logger = logging.getLogger(__name__)


class TransitionReportService:
    def __init__(
        self,
        api: JiraAPI,
        config: ReportConfig,
        *,
        now: datetime | None = None,
        progress: ProgressCallback | None = None,
    ):
        self.api = api
        self.config = config
        self._now = now
        self._cutoff = config.cutoff()
        self._progress = progress

    @property
    def now(self) -> datetime:
        if self._now is None:
            self._now = datetime.now(tz=pytz.UTC)
        return self._now

    def _notify(self, message: str, current: int | None = None, total: int | None = None) -> None:
        if self._progress:
            self._progress(message, current, total)

    # ------------------ Fetch Methods ------------------
    def iter_issues(self) -> Iterator[IssueSummary]:
        jql = self.config.build_jql()
        logger.info("Fetching issues with JQL: %s", jql)
        pages = self.api.iter_search_pages(
            jql,
            fields=self.config.fetch_fields(),
            page_size=self.config.search_page_size,
        )
        for page_no, page in enumerate(pages, start=1):
            self._notify(f"Fetched issue page {page_no} ({len(page.issues)} issues)", page_no, None)
            for raw in page.issues:
                yield map_issue_summary(raw, self.config.custom_field)

    def history_for(self, issue_key: str) -> list[HistoryEntry]:
        raw = self.api.fetch_changelog(issue_key, page_size=self.config.changelog_page_size)
        return order_histories(map_histories(raw))

    # ------------------ Row Assembly ------------------
    def build_row(self, issue: IssueSummary, histories: list[HistoryEntry]) -> ReportRow:
        cfg = self.config
        first1, first2 = extract_transitions(histories, cfg.status1, cfg.status2)
        times = transition_times(issue.created, first1, first2, cfg.use_created_date)
        metrics = compute_timing(times.start, times.first_status2, self.now, self._cutoff)
        logger.debug(
            "Issue: %s, Start Time: %s, Currently in Backlog for: %s days, %s Time: %s, Assignee: %s, %s: %s",
            issue.key,
            times.start,
            metrics.backlog_days,
            cfg.status2,
            times.first_status2,
            issue.assignee,
            cfg.custom_field_label,
            issue.custom_value,
        )
        return ReportRow(
            issue_key=issue.key,
            summary=issue.summary,
            status=issue.status,
            priority=issue.priority,
            start_time=times.start,
            backlog_days=metrics.backlog_days,
            status2_time=times.first_status2,
            time_spent_minutes=metrics.time_spent_minutes,
            time_spent_days=metrics.time_spent_days,
            assignee=issue.assignee,
            custom_value=issue.custom_value,
        )

    def run(self) -> ReportBuilder:
        """Process every matching issue sequentially and return the filled report.

        Request failures propagate; no partial report is returned.
        """
        report = ReportBuilder(self.config.status2, self.config.custom_field_label)
        for issue in self.iter_issues():
            histories = self.history_for(issue.key)
            report.add(self.build_row(issue, histories))
            self._notify(f"Processed issue: {issue.key}", len(report), None)
        logger.info("Total issues processed: %s", len(report))
        return report
