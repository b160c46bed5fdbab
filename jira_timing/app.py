"""Application entry point: parse arguments, run the pipeline, write the CSV."""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence

from jira_timing.core.config import ReportConfig
from jira_timing.core.errors import ConfigError, JiraRequestError
from jira_timing.core.jira_client import JiraAPI
from jira_timing.core.service import TransitionReportService
from jira_timing.core.settings import load_credentials, load_report_config
from jira_timing.visual.progress import ProgressReporter

logger = logging.getLogger("jira_timing")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="jira-timing-report",
        description="Report time from issue creation (or a first status) to a second status",
    )
    parser.add_argument("--config", help="YAML file with report/retry settings")
    parser.add_argument("--secrets", help="JSON secrets file (jiraUrl, username, apiToken)")
    parser.add_argument("--project", help="Jira project name or key")
    parser.add_argument("--issue-type", help="Issue type to include (e.g. Bug)")
    parser.add_argument("--statuses", nargs="+", dest="allowed_statuses", help="Current statuses to include")
    parser.add_argument("--status1", help="First status (start when not using created date)")
    parser.add_argument("--status2", help="Second status whose first entry ends the measurement")
    parser.add_argument("--end-date", help="Inclusive cutoff for the second status (YYYY-MM-DD)")
    start = parser.add_mutually_exclusive_group()
    start.add_argument(
        "--use-created-date",
        dest="use_created_date",
        action="store_true",
        default=None,
        help="Measure from issue creation",
    )
    start.add_argument(
        "--use-status1-start",
        dest="use_created_date",
        action="store_false",
        default=None,
        help="Measure from the first entry into status1",
    )
    parser.add_argument("--custom-field", help="Custom field id to include (e.g. customfield_10042)")
    parser.add_argument("--custom-field-label", help="Column header for the custom field")
    parser.add_argument("--jql", help="Raw JQL (overrides project/type/statuses)")
    parser.add_argument("--output", dest="output_path", help="Output CSV path")
    parser.add_argument("--timezone", help="Timezone for date-only cutoffs (default UTC)")
    parser.add_argument("--log-level", default="INFO", help="Logging level (default: INFO)")
    parser.add_argument("--print-rows", action="store_true", help="Log every report row")
    return parser


def resolve_config(args: argparse.Namespace) -> ReportConfig:
    base = load_report_config(args.config)
    config = base.with_overrides(
        project=args.project,
        issue_type=args.issue_type,
        allowed_statuses=args.allowed_statuses,
        status1=args.status1,
        status2=args.status2,
        end_date=args.end_date,
        use_created_date=args.use_created_date,
        custom_field=args.custom_field,
        custom_field_label=args.custom_field_label,
        jql=args.jql,
        output_path=args.output_path,
        timezone=args.timezone,
    )
    if config.cutoff() is None:
        raise ConfigError(f"Invalid end date: {config.end_date!r}")
    return config


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = resolve_config(args)
        creds = load_credentials(args.secrets)
    except ConfigError as exc:
        logger.error("Configuration error: %s", exc)
        return 1

    reporter = ProgressReporter(f"Building {config.status2} timing report", logger)
    try:
        api = JiraAPI(creds.server, creds.email, creds.token, retry=config.retry)
        service = TransitionReportService(api, config, progress=reporter.callback)
        report = service.run()
    except JiraRequestError as exc:
        reporter.error(f"Error fetching issues from Jira: {exc}")
        return 1

    if args.print_rows:
        for row in report.rows:
            logger.info("%s", row)
    report.write(config.output_path)
    print(f"Total issues processed: {len(report)}")
    print(f"Average Time Spent (Days): {report.average_time_spent_days():.2f}")
    reporter.complete(f"Report written to {config.output_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
