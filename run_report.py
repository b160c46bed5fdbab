"""Convenience launcher for the transition timing report.

Usage:
  python run_report.py --project "My Project" --status1 Backlog --status2 "In Progress"

Credentials come from JIRA_SERVER / JIRA_EMAIL / JIRA_API_TOKEN or
``secrets/secrets.json``.
"""

import sys

from jira_timing.app import main

if __name__ == "__main__":
    sys.exit(main())
