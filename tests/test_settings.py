import json

import pytest

from jira_timing.core.config import ReportConfig, RetryPolicy
from jira_timing.core.errors import ConfigError
from jira_timing.core.settings import load_credentials, load_report_config


def test_missing_config_file_gives_defaults(tmp_path):
    assert load_report_config(tmp_path / "nope.yaml") == ReportConfig()
    assert load_report_config(None) == ReportConfig()


def test_yaml_config_loaded(tmp_path):
    path = tmp_path / "report.yaml"
    path.write_text(
        "report:\n"
        "  project: Mobile App\n"
        "  allowed_statuses: [Backlog, In Progress]\n"
        "  end_date: 2024-12-31\n"
        "  use_created_date: false\n"
        "retry:\n"
        "  max_attempts: 2\n"
    )
    config = load_report_config(path)
    assert config.project == "Mobile App"
    assert config.allowed_statuses == ("Backlog", "In Progress")
    assert config.end_date == "2024-12-31"
    assert config.use_created_date is False
    assert config.retry == RetryPolicy(max_attempts=2)


def test_unknown_yaml_key_rejected(tmp_path):
    path = tmp_path / "report.yaml"
    path.write_text("report:\n  projekt: typo\n")
    with pytest.raises(ConfigError, match="projekt"):
        load_report_config(path)


def test_jql_built_from_config():
    jql = ReportConfig(project="Some Project Name").build_jql()
    assert jql == (
        'project = "Some Project Name" AND type = Bug AND '
        'status in (Backlog,Planning,"In Progress") ORDER BY created ASC'
    )
    assert ReportConfig(jql="key = X-1").build_jql() == "key = X-1"


def test_overrides_skip_none():
    config = ReportConfig().with_overrides(status2="Done", project=None, use_created_date=False)
    assert config.status2 == "Done"
    assert config.project == ReportConfig().project
    assert config.use_created_date is False


def test_credentials_from_env():
    env = {"JIRA_SERVER": "https://x", "JIRA_EMAIL": "a@b", "JIRA_TOKEN": "t"}
    creds = load_credentials(env=env)
    assert (creds.server, creds.email, creds.token) == ("https://x", "a@b", "t")
    assert "t'" not in repr(creds)


def test_credentials_from_secrets_file(tmp_path):
    path = tmp_path / "secrets.json"
    path.write_text(json.dumps({"jiraUrl": "https://y", "username": "u", "apiToken": "k"}))
    creds = load_credentials(path, env={})
    assert creds.server == "https://y"


def test_credentials_missing_fields(tmp_path):
    path = tmp_path / "secrets.json"
    path.write_text(json.dumps({"jiraUrl": "https://y"}))
    with pytest.raises(ConfigError, match="username, apiToken"):
        load_credentials(path, env={})


def test_single_status_string_not_split(tmp_path):
    path = tmp_path / "report.yaml"
    path.write_text("report:\n  allowed_statuses: Backlog\n")
    config = load_report_config(path)
    assert config.allowed_statuses == ("Backlog",)
    assert "status in (Backlog)" in config.build_jql()


def test_allowed_statuses_wrong_type_rejected(tmp_path):
    path = tmp_path / "report.yaml"
    path.write_text("report:\n  allowed_statuses: {Backlog: 1}\n")
    with pytest.raises(ConfigError, match="allowed_statuses"):
        load_report_config(path)


@pytest.mark.parametrize(
    "text",
    [
        "retry: [1, 2]\n",
        "report: [project, X]\n",
        "report: just a string\n",
        "retry:\n  max_attempts: many\n",
        "report:\n  use_created_date: sometimes\n",
        "report:\n  project: null\n",
    ],
)
def test_malformed_sections_raise_config_error(tmp_path, text):
    path = tmp_path / "report.yaml"
    path.write_text(text)
    with pytest.raises(ConfigError):
        load_report_config(path)


def test_unknown_timezone_is_config_error():
    config = ReportConfig(timezone="Mars/Base")
    with pytest.raises(ConfigError, match="Mars/Base"):
        config.tz()
    with pytest.raises(ConfigError):
        config.cutoff()
