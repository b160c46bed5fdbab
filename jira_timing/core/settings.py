"""Load run configuration from YAML and Jira credentials from env / secrets file."""

from __future__ import annotations

import json
import os
from collections.abc import Mapping
from dataclasses import MISSING, dataclass, fields
from pathlib import Path

import yaml

from .config import ReportConfig, RetryPolicy
from .errors import ConfigError

DEFAULT_SECRETS_PATH = Path("secrets") / "secrets.json"

# Environment variable names, first match wins
ENV_SERVER = ("JIRA_SERVER", "JIRA_URL")
ENV_EMAIL = ("JIRA_EMAIL", "JIRA_USERNAME")
ENV_TOKEN = ("JIRA_API_TOKEN", "JIRA_TOKEN")

# Keys used by the JSON secrets file
SECRETS_KEYS = {"server": "jiraUrl", "email": "username", "token": "apiToken"}


@dataclass(frozen=True, slots=True)
class JiraCredentials:
    server: str
    email: str
    token: str

    def __repr__(self) -> str:
        return f"JiraCredentials(server={self.server!r}, email={self.email!r}, token='***')"


def _check_types(cls, data: Mapping, section: str) -> None:
    for f in fields(cls):
        if f.name not in data or f.default is MISSING:
            continue
        value = data[f.name]
        if value is None:
            if "None" in str(f.type):
                continue
            raise ConfigError(f"{section}.{f.name} must not be empty")
        expected = type(f.default)
        if expected is float:
            ok = isinstance(value, (int, float)) and not isinstance(value, bool)
        elif expected is int:
            ok = isinstance(value, int) and not isinstance(value, bool)
        elif expected in (bool, str):
            ok = isinstance(value, expected)
        else:
            continue
        if not ok:
            raise ConfigError(f"{section}.{f.name} must be {expected.__name__}, got {value!r}")


def _build(cls, data, section: str):
    if not isinstance(data, Mapping):
        raise ConfigError(f"'{section}' section must be a mapping, got {type(data).__name__}")
    allowed = {f.name for f in fields(cls)}
    unknown = sorted(str(k) for k in set(data) - allowed)
    if unknown:
        raise ConfigError(f"Unknown {section} settings: {', '.join(unknown)}")
    _check_types(cls, data, section)
    try:
        return cls(**data)
    except TypeError as exc:
        raise ConfigError(f"Invalid {section} settings: {exc}") from exc


def _status_tuple(value) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    if isinstance(value, list) and all(isinstance(v, str) for v in value):
        return tuple(value)
    raise ConfigError(f"report.allowed_statuses must be a status name or a list of names, got {value!r}")


def load_report_config(path: str | Path | None = None) -> ReportConfig:
    """Read a YAML config with optional ``report:`` and ``retry:`` sections.

    A missing path (or ``None``) yields the defaults.
    """
    if path is None:
        return ReportConfig()
    yaml_path = Path(path)
    if not yaml_path.exists():
        return ReportConfig()
    try:
        data = yaml.safe_load(yaml_path.read_text()) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {yaml_path}: {exc}") from exc
    if not isinstance(data, Mapping):
        raise ConfigError(f"{yaml_path} must contain a mapping")

    report_data = data.get("report") or {}
    retry_data = data.get("retry") or {}
    if not isinstance(report_data, Mapping):
        raise ConfigError(f"'report' section must be a mapping, got {type(report_data).__name__}")
    report = dict(report_data)
    report.pop("retry", None)
    if "allowed_statuses" in report:
        report["allowed_statuses"] = _status_tuple(report["allowed_statuses"])
    if "end_date" in report and report["end_date"] is not None:
        # YAML turns bare dates into date objects
        report["end_date"] = str(report["end_date"])
    retry = _build(RetryPolicy, retry_data, "retry")
    return _build(ReportConfig, {**report, "retry": retry}, "report")


def _first_env(env: Mapping[str, str], names) -> str | None:
    for name in names:
        value = env.get(name)
        if value:
            return value
    return None


def load_credentials(
    secrets_path: str | Path | None = None,
    env: Mapping[str, str] | None = None,
) -> JiraCredentials:
    """Resolve credentials from environment variables, else a JSON secrets file."""
    env = os.environ if env is None else env
    server = _first_env(env, ENV_SERVER)
    email = _first_env(env, ENV_EMAIL)
    token = _first_env(env, ENV_TOKEN)
    if server and email and token:
        return JiraCredentials(server, email, token)

    path = Path(secrets_path) if secrets_path else DEFAULT_SECRETS_PATH
    secrets: dict = {}
    if path.exists():
        try:
            secrets = json.loads(path.read_text(encoding="utf-8")) or {}
        except json.JSONDecodeError as exc:
            raise ConfigError(f"Error reading {path}: {exc}") from exc

    server = server or secrets.get(SECRETS_KEYS["server"])
    email = email or secrets.get(SECRETS_KEYS["email"])
    token = token or secrets.get(SECRETS_KEYS["token"])
    missing = [
        key
        for key, value in (("jiraUrl", server), ("username", email), ("apiToken", token))
        if not value
    ]
    if missing:
        raise ConfigError(
            f"Jira credentials incomplete, missing: {', '.join(missing)} "
            f"(set {ENV_SERVER[0]}/{ENV_EMAIL[0]}/{ENV_TOKEN[0]} or provide {path})"
        )
    return JiraCredentials(server, email, token)
