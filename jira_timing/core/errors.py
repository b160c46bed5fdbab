"""Exception hierarchy for report runs and Jira requests."""

from __future__ import annotations


class ReportError(Exception):
    """Base class for every error raised by the report pipeline."""


class ConfigError(ReportError):
    """Invalid or incomplete configuration / credentials."""


class MalformedDataError(ReportError):
    """A payload value could not be interpreted.

    Mappers raise and catch this internally; callers only ever see an absent
    value in its place.
    """


class JiraRequestError(ReportError):
    def __init__(self, message: str, *, status_code: int | None = None, url: str | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.url = url


class AuthError(JiraRequestError):
    """401/403: bad credentials or missing permission. Never retried."""


class TransientError(JiraRequestError):
    """429/5xx: retried with backoff."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        url: str | None = None,
        retry_after: float | None = None,
    ):
        super().__init__(message, status_code=status_code, url=url)
        self.retry_after = retry_after


class TransportError(JiraRequestError):
    """Connection-level failure (DNS, refused, reset). Not retried."""


class FatalError(JiraRequestError):
    """Any other failed request, including exhausted retries."""


def parse_retry_after(value) -> float | None:
    if value is None:
        return None
    try:
        seconds = float(str(value).strip())
    except ValueError:
        return None
    return max(seconds, 0.0)


def classify_status(
    status_code: int | None,
    message: str,
    *,
    url: str | None = None,
    retry_after=None,
) -> JiraRequestError:
    """Map an HTTP status code onto the matching request error."""
    if status_code in (401, 403):
        return AuthError(message, status_code=status_code, url=url)
    if status_code == 429 or (status_code is not None and status_code >= 500):
        return TransientError(
            message,
            status_code=status_code,
            url=url,
            retry_after=parse_retry_after(retry_after),
        )
    return FatalError(message, status_code=status_code, url=url)
