"""Retry-with-backoff wrapper shared by both Jira fetch sites."""

from __future__ import annotations

import functools
import logging
import random
import time
from collections.abc import Callable
from typing import TypeVar

from .config import RetryPolicy
from .errors import FatalError, TransientError

T = TypeVar("T")

logger = logging.getLogger(__name__)


def backoff_delay(policy: RetryPolicy, attempt: int, retry_after: float | None = None) -> float:
    """Seconds to wait before retry number ``attempt`` (zero-based)."""
    if retry_after is not None and policy.respect_retry_after:
        return retry_after
    delay = min(policy.base_delay * (2**attempt), policy.max_delay)
    if policy.jitter > 0:
        delay += random.uniform(0, policy.jitter)
    return delay


def with_retry(
    operation: Callable[..., T],
    policy: RetryPolicy,
    *,
    sleep: Callable[[float], None] = time.sleep,
    describe: str = "request",
) -> Callable[..., T]:
    """Wrap ``operation`` so ``TransientError`` is retried per ``policy``.

    Other errors propagate untouched. Once ``policy.max_attempts`` calls have
    failed transiently a ``FatalError`` is raised from the last failure.
    """

    @functools.wraps(operation)
    def wrapped(*args, **kwargs):
        attempts = max(1, policy.max_attempts)
        last: TransientError | None = None
        for attempt in range(attempts):
            try:
                return operation(*args, **kwargs)
            except TransientError as exc:
                last = exc
                if attempt == attempts - 1:
                    break
                delay = backoff_delay(policy, attempt, exc.retry_after)
                logger.warning(
                    "%s failed with %s. Retrying in %.1f seconds (attempt %s/%s)",
                    describe,
                    exc.status_code,
                    delay,
                    attempt + 1,
                    attempts,
                )
                sleep(delay)
        raise FatalError(
            f"{describe} failed after {attempts} attempts: {last}",
            status_code=getattr(last, "status_code", None),
            url=getattr(last, "url", None),
        ) from last

    return wrapped
