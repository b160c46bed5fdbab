"""Progress reporting for command-line runs."""

from __future__ import annotations

import logging
from collections.abc import Callable


class ProgressReporter:
    """Progress helper that writes a banner + running counter to a logger."""

    def __init__(self, title: str, logger: logging.Logger | None = None):
        self._logger = logger or logging.getLogger(__name__)
        self._total: int | None = None
        self._current: int = 0
        self._finalized: bool = False
        self._logger.info(title)

    def callback(self, message: str, current: int | None = None, total: int | None = None) -> None:
        """Signature compatible with TransitionReportService progress callbacks."""
        self.update(message, current=current, total=total)

    def update(self, message: str, *, current: int | None = None, total: int | None = None) -> None:
        if self._finalized:
            return
        if total is not None and total > 0:
            self._total = total
        if current is not None:
            self._current = max(0, current)
        self._logger.info("%s%s", message, self._suffix(current))

    def complete(self, message: str) -> None:
        if self._finalized:
            return
        self._logger.info(message)
        self._finalized = True

    def error(self, message: str) -> None:
        if self._finalized:
            return
        self._logger.error(message)
        self._finalized = True

    def _suffix(self, current: int | None) -> str:
        if current is None:
            return ""
        if self._total:
            return f" ({self._current}/{self._total})"
        return f" ({self._current})"


ProgressCallback = Callable[[str, int | None, int | None], None]
