"""Progress reporters for long-running commands."""

import logging


class LoggingProgressReporter:
    """Writes progress updates to the workflow log."""

    def __init__(self, operation: str, logger: logging.Logger | None = None) -> None:
        self._operation = operation
        self._logger = logger or logging.getLogger(__name__)

    def report(self, progress: float, total: float = 100, message: str | None = None) -> None:
        percent = (progress / total * 100) if total else 0.0
        self._logger.info("[%s] %.0f%% %s", self._operation, percent, message or "")
