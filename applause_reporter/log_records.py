"""Default logging setup and in-memory capture of reporter log records."""

import logging
import sys
from pathlib import Path

LOG_FORMAT = "%(asctime)s [Applause Tests] %(levelname)s: %(message)s"


class LoggingContainer:
    """Stores formatted log messages until they are drained."""

    def __init__(self) -> None:
        self._logs: list[str] = []

    def get_logs(self) -> list[str]:
        """Return all stored messages."""
        return self._logs

    def drain_logs(self) -> list[str]:
        """Return all stored messages and clear the container."""
        logs = self._logs
        self.clear_logs()
        return logs

    def clear_logs(self) -> None:
        """Remove all stored messages."""
        self._logs = []

    def add_log(self, message: str) -> None:
        """Store a message."""
        self._logs.append(message)


# Shared container, drained by framework integrations to attach logs to results
APPLAUSE_LOG_RECORDS = LoggingContainer()


class ApplauseLogHandler(logging.Handler):
    """Logging handler appending formatted records to a LoggingContainer."""

    def __init__(
        self,
        container: LoggingContainer = APPLAUSE_LOG_RECORDS,
        level: int = logging.NOTSET,
    ) -> None:
        super().__init__(level)
        self.container = container

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self.container.add_log(self.format(record))
        except Exception:
            self.handleError(record)


def construct_default_logger(log_dir: Path | None = None) -> logging.Logger:
    """Configure and return the ``applause_reporter`` logger.

    Records go to stderr (INFO and above) and to ``APPLAUSE_LOG_RECORDS``.
    With ``log_dir``, they are also written to ``error.log`` (ERROR only) and
    ``combined.log``.
    """
    logger = logging.getLogger("applause_reporter")
    logger.setLevel(logging.DEBUG)
    for existing in list(logger.handlers):
        logger.removeHandler(existing)
        existing.close()
    formatter = logging.Formatter(LOG_FORMAT)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(logging.INFO)
    handlers: list[logging.Handler] = [console, ApplauseLogHandler()]

    if log_dir is not None:
        error_file = logging.FileHandler(log_dir / "error.log")
        error_file.setLevel(logging.ERROR)
        handlers += [error_file, logging.FileHandler(log_dir / "combined.log")]

    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    return logger
