import logging
from typing import Any

from sentry_reporter.client import SentryClient
from sentry_reporter.formatting import format_data
from sentry_reporter.models import Level

DEFAULT_LOG_LEVELS: dict[int, Level] = {
    logging.CRITICAL: Level.FATAL,
    logging.ERROR: Level.ERROR,
    logging.WARNING: Level.WARNING,
    logging.INFO: Level.INFO,
    logging.DEBUG: Level.DEBUG,
}

# attributes every LogRecord carries, anything else came in through `extra`
_RECORD_ATTRIBUTES = frozenset(
    logging.LogRecord("", logging.INFO, "", 0, "", (), None).__dict__
) | {"message", "asctime"}


class BreadcrumbHandler(logging.Handler):
    """
    Forwards log records to a client as breadcrumbs, so the next captured exception
    carries the log lines that led up to it.

    Long running processes that reuse one client must call `client.clear_breadcrumbs()`
    after work that finished without an error, or breadcrumbs accumulate indefinitely.
    """

    def __init__(
        self,
        client: SentryClient,
        level: int = logging.NOTSET,
        log_levels: dict[int, Level] | None = None,
    ):
        super().__init__(level)
        self.client = client
        self.log_levels = dict(DEFAULT_LOG_LEVELS if log_levels is None else log_levels)

    def emit(self, record: logging.LogRecord) -> None:
        # the reporter's own logging would otherwise describe itself
        if record.name == "sentry_reporter" or record.name.startswith("sentry_reporter."):
            return

        try:
            self.client.add_breadcrumb(
                f"[{record.levelname.lower()}] {record.getMessage()}",
                level=self.log_levels.get(record.levelno, record.levelname.lower()),
                data=self.extract_data(record),
                timestamp=record.created,
            )
        except Exception:
            self.handleError(record)

    def extract_data(self, record: logging.LogRecord) -> dict[str, Any]:
        return format_data(
            {k: v for k, v in record.__dict__.items() if k not in _RECORD_ATTRIBUTES}
        )
