import logging


class SubstringFilter(logging.Filter):
    def __init__(self, substrings: list[str]):
        self.substrings = substrings

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        return not any(substring in message for substring in self.substrings)


def setup_logger(logger: logging.Logger, level: int = logging.INFO):
    # Remove existing filters to avoid duplication
    for filter in logger.filters[:]:
        if isinstance(filter, SubstringFilter):
            logger.removeFilter(filter)

    logger.addFilter(
        SubstringFilter(
            [
                "Connection pool is full",  # urllib3, harmless under bursts of flushes
                "Retrying (",  # urllib3, events are only ever sent once
            ]
        )
    )
    logger.setLevel(level)


package_loggers = [logging.getLogger("sentry_reporter")]
library_loggers = [logging.getLogger("urllib3.connectionpool")]
for logger in package_loggers:
    setup_logger(logger)
for logger in library_loggers:
    setup_logger(logger, logging.WARNING)
