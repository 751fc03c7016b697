import logging

from sentry_reporter.client import SentryClient
from sentry_reporter.configuration import ReporterConfig
from sentry_reporter.dependency_injection import inject, injected, resolve

# Make sure this import is here
import sentry_reporter.logging  # noqa: F401

logger = logging.getLogger(__name__)


@inject
def bootup(config: ReporterConfig = injected) -> SentryClient:
    """
    Validates the configuration and builds the client from the enabled modules.  A
    malformed DSN raises `InvalidDSN` here rather than on the first capture.
    """
    config.do_validation()
    client = resolve(SentryClient)
    logger.info(
        f"Sentry reporting {'enabled' if config.has_sentry_integration else 'disabled'}"
        f" (sample rate {config.SENTRY_SAMPLE_RATE}%)"
    )
    return client
