import logging

import pytest

from sentry_reporter.breadcrumbs import BreadcrumbHandler
from sentry_reporter.capture import RecordingEventCapture
from sentry_reporter.client import SentryClient
from sentry_reporter.models import Level


@pytest.fixture
def client() -> SentryClient:
    return SentryClient(RecordingEventCapture(), extensions=[])


@pytest.fixture
def app_logger(client: SentryClient):
    logger = logging.getLogger("tests.breadcrumbs.app")
    logger.setLevel(logging.DEBUG)
    handler = BreadcrumbHandler(client)
    logger.addHandler(handler)
    try:
        yield logger
    finally:
        logger.removeHandler(handler)


def test_log_records_become_breadcrumbs(client: SentryClient, app_logger: logging.Logger):
    app_logger.info("hello %s", "world", extra={"foo": "bar"})
    app_logger.warning("Danger, Mr. Robinson!")
    app_logger.critical("meltdown")

    client.capture_exception(RuntimeError("boom"))

    event = client.capture.events[0]
    assert [(b.level, b.message) for b in event.breadcrumbs] == [
        (Level.INFO, "[info] hello world"),
        (Level.WARNING, "[warning] Danger, Mr. Robinson!"),
        (Level.FATAL, "[critical] meltdown"),
    ]
    assert event.breadcrumbs[0].data == {"foo": "bar"}
    assert event.breadcrumbs[1].data == {}
    assert isinstance(event.breadcrumbs[0].timestamp, int)


def test_breadcrumbs_are_cleared_after_capture(client: SentryClient, app_logger: logging.Logger):
    app_logger.info("before")
    client.capture_exception(RuntimeError("first"))
    client.capture_exception(RuntimeError("second"))

    first, second = client.capture.events
    assert len(first.breadcrumbs) == 1
    assert second.breadcrumbs == []


def test_non_primitive_extra_values_are_formatted(
    client: SentryClient, app_logger: logging.Logger
):
    app_logger.info("with payload", extra={"payload": [1, 2], "count": 3})

    assert client.breadcrumbs[0].data == {"payload": "array[2]", "count": 3}


def test_reporter_records_are_ignored(client: SentryClient):
    handler = BreadcrumbHandler(client)
    record = logging.LogRecord(
        "sentry_reporter.capture", logging.ERROR, __file__, 1, "Unable to send", (), None
    )

    handler.handle(record)

    assert client.breadcrumbs == []


def test_custom_log_levels(client: SentryClient):
    handler = BreadcrumbHandler(client, log_levels={logging.INFO: Level.DEBUG})
    record = logging.LogRecord("app", logging.INFO, __file__, 1, "quiet", (), None)

    handler.handle(record)

    assert client.breadcrumbs[0].level == "debug"
    assert client.breadcrumbs[0].message == "[info] quiet"
