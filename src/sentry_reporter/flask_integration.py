import logging

import flask
from flask import Flask, got_request_exception

from sentry_reporter.capture import BufferedEventCapture
from sentry_reporter.client import SentryClient
from sentry_reporter.dependency_injection import inject, injected
from sentry_reporter.request import WerkzeugRequest

logger = logging.getLogger(__name__)


@inject
def init_app(app: Flask, client: SentryClient = injected) -> SentryClient:
    """
    Reports exceptions that escape the app's views.  With a buffered capture, events
    are sent from `teardown_request`, once the response has been produced.
    """

    def capture_request_exception(sender: Flask, exception: BaseException, **extra):
        request = WerkzeugRequest(flask.request) if flask.has_request_context() else None
        event_id = client.capture_exception(exception, request)
        if event_id:
            logger.debug(f"Captured {type(exception).__name__} as event {event_id}")

    def flush_buffered_events(exception: BaseException | None):
        if isinstance(client.capture, BufferedEventCapture):
            client.capture.flush()

    # blinker holds weak references by default, the closure must outlive this call
    got_request_exception.connect(capture_request_exception, app, weak=False)
    app.teardown_request(flush_buffered_events)

    app.extensions["sentry_reporter"] = client
    return client
