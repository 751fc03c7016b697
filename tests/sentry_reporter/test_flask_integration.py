import pytest
from flask import Flask

from sentry_reporter.capture import BufferedEventCapture, RecordingEventCapture
from sentry_reporter.client import SentryClient
from sentry_reporter.dependency_injection import resolve
from sentry_reporter.flask_integration import init_app


def make_app() -> Flask:
    app = Flask(__name__)

    @app.route("/ok")
    def ok():
        return "ok"

    @app.route("/fail")
    def fail():
        raise ValueError("view failed")

    return app


def test_captures_unhandled_view_exceptions():
    app = make_app()
    client = init_app(app)

    response = app.test_client().get(
        "/fail?debug=1",
        headers={"User-Agent": "Snagglepuss"},
        environ_overrides={"REMOTE_ADDR": "192.0.2.43"},
    )

    assert response.status_code == 500
    assert client is resolve(SentryClient)
    assert app.extensions["sentry_reporter"] is client

    (event,) = resolve(RecordingEventCapture).events
    assert event.message == "view failed"
    assert event.request.url == "http://localhost/fail?debug=1"
    assert event.request.query_string == "debug=1"
    assert event.tags["site"] == "localhost"
    assert event.user.ip_address == "192.0.2.43"
    assert event.exception.values[-1].type == "ValueError"


def test_successful_requests_are_not_captured():
    app = make_app()
    init_app(app)

    assert app.test_client().get("/ok").status_code == 200
    assert resolve(RecordingEventCapture).events == []


def test_buffered_events_are_flushed_on_teardown():
    destination = RecordingEventCapture()
    client = SentryClient(BufferedEventCapture(destination), extensions=[])
    app = make_app()
    init_app(app, client)

    app.test_client().get("/fail")

    assert [e.message for e in destination.events] == ["view failed"]
    assert len(client.capture) == 0


def test_propagated_exceptions_are_still_captured():
    app = make_app()
    app.testing = True
    client = SentryClient(RecordingEventCapture(), extensions=[])
    init_app(app, client)

    with pytest.raises(ValueError):
        app.test_client().get("/fail")

    assert [e.message for e in client.capture.events] == ["view failed"]
