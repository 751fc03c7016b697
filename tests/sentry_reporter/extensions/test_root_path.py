import datetime

from sentry_reporter.extensions.root_path import RootPathRemover, normalize_root_path
from sentry_reporter.models import (
    Event,
    ExceptionInfo,
    ExceptionList,
    StackFrame,
    StackTrace,
)


def test_normalize_root_path():
    assert normalize_root_path("/app") == "/app/"
    assert normalize_root_path("/app/") == "/app/"


def test_root_path_remover():
    frames = [
        StackFrame(filename="/app/src/views.py", lineno=3),
        StackFrame(filename="/usr/lib/python3/json/__init__.py", lineno=7),
        StackFrame(filename="{no file}", lineno=0),
    ]
    event = Event(
        event_id="a" * 32,
        timestamp=datetime.datetime.now(),
        message="boom",
        exception=ExceptionList(
            values=[
                ExceptionInfo(type="ValueError", value="boom", stacktrace=StackTrace(frames=frames))
            ]
        ),
    )

    RootPathRemover("/app").apply(event, RuntimeError("boom"), None)

    assert [(f.filename, f.abs_path) for f in frames] == [
        ("src/views.py", "/app/src/views.py"),
        ("/usr/lib/python3/json/__init__.py", None),
        ("{no file}", None),
    ]


def test_root_path_remover_without_exception():
    event = Event(event_id="a" * 32, timestamp=datetime.datetime.now(), message="boom")
    RootPathRemover("/app").apply(event, RuntimeError("boom"), None)
    assert event.exception is None
