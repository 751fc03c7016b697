import datetime
import platform
from unittest import mock

from sentry_reporter.extensions.environment import (
    EnvironmentReporter,
    create_os_context,
    create_runtime_context,
)
from sentry_reporter.models import Event


def test_create_runtime_context():
    with mock.patch("platform.python_version", return_value="3.12.1rc1"), mock.patch(
        "platform.python_implementation", return_value="CPython"
    ):
        context = create_runtime_context()

    assert context.model_dump() == {
        "name": "python",
        "version": "3.12.1",
        "raw_description": "CPython 3.12.1rc1",
    }


def test_create_os_context():
    uname = platform.uname_result("Linux", "host", "6.1.0-13", "#1 SMP Debian", "x86_64")
    with mock.patch("platform.uname", return_value=uname):
        context = create_os_context()

    assert context.model_dump() == {
        "name": "Linux",
        "version": "#1 SMP Debian",
        "build": "6.1.0-13",
    }


def test_environment_reporter():
    event = Event(event_id="a" * 32, timestamp=datetime.datetime.now(), message="boom")

    EnvironmentReporter().apply(event, RuntimeError("boom"), None)

    serialized = event.model_dump(mode="json")
    assert serialized["contexts"]["runtime"]["name"] == "python"
    assert platform.python_version().startswith(serialized["contexts"]["runtime"]["version"])
    assert serialized["contexts"]["os"]["name"] == platform.system()
    assert event.tags["server_name"] == platform.node()
