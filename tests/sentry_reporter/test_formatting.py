import io
import os
import socket
import types

import pytest

from sentry_reporter.formatting import UNKNOWN_TYPE, format_string, format_value, format_values


class Widget:
    def render(self):
        pass

    @classmethod
    def create(cls):
        pass


@pytest.mark.parametrize(
    "value,expected",
    [
        ([1, 2, 3], "array[3]"),
        ((1, 2), "array[2]"),
        ({"a": 1}, "array[1]"),
        (set(), "array[0]"),
        (True, "true"),
        (False, "false"),
        (None, "null"),
        (0, "0"),
        (-42, "-42"),
        (0.12345678, "~0.123457"),
        (0.42, "0.42"),
        (1.5, "1.5"),
        ("hello", '"hello"'),
        ("", '""'),
        (object(), "{object}"),
        (types.SimpleNamespace(a=1), "{object}"),
        (Widget(), f"{{{__name__}.Widget}}"),
        (b"bytes", "{bytes}"),
    ],
)
def test_format_value(value, expected):
    assert format_value(value) == expected


def test_format_value_truncates_long_strings():
    value = "x" * 250
    assert format_value(value, 200) == '"' + "x" * 200 + '...[250]"'
    assert format_value("x" * 200, 200) == '"' + "x" * 200 + '"'


def test_format_string_escapes_quotes_and_backslashes():
    assert format_string("it's") == '"it\\\'s"'
    assert format_string('say "hi"') == '"say \\"hi\\""'
    assert format_string("C:\\temp") == '"C:\\\\temp"'
    assert format_string("nul\0") == '"nul\\0"'


def test_format_methods():
    assert format_value(Widget().render) == f"{{{__name__}.Widget}}->render()"
    assert format_value(Widget.create) == f"{__name__}.Widget::create()"


def test_format_closures():
    fn = lambda: None  # noqa: E731

    def nested():
        pass

    line = fn.__code__.co_firstlineno
    assert format_value(fn) == f"{{Closure in {__file__}({line})}}"
    assert format_value(nested) == (
        f"{{Closure in {__file__}({nested.__code__.co_firstlineno})}}"
    )


def test_format_resources(tmp_path):
    with open(tmp_path / "stream.txt", "w") as fp:
        assert format_value(fp) == "{stream}"
    assert format_value(fp) == UNKNOWN_TYPE

    assert format_value(io.StringIO()) == "{stream}"

    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    try:
        assert format_value(sock) == "{socket}"
    finally:
        sock.close()
    assert format_value(sock) == UNKNOWN_TYPE


def test_format_value_never_raises():
    class BrokenList(list):
        def __len__(self):
            raise RuntimeError("boom")

    assert format_value(BrokenList()) == UNKNOWN_TYPE


def test_format_values():
    assert format_values([1, "a", None, [os.sep]], 10) == ["1", '"a"', "null", "array[1]"]
