import os

from sentry_reporter.models import StackFrame
from sentry_reporter.source_context import is_filtered, load_context


def write_lines(path, count: int):
    path.write_text("".join(f"line {n}\r\n" for n in range(1, count + 1)))
    return str(path)


def test_load_context(tmp_path):
    filename = write_lines(tmp_path / "source.py", 20)
    frame = StackFrame(filename=filename, lineno=10)

    load_context(frame, filename, 10, 3)

    assert frame.context_line == "line 10"
    assert frame.pre_context == ["line 7", "line 8", "line 9"]
    assert frame.post_context == ["line 11", "line 12", "line 13"]


def test_load_context_near_file_edges(tmp_path):
    filename = write_lines(tmp_path / "source.py", 4)

    first = StackFrame()
    load_context(first, filename, 1, 5)
    assert first.context_line == "line 1"
    assert first.pre_context == []
    assert first.post_context == ["line 2", "line 3", "line 4"]

    last = StackFrame()
    load_context(last, filename, 4, 2)
    assert last.pre_context == ["line 2", "line 3"]
    assert last.context_line == "line 4"
    assert last.post_context == []


def test_load_context_missing_or_unusable(tmp_path):
    frame = StackFrame()
    load_context(frame, str(tmp_path / "missing.py"), 3)
    load_context(frame, str(tmp_path), 3)
    load_context(frame, write_lines(tmp_path / "source.py", 5), 0)

    assert frame.context_line is None
    assert frame.pre_context == []
    assert frame.post_context == []


def test_load_context_past_end_of_file(tmp_path):
    filename = write_lines(tmp_path / "source.py", 3)
    frame = StackFrame()

    load_context(frame, filename, 7, 5)

    assert frame.context_line is None
    assert frame.pre_context == ["line 2", "line 3"]


def test_is_filtered():
    filters = ["*/config/*.py", "/etc/secrets.py"]

    assert is_filtered("/app/config/settings.py", filters)
    assert is_filtered("/etc/secrets.py", filters)
    assert not is_filtered("/app/views.py", filters)
    assert not is_filtered(os.path.join("app", "config.py"), filters)
    assert not is_filtered("/app/config/settings.py", [])
