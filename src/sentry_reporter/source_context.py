import fnmatch
import itertools
import logging
import os
from typing import Iterable

from sentry_reporter.models import StackFrame

logger = logging.getLogger(__name__)

FILTERED_FILE = "### FILTERED FILE ###"

DEFAULT_CONTEXT_LINES = 5


def is_filtered(filename: str, filters: Iterable[str]) -> bool:
    """
    True if the absolute filename matches one of the glob patterns.  Used to keep
    files that bootstrap secrets (settings, credentials) out of reported traces.
    """
    return any(fnmatch.fnmatchcase(filename, pattern) for pattern in filters)


def load_context(
    frame: StackFrame, filename: str, lineno: int, num_lines: int = DEFAULT_CONTEXT_LINES
):
    """
    Populates `context_line`, `pre_context` and `post_context` of the frame from the
    source file on disk.  Missing or unreadable files produce no context, and a read
    failure part way through keeps whatever was read up to that point.
    """
    if lineno < 1 or not os.path.isfile(filename) or not os.access(filename, os.R_OK):
        return

    start = max(1, lineno - num_lines)
    stop = lineno + num_lines

    try:
        with open(filename, encoding="utf-8", errors="replace") as fp:
            for current, line in enumerate(itertools.islice(fp, start - 1, stop), start):
                line = line.rstrip("\r\n")
                if current == lineno:
                    frame.context_line = line
                elif current < lineno:
                    frame.pre_context.append(line)
                else:
                    frame.post_context.append(line)
    except OSError:
        logger.debug(f"Unable to read source context from {filename}", exc_info=True)
