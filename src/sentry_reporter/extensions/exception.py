import logging
from typing import Iterable

from sentry_reporter.errors import SeverityError
from sentry_reporter.extensions.base import Extension
from sentry_reporter.extensions.root_path import normalize_root_path, remove_root_path
from sentry_reporter.formatting import DEFAULT_MAX_STRING_LENGTH, format_values
from sentry_reporter.models import (
    Event,
    ExceptionInfo,
    ExceptionList,
    Level,
    StackFrame,
    StackTrace,
)
from sentry_reporter.request import InboundRequest
from sentry_reporter.source_context import (
    DEFAULT_CONTEXT_LINES,
    FILTERED_FILE,
    is_filtered,
    load_context,
)
from sentry_reporter.stacktrace import (
    CallSite,
    IntrospectionSignatureResolver,
    SignatureResolver,
    exception_chain,
    extract_call_stack,
)
from sentry_reporter.utils import qualified_class_name

logger = logging.getLogger(__name__)

# placeholder for frames without a source location
NO_FILE = "{no file}"

# stdlib logging level of a SeverityError (or WARNING for Warning instances) -> event level
DEFAULT_ERROR_LEVELS: dict[int, Level] = {
    logging.CRITICAL: Level.FATAL,
    logging.ERROR: Level.ERROR,
    logging.WARNING: Level.WARNING,
    logging.INFO: Level.INFO,
    logging.DEBUG: Level.DEBUG,
}


class ExceptionReporter(Extension):
    """
    Reports the exception chain with stack traces, source context and argument values.

    `root_path`, if given, is stripped from filenames in the trace.  `filters` are glob
    patterns matched against absolute source paths: matching frames report neither
    source lines nor argument values, so files that bootstrap secrets never show up
    in a report.
    """

    def __init__(
        self,
        root_path: str | None = None,
        max_string_length: int = DEFAULT_MAX_STRING_LENGTH,
        filters: Iterable[str] = (),
        context_lines: int = DEFAULT_CONTEXT_LINES,
        signature_resolver: SignatureResolver | None = None,
        error_levels: dict[int, Level] | None = None,
    ):
        self.root_path = normalize_root_path(root_path) if root_path else None
        self.max_string_length = max_string_length
        self.filters = list(filters)
        self.context_lines = context_lines
        self.signature_resolver = signature_resolver or IntrospectionSignatureResolver()
        self.error_levels = dict(DEFAULT_ERROR_LEVELS if error_levels is None else error_levels)

    def apply(
        self, event: Event, exception: BaseException, request: InboundRequest | None
    ) -> None:
        severity = self.severity_of(exception)
        if severity is not None:
            event.level = self.error_levels.get(severity, Level.ERROR)

        event.exception = self.create_exception_list(exception)

    def severity_of(self, exception: BaseException) -> int | None:
        if isinstance(exception, SeverityError):
            return exception.severity
        if isinstance(exception, Warning):
            return logging.WARNING
        return None

    def create_exception_list(self, exception: BaseException) -> ExceptionList:
        # collected from the caught exception back to the root cause, reported root cause first
        items = [self.create_exception_info(e) for e in exception_chain(exception)]
        items.reverse()
        return ExceptionList(values=items)

    def create_exception_info(self, exception: BaseException) -> ExceptionInfo:
        call_stack = extract_call_stack(exception)
        if not call_stack:
            # never raised, so there is no location to report
            call_stack = [CallSite(filename=None, lineno=0)]

        return ExceptionInfo(
            type=qualified_class_name(type(exception)),
            value=str(exception),
            stacktrace=self.create_stack_trace(call_stack),
        )

    def create_stack_trace(self, call_stack: list[CallSite]) -> StackTrace:
        frames = [self.create_stack_frame(call_site) for call_site in call_stack]
        frames.reverse()
        return StackTrace(frames=frames)

    def create_stack_frame(self, call_site: CallSite) -> StackFrame:
        filename = call_site.filename or NO_FILE
        lineno = call_site.lineno or 0

        frame = StackFrame(filename=filename, function=call_site.format_function(), lineno=lineno)

        if self.root_path:
            remove_root_path(frame, self.root_path)

        if is_filtered(filename, self.filters):
            frame.context_line = FILTERED_FILE
            return frame

        if filename != NO_FILE:
            load_context(frame, filename, lineno, self.context_lines)

        if call_site.args:
            frame.vars = self.extract_vars(call_site)

        return frame

    def extract_vars(self, call_site: CallSite) -> dict[str, str]:
        names = self.signature_resolver.parameter_names(call_site) or []
        values = format_values(call_site.args or [], self.max_string_length)

        return {
            names[index] if index < len(names) else f"#{index + 1}": value
            for index, value in enumerate(values)
        }
