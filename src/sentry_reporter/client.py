import datetime
import logging
import random
import time
import uuid
from typing import Any, Iterable

from sentry_reporter.capture import (
    BufferedEventCapture,
    DirectEventCapture,
    EventCapture,
    RecordingEventCapture,
)
from sentry_reporter.configuration import ReporterConfig
from sentry_reporter.dependency_injection import Module, injected
from sentry_reporter.dsn import DSN
from sentry_reporter.extensions.base import Extension
from sentry_reporter.extensions.client_ip import ClientIPDetector
from sentry_reporter.extensions.environment import EnvironmentReporter
from sentry_reporter.extensions.exception import ExceptionReporter
from sentry_reporter.extensions.request import RequestReporter
from sentry_reporter.extensions.sniffer import ClientSniffer
from sentry_reporter.formatting import DEFAULT_MAX_STRING_LENGTH, format_data
from sentry_reporter.models import Breadcrumb, Event, Level
from sentry_reporter.request import InboundRequest
from sentry_reporter.source_context import DEFAULT_CONTEXT_LINES
from sentry_reporter.stacktrace import raise_site

logger = logging.getLogger(__name__)

module = Module()
module.enable()

client_stub_module = Module()


def default_extensions(
    root_path: str | None = None,
    max_string_length: int = DEFAULT_MAX_STRING_LENGTH,
    filters: Iterable[str] = (),
    context_lines: int = DEFAULT_CONTEXT_LINES,
) -> list[Extension]:
    return [
        EnvironmentReporter(),
        RequestReporter(),
        ExceptionReporter(
            root_path=root_path,
            max_string_length=max_string_length,
            filters=filters,
            context_lines=context_lines,
        ),
        ClientSniffer(),
        ClientIPDetector(),
    ]


class SentryClient:
    """
    Assembles an Event for each captured exception and hands it to an `EventCapture`.

    The event starts out with its identity, timestamp, message and the breadcrumbs
    recorded since the previous capture; the extensions then run in order, each
    mutating the same event.  A client instance is not safe for concurrent use:
    the breadcrumb list is unsynchronized.
    """

    def __init__(
        self,
        capture: EventCapture,
        extensions: list[Extension] | None = None,
        sample_rate: float = 100.0,
        environment: str | None = None,
        release: str | None = None,
    ):
        self.capture = capture
        self.extensions = default_extensions() if extensions is None else list(extensions)
        self.sample_rate = sample_rate
        self.environment = environment
        self.release = release
        self.breadcrumbs: list[Breadcrumb] = []

    def capture_exception(
        self, exception: BaseException, request: InboundRequest | None = None
    ) -> str | None:
        """
        Reports the exception and returns the id of the event, or None when the
        exception was dropped by sampling.
        """
        if not self.should_sample():
            logger.debug(f"Dropped {type(exception).__name__} by sampling")
            return None

        event = self.create_event(exception)

        for extension in self.extensions:
            extension.apply(event, exception, request)

        self.capture.capture_event(event)

        return event.event_id

    def create_event(self, exception: BaseException) -> Event:
        site = raise_site(exception)

        event = Event(
            event_id=self.create_event_id(),
            timestamp=self.create_timestamp(),
            message=str(exception),
            transaction=f"{site[0]}#{site[1]}" if site else None,
            environment=self.environment,
            release=self.release,
        )

        event.breadcrumbs, self.breadcrumbs = self.breadcrumbs, []

        return event

    def should_sample(self) -> bool:
        if self.sample_rate >= 100:
            return True
        return random.random() * 100 < self.sample_rate

    def add_breadcrumb(
        self,
        message: str,
        level: Level | str = Level.INFO,
        data: dict[str, Any] | None = None,
        timestamp: float | None = None,
    ):
        if timestamp is None:
            timestamp = time.time()

        self.breadcrumbs.append(
            Breadcrumb(
                timestamp=int(timestamp),
                level=str(level),
                message=message,
                data=format_data(data or {}),
            )
        )

    def clear_breadcrumbs(self):
        self.breadcrumbs = []

    def create_event_id(self) -> str:
        return uuid.uuid4().hex

    def create_timestamp(self) -> datetime.datetime:
        return datetime.datetime.now(datetime.UTC)


@module.provider
def provide_event_capture(config: ReporterConfig = injected) -> EventCapture:
    capture: EventCapture
    if config.has_sentry_integration:
        capture = DirectEventCapture(
            DSN(config.SENTRY_DSN),
            proxy=config.SENTRY_HTTP_PROXY,
            timeout=config.SENTRY_HTTP_TIMEOUT,
        )
    else:
        capture = RecordingEventCapture()

    if config.SENTRY_BUFFERED:
        return BufferedEventCapture(capture)
    return capture


@module.provider
def provide_client(
    config: ReporterConfig = injected, capture: EventCapture = injected
) -> SentryClient:
    return SentryClient(
        capture,
        extensions=default_extensions(
            root_path=config.SENTRY_ROOT_PATH,
            max_string_length=config.SENTRY_MAX_STRING_LENGTH,
            filters=config.SENTRY_SOURCE_FILTERS,
            context_lines=config.SENTRY_CONTEXT_LINES,
        ),
        sample_rate=config.SENTRY_SAMPLE_RATE,
        environment=config.SENTRY_ENVIRONMENT,
        release=config.SENTRY_RELEASE,
    )


# Both names resolve to the same recorder, so tests can inspect what a resolved client captured
@client_stub_module.provider
def provide_recording_capture() -> RecordingEventCapture:
    return RecordingEventCapture()


@client_stub_module.provider
def provide_stub_capture(recording: RecordingEventCapture = injected) -> EventCapture:
    return recording
