import abc
import dataclasses
import logging

import requests

from sentry_reporter.dsn import AUTH_HEADER_NAME, DSN
from sentry_reporter.errors import TransportError
from sentry_reporter.models import Event
from sentry_reporter.utils import exception_formatter, json_dumps

logger = logging.getLogger(__name__)


class EventCapture(abc.ABC):
    @abc.abstractmethod
    def capture_event(self, event: Event) -> None:
        pass


def serialize_event(event: Event) -> str:
    return json_dumps(event.model_dump(mode="json"), separators=(",", ":"))


class DirectEventCapture(EventCapture):
    """
    Sends each event to the collector with one blocking HTTP request.  Failures are
    logged and dropped; reporting never raises into the application.
    """

    def __init__(self, dsn: DSN, proxy: str | None = None, timeout: float = 5.0):
        self.dsn = dsn
        self.proxy = proxy
        self.timeout = timeout

    def capture_event(self, event: Event) -> None:
        try:
            body = serialize_event(event)
        except (TypeError, ValueError) as e:
            logger.error(f"Unable to serialize event {event.event_id}: {exception_formatter(e)}")
            return

        headers = {
            "Accept": "application/json",
            "Content-Type": "application/json",
            AUTH_HEADER_NAME: self.dsn.auth_header(),
        }

        try:
            self.fetch("POST", self.dsn.url, body, headers)
        except TransportError as e:
            logger.error(f"Unable to send event {event.event_id} to Sentry: {e}")

    def fetch(self, method: str, url: str, body: str, headers: dict[str, str]) -> str:
        """
        Performs the HTTP request and returns the response body, raising TransportError
        for connection failures and non 2xx statuses.
        """
        proxies = {"http": self.proxy, "https": self.proxy} if self.proxy else None
        try:
            response = requests.request(
                method,
                url,
                data=body.encode("utf-8"),
                headers=headers,
                proxies=proxies,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise TransportError(f"{method} {url} failed: {exception_formatter(e)}") from e

        if not response.ok:
            raise TransportError(
                f"Unexpected response status {response.status_code} ({method} {url})",
                status_code=response.status_code,
            )
        return response.text


class BufferedEventCapture(EventCapture):
    """
    Holds events in memory until `flush()` forwards them, in capture order, to the
    destination.  This lets an application send its own response first and report
    afterwards.  Not safe for concurrent use.
    """

    def __init__(self, destination: EventCapture):
        self.destination = destination
        self.events: list[Event] = []

    def capture_event(self, event: Event) -> None:
        self.events.append(event)

    def flush(self) -> None:
        events, self.events = self.events, []
        if events:
            logger.debug(f"Flushing {len(events)} buffered event(s)")
        for event in events:
            self.destination.capture_event(event)

    def __len__(self) -> int:
        return len(self.events)


@dataclasses.dataclass
class RecordingEventCapture(EventCapture):
    """
    Keeps every captured event instead of sending it.  Used when the integration is
    disabled, and as the capture in tests.
    """

    events: list[Event] = dataclasses.field(default_factory=list)

    def capture_event(self, event: Event) -> None:
        logger.debug(f"Event {event.event_id} recorded, not sent")
        self.events.append(event)
