from typing import Callable

from sentry_reporter.extensions.base import Extension
from sentry_reporter.models import Event
from sentry_reporter.request import InboundRequest


class CallableExtension(Extension):
    def __init__(self, fn: Callable[[Event, InboundRequest | None], None]):
        self.fn = fn

    def apply(
        self, event: Event, exception: BaseException, request: InboundRequest | None
    ) -> None:
        self.fn(event, request)
