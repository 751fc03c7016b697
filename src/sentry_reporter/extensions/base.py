import abc

from sentry_reporter.models import Event
from sentry_reporter.request import InboundRequest


class Extension(abc.ABC):
    """
    One enrichment step of the capture pipeline.  Extensions run in registration order,
    each mutating the same event, so later extensions see (and may override) what
    earlier ones set.
    """

    @abc.abstractmethod
    def apply(
        self, event: Event, exception: BaseException, request: InboundRequest | None
    ) -> None:
        pass
