from sentry_reporter.extensions.base import Extension
from sentry_reporter.models import Event, Request
from sentry_reporter.request import InboundRequest


class RequestReporter(Extension):
    def apply(
        self, event: Event, exception: BaseException, request: InboundRequest | None
    ) -> None:
        if request is None:
            return

        event.add_tag("site", request.host)

        event.request = Request(
            url=request.url,
            method=request.method,
            query_string=request.query_string or None,
            cookies=dict(request.cookies),
            headers=dict(request.headers),
        )
