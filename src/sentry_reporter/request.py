import dataclasses
from typing import Mapping, Protocol, runtime_checkable
from urllib.parse import urlsplit

from werkzeug.wrappers import Request as WerkzeugBaseRequest


@runtime_checkable
class InboundRequest(Protocol):
    """
    The read-only view of an inbound HTTP request that extensions consume.  Headers
    are exposed with one combined value per name; `server_params` carries low level
    connection values such as REMOTE_ADDR.
    """

    @property
    def url(self) -> str: ...

    @property
    def method(self) -> str: ...

    @property
    def host(self) -> str: ...

    @property
    def query_string(self) -> str: ...

    @property
    def headers(self) -> Mapping[str, str]: ...

    @property
    def cookies(self) -> Mapping[str, str]: ...

    @property
    def server_params(self) -> Mapping[str, str]: ...

    def get_header(self, name: str) -> str | None: ...


def _find_header(headers: Mapping[str, str], name: str) -> str | None:
    name = name.lower()
    return next((v for k, v in headers.items() if k.lower() == name), None)


@dataclasses.dataclass
class SimpleRequest:
    method: str
    url: str
    # repeated headers may be given as lists, they are combined into one value
    headers: dict[str, str] = dataclasses.field(default_factory=dict)
    cookies: dict[str, str] = dataclasses.field(default_factory=dict)
    server_params: dict[str, str] = dataclasses.field(default_factory=dict)

    def __post_init__(self):
        headers = {}
        host = urlsplit(self.url).netloc
        if host and _find_header(self.headers, "Host") is None:
            headers["Host"] = host
        for name, value in self.headers.items():
            headers[name] = value if isinstance(value, str) else ", ".join(value)
        self.headers = headers

    @property
    def host(self) -> str:
        return urlsplit(self.url).hostname or ""

    @property
    def query_string(self) -> str:
        return urlsplit(self.url).query

    def get_header(self, name: str) -> str | None:
        return _find_header(self.headers, name)


class WerkzeugRequest:
    """
    Adapts a werkzeug (or Flask) request to `InboundRequest`.
    """

    def __init__(self, request: WerkzeugBaseRequest):
        self.request = request

    @property
    def url(self) -> str:
        return self.request.url

    @property
    def method(self) -> str:
        return self.request.method

    @property
    def host(self) -> str:
        return urlsplit(self.request.url).hostname or ""

    @property
    def query_string(self) -> str:
        return self.request.query_string.decode("latin-1")

    @property
    def headers(self) -> dict[str, str]:
        headers: dict[str, str] = {}
        for name in self.request.headers.keys():
            if name not in headers:
                headers[name] = ", ".join(self.request.headers.getlist(name))
        return headers

    @property
    def cookies(self) -> dict[str, str]:
        return dict(self.request.cookies)

    @property
    def server_params(self) -> dict[str, str]:
        return {k: v for k, v in self.request.environ.items() if isinstance(v, str)}

    def get_header(self, name: str) -> str | None:
        values = self.request.headers.getlist(name)
        return ", ".join(values) if values else None
