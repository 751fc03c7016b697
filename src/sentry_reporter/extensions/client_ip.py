import ipaddress
import logging
import re

from sentry_reporter.extensions.base import Extension
from sentry_reporter.models import Event
from sentry_reporter.request import InboundRequest

logger = logging.getLogger(__name__)

UNKNOWN_IP = "unknown"

DEFAULT_USER_IP_HEADERS: list[tuple[str, re.Pattern]] = [
    # https://en.wikipedia.org/wiki/X-Forwarded-For
    ("X-Forwarded-For", re.compile(r"^([^,\s$]+)", re.IGNORECASE)),
    # https://tools.ietf.org/html/rfc7239
    ("Forwarded", re.compile(r"for=([^;,]+)", re.IGNORECASE)),
]

_PRIVATE_NETWORKS = [
    ipaddress.ip_network(n)
    for n in (
        "10.0.0.0/8",
        "172.16.0.0/12",
        "192.168.0.0/16",
        "fc00::/7",
    )
]

_RESERVED_NETWORKS = [
    ipaddress.ip_network(n)
    for n in (
        "0.0.0.0/8",
        "127.0.0.0/8",
        "169.254.0.0/16",
        "240.0.0.0/4",
        "::/128",
        "::1/128",
        "::ffff:0:0/96",
        "fe80::/10",
    )
]

_PORT_SUFFIX = re.compile(r":\d+$")


def is_valid_ip(ip: str) -> bool:
    """
    Accepts well formed IPv4 and IPv6 literals outside the private and reserved
    ranges.  Documentation ranges such as 192.0.2.0/24 are accepted.
    """
    try:
        address = ipaddress.ip_address(ip)
    except ValueError:
        return False

    return not any(
        address.version == network.version and address in network
        for network in _PRIVATE_NETWORKS + _RESERVED_NETWORKS
    )


def _clean_candidate(token: str) -> str:
    token = token.strip().strip('"')
    if token.startswith("["):
        # [v6]:port
        return token[1:].split("]", 1)[0]
    if token.count(":") == 1:
        # v4:port, a bare v6 literal has several colons and no port
        return _PORT_SUFFIX.sub("", token)
    return token


class ClientIPDetector(Extension):
    """
    Best effort detection of the client IP for diagnostics.

    REMOTE_ADDR wins when it is a public address; otherwise the proxy headers are
    searched in order and taken as given.
    """

    def __init__(self, user_ip_headers: list[tuple[str, re.Pattern]] | None = None):
        self.user_ip_headers = user_ip_headers or list(DEFAULT_USER_IP_HEADERS)

    def apply(
        self, event: Event, exception: BaseException, request: InboundRequest | None
    ) -> None:
        if request is not None:
            event.user.ip_address = self.detect_user_ip(request)

    def detect_user_ip(self, request: InboundRequest) -> str:
        remote_addr = request.server_params.get("REMOTE_ADDR")
        if remote_addr and is_valid_ip(remote_addr):
            return remote_addr

        for name, pattern in self.user_ip_headers:
            value = request.get_header(name)
            if value is None:
                continue

            for match in pattern.finditer(value):
                ip = _clean_candidate(match.group(1))
                if is_valid_ip(ip):
                    return ip

        return UNKNOWN_IP
