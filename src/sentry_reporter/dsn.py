import time
from urllib.parse import urlsplit

from sentry_reporter.errors import InvalidDSN
from sentry_reporter.version import CLIENT_NAME, VERSION

AUTH_HEADER_NAME = "X-Sentry-Auth"


class DSN:
    """
    A parsed DSN of the form `scheme://key@host/project_path`.
    """

    def __init__(self, dsn: str):
        self.dsn = dsn

        try:
            parts = urlsplit(dsn)
            port = parts.port
        except ValueError as e:
            raise InvalidDSN(f"Malformed DSN {dsn!r}: {e}") from e

        if not parts.scheme or not parts.hostname:
            raise InvalidDSN(f"DSN {dsn!r} requires a scheme and a host")
        if not parts.username:
            raise InvalidDSN(f"DSN {dsn!r} requires a public key")
        if not parts.path.strip("/"):
            raise InvalidDSN(f"DSN {dsn!r} requires a project path")

        self.key = parts.username
        host = parts.hostname if port is None else f"{parts.hostname}:{port}"
        self.url = f"{parts.scheme}://{host}/api{parts.path.rstrip('/')}/store/"

    def auth_header(self, timestamp: int | None = None) -> str:
        if timestamp is None:
            timestamp = self.get_time()
        return ", ".join(
            [
                "Sentry sentry_version=7",
                f"sentry_timestamp={timestamp}",
                f"sentry_key={self.key}",
                f"sentry_client={CLIENT_NAME}/{VERSION}",
            ]
        )

    def get_time(self) -> int:
        return int(time.time())

    def __repr__(self):
        return f"DSN({self.url!r})"
