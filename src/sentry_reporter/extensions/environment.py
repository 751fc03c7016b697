import platform
import re

from sentry_reporter.extensions.base import Extension
from sentry_reporter.models import Event, OSContext, RuntimeContext
from sentry_reporter.request import InboundRequest


def create_runtime_context() -> RuntimeContext:
    raw_description = platform.python_version()
    match = re.match(r"^\d+(\.\d+){2}", raw_description)
    return RuntimeContext(
        name="python",
        version=match.group(0) if match else raw_description,
        raw_description=f"{platform.python_implementation()} {raw_description}",
    )


def create_os_context() -> OSContext:
    uname = platform.uname()
    return OSContext(name=uname.system, version=uname.version, build=uname.release)


class EnvironmentReporter(Extension):
    """
    Reports the operating system and interpreter the process runs on, plus the host
    name as the `server_name` tag.
    """

    def __init__(self):
        self.runtime = create_runtime_context()
        self.os = create_os_context()
        self.server_name = platform.node()

    def apply(
        self, event: Event, exception: BaseException, request: InboundRequest | None
    ) -> None:
        event.add_context(self.os)
        event.add_context(self.runtime)
        event.add_tag("server_name", self.server_name)
