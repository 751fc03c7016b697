from sentry_reporter.extensions.base import Extension
from sentry_reporter.models import Event, StackFrame
from sentry_reporter.request import InboundRequest


def normalize_root_path(root_path: str) -> str:
    return root_path.rstrip("/\\") + "/"


def remove_root_path(frame: StackFrame, root_path: str):
    """
    Makes the frame's filename relative to `root_path` (which must end in a separator),
    keeping the full path in `abs_path`.  Frames outside the root are left alone.
    """
    if frame.filename and frame.filename.startswith(root_path):
        frame.abs_path = frame.filename
        frame.filename = frame.filename[len(root_path) :]


class RootPathRemover(Extension):
    """
    Strips a project root from the filenames of an already built exception list, for
    chains where the exception reporter itself was configured without a root.
    """

    def __init__(self, root_path: str):
        self.root_path = normalize_root_path(root_path)

    def apply(
        self, event: Event, exception: BaseException, request: InboundRequest | None
    ) -> None:
        if event.exception is None:
            return

        for exception_info in event.exception.values:
            for frame in exception_info.stacktrace.frames:
                remove_root_path(frame, self.root_path)
