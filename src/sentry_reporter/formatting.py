import io
import logging
import socket
import types
from collections.abc import Mapping, Sequence, Set
from typing import Any

from sentry_reporter.utils import qualified_class_name

logger = logging.getLogger(__name__)

DEFAULT_MAX_STRING_LENGTH = 200

UNKNOWN_TYPE = "{unknown type}"

_ESCAPES = str.maketrans({"\\": "\\\\", '"': '\\"', "'": "\\'", "\0": "\\0"})


def format_values(
    values: Sequence[Any], max_string_length: int = DEFAULT_MAX_STRING_LENGTH
) -> list[str]:
    return [format_value(value, max_string_length) for value in values]


def format_data(
    data: Mapping[str, Any], max_string_length: int = DEFAULT_MAX_STRING_LENGTH
) -> dict[str, Any]:
    """
    Keeps JSON scalars as they are and formats every other value, so free-form data
    always serializes.
    """
    return {
        str(k): v
        if isinstance(v, (str, int, float, bool)) or v is None
        else format_value(v, max_string_length)
        for k, v in data.items()
    }


def format_value(value: Any, max_string_length: int = DEFAULT_MAX_STRING_LENGTH) -> str:
    """
    Renders a captured argument as a short, human-readable string.  Contents of
    collections are never inlined, and this never raises: anything that fails to
    format is reported as an unknown type.
    """
    try:
        return _format(value, max_string_length)
    except Exception:
        logger.debug("Unable to format value of type %s", type(value), exc_info=True)
        return UNKNOWN_TYPE


def _format(value: Any, max_string_length: int) -> str:
    if value is None:
        return "null"

    if isinstance(value, bool):
        return "true" if value else "false"

    if isinstance(value, int):
        return str(value)

    if isinstance(value, float):
        formatted = "%.6g" % value
        return formatted if float(formatted) == value else f"~{formatted}"

    if isinstance(value, str):
        return format_string(value, max_string_length)

    if isinstance(value, (Mapping, Sequence, Set)) and not isinstance(
        value, (bytes, bytearray, memoryview)
    ):
        return f"array[{len(value)}]"

    if isinstance(value, types.MethodType):
        owner = value.__self__
        if isinstance(owner, type):
            return f"{qualified_class_name(owner)}::{value.__func__.__name__}()"
        return f"{{{qualified_class_name(type(owner))}}}->{value.__func__.__name__}()"

    if isinstance(value, types.FunctionType) and _is_closure(value):
        code = value.__code__
        return f"{{Closure in {code.co_filename}({code.co_firstlineno})}}"

    if isinstance(value, (io.IOBase, socket.socket)):
        return _format_resource(value)

    if type(value) is object or isinstance(value, types.SimpleNamespace):
        return "{object}"

    return f"{{{qualified_class_name(type(value))}}}"


def format_string(value: str, max_string_length: int = DEFAULT_MAX_STRING_LENGTH) -> str:
    if len(value) > max_string_length:
        value = f"{value[:max_string_length]}...[{len(value)}]"
    return f'"{value.translate(_ESCAPES)}"'


def _is_closure(fn: types.FunctionType) -> bool:
    return fn.__name__ == "<lambda>" or "<locals>" in fn.__qualname__


def _format_resource(value: io.IOBase | socket.socket) -> str:
    if isinstance(value, socket.socket):
        return "{socket}" if value.fileno() != -1 else UNKNOWN_TYPE
    if value.closed:
        return UNKNOWN_TYPE
    return "{stream}"
