"""
Raw call-stack extraction from Python tracebacks.

A `CallSite` is one entry of the raw stack: where the frame was executing, what it
was executing, and the values of its parameters.  Stacks are returned innermost
call first (the raise site is element 0), which is the order the exception
reporter reverses into oldest-first stack traces.
"""

import abc
import dataclasses
import inspect
import logging
import types
from typing import Any, Callable, Iterator

logger = logging.getLogger(__name__)

INSTANCE_CONNECTOR = "->"
STATIC_CONNECTOR = "::"
CLOSURE = "{closure}"

_LOCALS = "<locals>"


@dataclasses.dataclass
class CallSite:
    filename: str | None
    lineno: int | None
    function: str | None = None
    class_name: str | None = None
    connector: str = INSTANCE_CONNECTOR
    is_closure: bool = False
    # parameter values in declaration order, excluding self / cls
    args: list[Any] | None = None
    code: types.CodeType | None = None
    target: Callable | None = None

    @property
    def is_method(self) -> bool:
        return self.class_name is not None and not self.is_closure

    def format_function(self) -> str | None:
        if self.is_closure:
            if self.function in (None, "<lambda>"):
                marker = CLOSURE
            else:
                marker = f"{{closure:{self.function}}}"
            if self.class_name:
                return f"{self.class_name}{self.connector}{marker}"
            return marker
        if self.class_name and self.function:
            return f"{self.class_name}{self.connector}{self.function}"
        return self.function


class SignatureResolver(abc.ABC):
    """
    Recovers parameter names for a call site.  Returning None means the names are
    unavailable, and values are reported under positional placeholders.
    """

    @abc.abstractmethod
    def parameter_names(self, call_site: CallSite) -> list[str] | None:
        pass


class IntrospectionSignatureResolver(SignatureResolver):
    def parameter_names(self, call_site: CallSite) -> list[str] | None:
        try:
            if call_site.code is not None:
                names = code_parameter_names(call_site.code)
            elif call_site.target is not None:
                names = list(inspect.signature(call_site.target).parameters)
            else:
                return None
        except (TypeError, ValueError):
            logger.debug(f"Cannot resolve parameter names of {call_site.function}", exc_info=True)
            return None

        if call_site.is_method and call_site.connector == INSTANCE_CONNECTOR:
            return names[1:]
        if call_site.is_method and names[:1] == ["cls"]:
            return names[1:]
        return names


class NullSignatureResolver(SignatureResolver):
    def parameter_names(self, call_site: CallSite) -> list[str] | None:
        return None


def code_parameter_names(code: types.CodeType) -> list[str]:
    count = code.co_argcount + code.co_kwonlyargcount
    if code.co_flags & inspect.CO_VARARGS:
        count += 1
    if code.co_flags & inspect.CO_VARKEYWORDS:
        count += 1
    return list(code.co_varnames[:count])


def exception_chain(exception: BaseException) -> Iterator[BaseException]:
    """
    Yields the exception and then each exception that led to it, following explicit
    causes first and implicit context unless it was suppressed.
    """
    seen: set[int] = set()
    current: BaseException | None = exception
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        yield current
        if current.__cause__ is not None:
            current = current.__cause__
        elif not current.__suppress_context__:
            current = current.__context__
        else:
            current = None


def extract_call_stack(exception: BaseException) -> list[CallSite]:
    sites = []
    tb = exception.__traceback__
    while tb is not None:
        sites.append(call_site_from_frame(tb.tb_frame, tb.tb_lineno))
        tb = tb.tb_next
    sites.reverse()
    return sites


def raise_site(exception: BaseException) -> tuple[str, int] | None:
    tb = exception.__traceback__
    if tb is None:
        return None
    while tb.tb_next is not None:
        tb = tb.tb_next
    return tb.tb_frame.f_code.co_filename, tb.tb_lineno


def call_site_from_frame(frame: types.FrameType, lineno: int | None) -> CallSite:
    code = frame.f_code
    qualname = getattr(code, "co_qualname", code.co_name)
    module = frame.f_globals.get("__name__")
    names = code_parameter_names(code)
    first = names[0] if names else None

    site = CallSite(
        filename=code.co_filename or None,
        lineno=lineno,
        function=code.co_name,
        code=code,
    )

    # methods of classes defined inside a function keep a dotted name after <locals>
    enclosing, _, local_name = qualname.rpartition(f".{_LOCALS}.")

    if code.co_name == "<lambda>" or (enclosing and "." not in local_name):
        site.is_closure = True
        owner = enclosing.rsplit(f".{_LOCALS}.", 1)[-1].rpartition(".")[0]
        if owner:
            site.class_name = _qualify(module, owner)
        site.connector = INSTANCE_CONNECTOR if "self" in frame.f_locals else STATIC_CONNECTOR
    else:
        owner, _, _ = local_name.rpartition(".")
        if owner:
            site.class_name = _qualify(module, owner)
            site.connector = INSTANCE_CONNECTOR if first == "self" else STATIC_CONNECTOR

    skip_first = site.is_method and first in ("self", "cls")
    site.args = _capture_args(frame, names[1:] if skip_first else names)
    return site


def _capture_args(frame: types.FrameType, names: list[str]) -> list[Any]:
    f_locals = frame.f_locals
    values = []
    for name in names:
        if name not in f_locals:
            break
        values.append(f_locals[name])
    return values


def _qualify(module: str | None, qualname: str) -> str:
    if not module or module in ("__main__", "builtins"):
        return qualname
    return f"{module}.{qualname}"
