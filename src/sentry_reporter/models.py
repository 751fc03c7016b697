"""
Wire models for the v7 store API.

Every model drops null and empty fields when serialized, so an Event only carries
what the extensions actually found.  The models validate their own serialized
form, which is how buffered or persisted events are read back.
"""

import datetime
from enum import StrEnum
from typing import Any, ClassVar

from pydantic import (
    BaseModel,
    Field,
    SerializeAsAny,
    field_serializer,
    field_validator,
    model_serializer,
)

DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"

PLATFORM = "python"


class Level(StrEnum):
    FATAL = "fatal"
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"
    DEBUG = "debug"


def _is_empty(value: Any) -> bool:
    return value is None or value == "" or value == [] or value == {}


class WireModel(BaseModel):
    @model_serializer(mode="wrap")
    def _omit_empty(self, handler):
        return {k: v for k, v in handler(self).items() if not _is_empty(v)}


class StackFrame(WireModel):
    filename: str | None = None
    abs_path: str | None = None
    function: str | None = None
    lineno: int | None = None
    context_line: str | None = None
    pre_context: list[str] = Field(default_factory=list)
    post_context: list[str] = Field(default_factory=list)
    # parameter name (or "#<position>") -> formatted value
    vars: dict[str, str] = Field(default_factory=dict)


class StackTrace(WireModel):
    # oldest call first, the raise site last
    frames: list[StackFrame] = Field(default_factory=list)
    frames_omitted: tuple[int, int] | None = None

    def set_frames_omitted(self, start: int, end: int):
        self.frames_omitted = (start, end)


class ExceptionInfo(WireModel):
    type: str
    value: str
    stacktrace: StackTrace


class ExceptionList(WireModel):
    values: list[ExceptionInfo] = Field(min_length=1)


class Request(WireModel):
    url: str
    method: str
    query_string: str | None = None
    cookies: dict[str, str] = Field(default_factory=dict)
    headers: dict[str, str] = Field(default_factory=dict)
    data: dict[str, Any] | list[Any] | str | None = None
    env: dict[str, str] = Field(default_factory=dict)


class UserInfo(WireModel):
    id: str | None = None
    username: str | None = None
    email: str | None = None
    ip_address: str | None = None


class Breadcrumb(WireModel, frozen=True):
    # unix time
    timestamp: int
    level: str
    message: str
    data: dict[str, Any] = Field(default_factory=dict)


class Context(WireModel):
    """
    Base of the typed context bundles.  Each subclass declares the `context_type` it is
    keyed by in `Event.contexts`; declaring one registers the subclass so serialized
    contexts can be read back into the right type.
    """

    context_type: ClassVar[str]
    registry: ClassVar[dict[str, type["Context"]]] = {}

    @classmethod
    def __pydantic_init_subclass__(cls, **kwargs: Any) -> None:
        super().__pydantic_init_subclass__(**kwargs)
        if "context_type" in cls.__dict__:
            Context.registry[cls.context_type] = cls


class BrowserContext(Context):
    context_type: ClassVar[str] = "browser"

    name: str | None = None
    version: str | None = None


class OSContext(Context):
    context_type: ClassVar[str] = "os"

    name: str | None = None
    version: str | None = None
    build: str | None = None


class RuntimeContext(Context):
    context_type: ClassVar[str] = "runtime"

    name: str | None = None
    version: str | None = None
    raw_description: str | None = None


class Event(WireModel):
    event_id: str
    timestamp: datetime.datetime
    message: str
    level: Level = Level.ERROR
    # file#line of the raise site; a stand-in until real transaction names are reported
    transaction: str | None = None
    platform: str = PLATFORM
    logger: str | None = None
    release: str | None = None
    environment: str | None = None
    tags: dict[str, str] = Field(default_factory=dict)
    exception: ExceptionList | None = None
    request: Request | None = None
    user: UserInfo = Field(default_factory=UserInfo)
    contexts: dict[str, SerializeAsAny[Context]] = Field(default_factory=dict)
    modules: dict[str, str] = Field(default_factory=dict)
    extra: dict[str, Any] = Field(default_factory=dict)
    breadcrumbs: list[Breadcrumb] = Field(default_factory=list)

    def add_tag(self, name: str, value: str):
        self.tags[name] = value

    def add_context(self, context: Context):
        self.contexts[context.context_type] = context

    @field_serializer("timestamp")
    def _serialize_timestamp(self, timestamp: datetime.datetime) -> str:
        if timestamp.tzinfo is not None:
            timestamp = timestamp.astimezone(datetime.UTC)
        return timestamp.strftime(DATE_FORMAT)

    @field_serializer("breadcrumbs", mode="wrap")
    def _serialize_breadcrumbs(self, breadcrumbs: list[Breadcrumb], handler):
        values = handler(breadcrumbs)
        return {"values": values} if values else None

    @field_validator("breadcrumbs", mode="before")
    @classmethod
    def _validate_breadcrumbs(cls, breadcrumbs: Any) -> Any:
        if isinstance(breadcrumbs, dict):
            return breadcrumbs.get("values", [])
        return breadcrumbs

    @field_validator("contexts", mode="before")
    @classmethod
    def _validate_contexts(cls, contexts: Any) -> Any:
        if not isinstance(contexts, dict):
            return contexts

        rv: dict[str, Context] = {}
        for key, value in contexts.items():
            if isinstance(value, Context):
                rv[key] = value
                continue
            context_cls = Context.registry.get(key)
            if context_cls is None:
                raise ValueError(f"Unknown context type {key!r}")
            rv[key] = context_cls.model_validate(value)
        return rv
