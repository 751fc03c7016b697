"""
A small provider registry used to wire the reporter's collaborators together.

Providers are registered against the type they return:

@module.provider
def provide_capture(config: ReporterConfig = injected) -> EventCapture:
    ...

Any function or class wrapped with `inject` will have parameters whose default is
`injected` filled from the currently enabled modules.  Modules stack: enabling a
module (or entering it as a context manager) overrides providers of the modules
enabled before it, which is how tests swap in recording captures and test configs.
"""

import dataclasses
import functools
import inspect
import threading
from typing import Any, Callable, TypeVar

from typing_extensions import Annotated, get_args, get_origin

_A = TypeVar("_A")
_C = TypeVar("_C", bound=Callable[..., Any])


@dataclasses.dataclass(frozen=True)
class Labeled:
    """
    Distinguishes two providers of the same type, eg Annotated[str, Labeled("release")]
    """

    label: str


@dataclasses.dataclass(frozen=True)
class ProviderKey:
    concrete_type: Any
    label: str = ""

    @classmethod
    def from_annotation(cls, source: Any) -> "ProviderKey":
        origin = get_origin(source)
        if origin is Annotated:
            concrete, *metadata = get_args(source)
            inner = cls.from_annotation(concrete)
            assert not inner.label, f"Cannot key {source}: nested Labeled annotations"
            label = next((a.label for a in metadata if isinstance(a, Labeled)), "")
            return dataclasses.replace(inner, label=label)

        assert (
            origin is None
        ), f"Cannot key {source}, only concrete types or Annotated concrete types are supported"
        return cls(concrete_type=source)

    @classmethod
    def from_factory(cls, factory: Callable) -> "ProviderKey":
        if inspect.isclass(factory):
            return cls.from_annotation(factory)

        argspec = inspect.getfullargspec(factory)
        rv = argspec.annotations.get("return", None)
        assert rv is not None, f"Cannot register {factory} without a return annotation"

        num_defaults = len(argspec.defaults or ())
        assert num_defaults >= len(argspec.args), "Providers cannot have required positional args"
        assert len(argspec.kwonlydefaults or {}) >= len(
            argspec.kwonlyargs
        ), "Providers cannot have required keyword args"
        return cls.from_annotation(rv)


class FactoryNotFound(Exception):
    pass


@dataclasses.dataclass
class Module:
    registry: dict[ProviderKey, Callable[[], Any]] = dataclasses.field(default_factory=dict)

    def provider(self, c: _C) -> _C:
        c = inject(c)
        key = ProviderKey.from_factory(c)
        assert key not in self.registry, f"{key.concrete_type} already has a provider"
        self.registry[key] = c
        return c

    def constant(self, annotation: Any, val: _A) -> _A:
        self.registry[ProviderKey.from_annotation(annotation)] = lambda: val
        return val

    def enable(self) -> "Injector":
        injector = Injector(self, _cur.injector)
        _cur.injector = injector
        return injector

    def __enter__(self) -> "Injector":
        return self.enable()

    def __exit__(self, exc_type, exc_val, exc_tb):
        assert (
            _cur.injector is not None and _cur.injector.module is self
        ), "Injector stack was modified out of order"
        _cur.injector = _cur.injector.parent


class _Injected:
    """
    Marker default: the parameter is resolved from the active injector when the
    caller does not pass it explicitly.
    """

    def __repr__(self):
        return "injected"


injected: Any = _Injected()


def inject(c: _A) -> _A:
    original = c
    target: Any = c.__init__ if inspect.isclass(c) else c  # type: ignore[misc]
    argspec = inspect.getfullargspec(target)

    positional = []
    if argspec.defaults:
        offset = len(argspec.args) - len(argspec.defaults)
        positional = [
            (offset + i, argspec.args[offset + i])
            for i, default in enumerate(argspec.defaults)
            if default is injected
        ]
    keyword = [k for k, v in (argspec.kwonlydefaults or {}).items() if v is injected]

    def lookup(name: str) -> Any:
        try:
            annotation = argspec.annotations[name]
        except KeyError:
            raise AssertionError(f"Cannot inject {name}, it has no annotation")
        return resolve(annotation)

    @functools.wraps(target)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        for idx, name in positional:
            if len(args) <= idx and name not in kwargs:
                kwargs[name] = lookup(name)
        for name in keyword:
            if name not in kwargs:
                kwargs[name] = lookup(name)
        return target(*args, **kwargs)

    if inspect.isclass(original):
        return type(original.__name__, (original,), {"__init__": wrapper})  # type: ignore
    return wrapper  # type: ignore


def resolve(source: Any) -> Any:
    if _cur.injector is None:
        raise FactoryNotFound(f"Cannot resolve {source}, no module is enabled")

    key = ProviderKey.from_annotation(source)
    if key in _cur.resolving:
        chain = " -> ".join(str(k.concrete_type) for k in _cur.resolving)
        raise FactoryNotFound(f"Circular dependency: {chain} -> {key.concrete_type}")

    _cur.resolving.append(key)
    try:
        return _cur.injector.get(key)
    finally:
        _cur.resolving.remove(key)


@dataclasses.dataclass
class Injector:
    module: Module
    parent: "Injector | None"
    cache: dict[ProviderKey, Any] = dataclasses.field(default_factory=dict)

    def get(self, key: ProviderKey) -> Any:
        if key in self.cache:
            return self.cache[key]

        factory = self.module.registry.get(key)
        if factory is None:
            if self.parent is None:
                raise FactoryNotFound(f"No provider registered for {key.concrete_type}")
            return self.parent.get(key)

        rv = self.cache[key] = factory()
        return rv


class _Cur(threading.local):
    injector: Injector | None = None

    def __init__(self):
        self.resolving: list[ProviderKey] = []


_cur = _Cur()
