import json
import logging
from enum import Enum

from pydantic import BaseModel

logger = logging.getLogger(__name__)


class ReporterJSONEncoder(json.JSONEncoder):
    def default(self, obj):
        if isinstance(obj, BaseModel):
            return obj.model_dump(mode="json")
        if isinstance(obj, Enum):
            return obj.value
        return super().default(obj)


def json_dumps(data, **kwargs) -> str:
    kwargs.setdefault("ensure_ascii", False)
    return json.dumps(data, cls=ReporterJSONEncoder, **kwargs)


def exception_formatter(exception: BaseException) -> str:
    return f"{type(exception).__module__}.{type(exception).__qualname__}: {exception}"


def qualified_class_name(cls: type) -> str:
    if cls.__module__ in ("builtins", "__main__"):
        return cls.__qualname__
    return f"{cls.__module__}.{cls.__qualname__}"
