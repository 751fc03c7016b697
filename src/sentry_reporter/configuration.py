import logging
import os.path
from typing import Annotated

from pydantic import BaseModel, BeforeValidator, Field

from sentry_reporter.dependency_injection import Module

logger = logging.getLogger(__name__)

configuration_module = Module()
configuration_test_module = Module()


def parse_int_from_env(data: str) -> int:
    return int(data)


def parse_float_from_env(data: str) -> float:
    return float(data)


def parse_list_from_env(data: str | list[str]) -> list[str]:
    if isinstance(data, list):
        return data
    return data.split()


def parse_bool_from_env(data: str | bool) -> bool:
    if isinstance(data, bool):
        return data
    return data.lower() in ("yes", "true", "t", "y", "1", "on")


def as_absolute_path(path: str | None) -> str | None:
    if not path:
        return None
    return os.path.abspath(path)


ParseInt = Annotated[int, BeforeValidator(parse_int_from_env)]
ParseFloat = Annotated[float, BeforeValidator(parse_float_from_env)]
ParseList = Annotated[list[str], BeforeValidator(parse_list_from_env)]
ParseBool = Annotated[bool, BeforeValidator(parse_bool_from_env)]
ParsePath = Annotated[str | None, BeforeValidator(as_absolute_path)]


class ReporterConfig(BaseModel):
    SENTRY_DSN: str = ""
    SENTRY_ENVIRONMENT: str | None = None
    SENTRY_RELEASE: str | None = None

    # Percentage of exceptions that are reported at all, 0 - 100
    SENTRY_SAMPLE_RATE: ParseFloat = 100.0

    SENTRY_ROOT_PATH: ParsePath = None
    SENTRY_SOURCE_FILTERS: ParseList = Field(default_factory=list)
    SENTRY_MAX_STRING_LENGTH: ParseInt = 200
    SENTRY_CONTEXT_LINES: ParseInt = 5

    SENTRY_HTTP_PROXY: str | None = None
    SENTRY_HTTP_TIMEOUT: ParseFloat = 5.0

    # Hold events in memory until the buffer is explicitly flushed
    SENTRY_BUFFERED: ParseBool = False

    NO_SENTRY_INTEGRATION: ParseBool = False

    @property
    def has_sentry_integration(self) -> bool:
        return not self.NO_SENTRY_INTEGRATION

    def do_validation(self):
        assert (
            0 <= self.SENTRY_SAMPLE_RATE <= 100
        ), f"SENTRY_SAMPLE_RATE must be a percentage, got {self.SENTRY_SAMPLE_RATE}"
        assert self.SENTRY_MAX_STRING_LENGTH > 0, "SENTRY_MAX_STRING_LENGTH must be positive"

        if self.has_sentry_integration:
            assert self.SENTRY_DSN, "SENTRY_DSN is required unless NO_SENTRY_INTEGRATION is set"
        elif self.SENTRY_DSN:
            logger.warning("SENTRY_DSN is configured but NO_SENTRY_INTEGRATION disables sending")


@configuration_module.provider
def load_from_environment(environ: dict[str, str] | None = None) -> ReporterConfig:
    source = os.environ if environ is None else environ
    return ReporterConfig.model_validate(
        {k: v for k, v in source.items() if k in ReporterConfig.model_fields}
    )


@configuration_test_module.provider
def provide_test_defaults() -> ReporterConfig:
    """
    Load defaults into the base config useful for tests
    """

    base = load_from_environment()

    base.NO_SENTRY_INTEGRATION = True
    base.SENTRY_DSN = "https://0123456789abcdef0123456789abcdef@sentry.example.com/1234567"
    base.SENTRY_SAMPLE_RATE = 100.0
    base.SENTRY_BUFFERED = False

    return base


configuration_module.enable()
