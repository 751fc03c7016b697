import logging
import os

import pytest

from sentry_reporter.client import client_stub_module, module
from sentry_reporter.configuration import configuration_test_module

logger = logging.getLogger(__name__)


@pytest.fixture(autouse=True)
def reset_environ():
    old_env = os.environ
    os.environ = dict(**old_env)
    try:
        yield
    finally:
        os.environ = old_env


@pytest.fixture(autouse=True)
def setup_modules(reset_environ):
    # Re-entering the default module gives every test fresh provider caches
    with module, configuration_test_module, client_stub_module:
        yield
