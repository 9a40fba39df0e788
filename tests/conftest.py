"""Fixtures and configuration for pytest."""

import sys

import pytest
from loguru import logger


@pytest.fixture(autouse=True)
def reset_logger():
    """Restore the default loguru sink after each test.

    The CLI replaces the sink with one bound to the test runner's stderr.
    """
    yield
    logger.remove()
    logger.add(sys.stderr)
