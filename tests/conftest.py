"""Shared test configuration and fixtures."""

import logging

import pytest

from contextguard.config import reset_settings
from contextguard.logging_config import ROOT_LOGGER_NAME


@pytest.fixture(autouse=True)
def isolate_global_state():
    """Reset cached settings and the contextguard logger around each test."""
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    handlers, level, propagate = list(logger.handlers), logger.level, logger.propagate
    reset_settings()
    yield
    reset_settings()
    logger.handlers[:] = handlers
    logger.setLevel(level)
    logger.propagate = propagate
