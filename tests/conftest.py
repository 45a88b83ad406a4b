"""Shared fixtures."""

import logging

import pytest


@pytest.fixture(autouse=True)
def _reset_package_logger():
    """Undo logging setup done by CLI runs (handlers bound to captured streams)."""
    yield
    logger = logging.getLogger("funcstudy")
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
