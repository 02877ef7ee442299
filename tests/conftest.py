"""Shared pytest fixtures."""

import logging

import pytest


@pytest.fixture(autouse=True)
def reset_circoskit_logger():
    """Drop handlers the CLI attaches to streams that close with each invocation."""
    yield
    logger = logging.getLogger("circoskit")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
