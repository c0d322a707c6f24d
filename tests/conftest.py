import logging

import pytest


@pytest.fixture(autouse=True)
def restore_package_logger():
    """The CLI configures the package logger; undo it after each test."""
    logger = logging.getLogger("template_text")
    handlers, level, propagate = list(logger.handlers), logger.level, logger.propagate
    yield
    logger.handlers = handlers
    logger.setLevel(level)
    logger.propagate = propagate
