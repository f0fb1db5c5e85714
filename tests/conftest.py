"""Shared fixtures."""

import logging

import pytest

from vecraster.utils import logging_config
from vecraster.utils.logging_config import ContextFormatter


@pytest.fixture
def restore_logging():
    """Undo setup_logging() side effects (handlers, level, context)."""
    root = logging.getLogger()
    level = root.level
    context = logging_config.get_context()

    yield

    for h in list(root.handlers):
        if isinstance(h.formatter, ContextFormatter):
            root.removeHandler(h)
            h.close()
    root.setLevel(level)
    logging_config.pop_context()
    logging_config.push_context(**context)
    logging.captureWarnings(False)
