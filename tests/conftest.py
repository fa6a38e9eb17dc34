import logging

import pytest

from showtrack.receipts.log import LOGGER_NAME


@pytest.fixture(autouse=True)
def _reset_logging():
    """Undo configure_logging() so later tests don't write to a closed stream."""
    yield
    logger = logging.getLogger(LOGGER_NAME)
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
