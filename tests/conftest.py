from __future__ import annotations

import logging
from typing import Generator

import pytest

import buildkeeper.utils.logger as logger_module
from buildkeeper.utils.console import reconfigure_console


@pytest.fixture(autouse=True)
def reset_buildkeeper_output() -> Generator[None, None, None]:
    """Undo logging and console setup done by CLI invocations."""
    yield

    root_logger = logging.getLogger("buildkeeper")
    root_logger.handlers.clear()
    root_logger.setLevel(logging.NOTSET)
    root_logger.propagate = True
    logger_module._logging_configured = False
    reconfigure_console()
