import logging

import pytest
from rich.logging import RichHandler

from gkeops.logger import level_for, setup_logger


@pytest.mark.parametrize(
    "verbose, debug, level",
    [
        (False, False, logging.ERROR),
        (True, False, logging.INFO),
        (False, True, logging.DEBUG),
        (True, True, logging.DEBUG),
    ],
)
def test_level_for(verbose, debug, level):
    assert level_for(verbose, debug) == level


def test_setup_logger_adds_one_handler():
    log = setup_logger("gkeops.test", level=logging.INFO)
    setup_logger("gkeops.test", level=logging.DEBUG)

    assert log.level == logging.DEBUG
    assert sum(isinstance(h, RichHandler) for h in log.handlers) == 1
