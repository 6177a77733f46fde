import logging

from rich.logging import RichHandler

LOGGER_NAME = "gkeops"


def level_for(verbose: bool = False, debug: bool = False) -> int:
    """--debug shows provider calls, --verbose shows each provisioning step."""
    if debug:
        return logging.DEBUG
    if verbose:
        return logging.INFO
    return logging.ERROR


def setup_logger(name: str = LOGGER_NAME, level: int = logging.ERROR) -> logging.Logger:
    log = logging.getLogger(name)
    log.setLevel(level)
    if not any(isinstance(h, RichHandler) for h in log.handlers):
        handler = RichHandler(rich_tracebacks=True, markup=True, show_path=False)
        handler.setFormatter(logging.Formatter("%(message)s"))
        log.addHandler(handler)
    return log


logger = setup_logger()
