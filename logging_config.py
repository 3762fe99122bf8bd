import logging
import sys

from config import LOG_LEVEL

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"


def get_logger(name: str = "skysmart", level: str = LOG_LEVEL) -> logging.Logger:
    """Named logger with a single stdout handler; safe to call again."""
    log = logging.getLogger(name)
    log.setLevel(getattr(logging, level.upper(), logging.INFO))

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    log.handlers = [handler]
    log.propagate = False
    return log


logger = get_logger()
