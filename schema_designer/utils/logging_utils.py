import logging
import sys
from typing import Optional


DEFAULT_LOG_FORMAT = "%(name)s - %(levelname)s - %(message)s"


class _MaxLevelFilter(logging.Filter):
    def __init__(self, max_level: int) -> None:
        super().__init__()
        self._max_level = max_level

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno <= self._max_level


def configure_split_stream_logging(
    *,
    level: int = logging.INFO,
    stderr_level: int = logging.WARNING,
    formatter: Optional[logging.Formatter] = None,
    logger_name: Optional[str] = None,
) -> logging.Logger:
    """Configure compiler logging:

    - DEBUG/INFO go to stdout
    - WARNING/ERROR/CRITICAL go to stderr

    With ``logger_name`` only that logger is configured (and stops propagating),
    which keeps the checker CLI from touching the host application's root logger.
    """

    logger = logging.getLogger(logger_name)
    logger.handlers.clear()
    logger.setLevel(level)
    if logger_name:
        logger.propagate = False

    if formatter is None:
        formatter = logging.Formatter(DEFAULT_LOG_FORMAT)

    if stderr_level < logging.DEBUG:
        stderr_level = logging.DEBUG

    stdout_handler = logging.StreamHandler(stream=sys.stdout)
    stdout_handler.setLevel(logging.DEBUG)
    stdout_handler.addFilter(_MaxLevelFilter(stderr_level - 1))
    stdout_handler.setFormatter(formatter)

    stderr_handler = logging.StreamHandler(stream=sys.stderr)
    stderr_handler.setLevel(stderr_level)
    stderr_handler.setFormatter(formatter)

    logger.addHandler(stdout_handler)
    logger.addHandler(stderr_handler)
    return logger
