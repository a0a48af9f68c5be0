"""
Logging setup built on loguru.

Call setup_logging() once at process start; modules grab a bound logger
with get_logger(__name__).
"""

import sys
from typing import Optional

from loguru import logger

_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{extra[name]}</cyan> - <level>{message}</level>"
)

logger.configure(extra={"name": "shishatimer"})


def setup_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    """
    Replace loguru's default sink with a formatted stderr sink.

    Args:
        level: Minimum level for stderr and file output
        log_file: Optional path for a rotating log file
    """
    logger.remove()
    logger.add(sys.stderr, level=level.upper(), format=_FORMAT)

    if log_file:
        logger.add(
            log_file,
            level=level.upper(),
            format=_FORMAT,
            rotation="10 MB",
            retention=2,
            encoding="utf-8",
        )


def get_logger(name: str):
    """Return a logger bound to the given module name."""
    return logger.bind(name=name)
