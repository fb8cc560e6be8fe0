"""Logging setup for CaloriTrack using loguru."""

import sys
from typing import Optional

from loguru import logger


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    fmt: str = "<green>{time:HH:mm:ss}</green> <level>[{level.name}]</level> {name}: {message}",
) -> None:
    """Replace loguru's default sink with a stderr sink (and optional file)."""
    logger.remove()
    logger.add(sys.stderr, level=level, format=fmt)

    if log_file:
        logger.add(
            log_file,
            level=level,
            format="{time:YYYY-MM-DD HH:mm:ss} | {level} | {name} | {message}",
            rotation="10 MB",
            retention="7 days",
        )
