"""Process-level logging setup."""

from __future__ import annotations

import sys
from typing import Optional

from loguru import logger

from . import config

_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level:<7} | {name}:{function}:{line} | {message}"
_CONFIGURED_LEVEL: Optional[str] = None


def configure(level: Optional[str] = None) -> None:
    """Replace loguru's default sink with one stderr sink at *level*.

    The level defaults to ``PORTHOS_LOG_LEVEL``. Calling again with the same
    level is a no-op.
    """

    global _CONFIGURED_LEVEL

    level = (level or config.log_level).upper()
    if level == _CONFIGURED_LEVEL:
        return

    logger.remove()
    logger.add(
        sys.stderr,
        level=level,
        format=_FORMAT,
        backtrace=False,
        diagnose=False,
    )
    _CONFIGURED_LEVEL = level
