"""Shared logging configuration for HodlPlan.

Library modules only create ``logging.getLogger(__name__)`` loggers; call
``setup()`` once from an entry point (the CLI does) to get ISO-8601
timestamps on every log line.
"""

from __future__ import annotations

import logging
from typing import Union

_LOG_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"
_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S%z"


def setup(level: Union[str, int] = "WARNING", *, verbose: bool = False) -> None:
    """Configure the root logger with timestamped output.

    Args:
        level: Logging level name or number (e.g. ``AppSettings.log_level``).
        verbose: If True, force DEBUG regardless of *level*.
    """
    if verbose:
        level = logging.DEBUG
    elif isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.WARNING
    logging.basicConfig(
        level=level,
        format=_LOG_FORMAT,
        datefmt=_DATE_FORMAT,
        force=True,
    )
