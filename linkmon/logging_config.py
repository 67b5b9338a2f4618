"""Logging setup driven by LINKMON_LOG_LEVEL."""

import logging
import os
import sys

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def configure_logging(environ=None) -> int:
    """Point the root logger at stderr with the level from LINKMON_LOG_LEVEL.

    An unset or blank variable means INFO. DEBUG adds one line per status
    and metrics tick; WARNING keeps only swallowed platform failures.

    Returns:
        The numeric level applied

    Raises:
        ValueError: If LINKMON_LOG_LEVEL names no standard level
    """
    if environ is None:
        environ = os.environ

    name = environ.get("LINKMON_LOG_LEVEL", "").strip().upper() or "INFO"
    if name not in _LEVELS:
        raise ValueError(f"LINKMON_LOG_LEVEL must be one of {', '.join(_LEVELS)}, got {name!r}")
    level = logging.getLevelName(name)

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
        force=True,
    )
    logging.getLogger(__name__).debug("Logging configured: level=%s", name)
    return level
