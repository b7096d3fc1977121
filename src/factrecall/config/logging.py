"""Logging setup for the factrecall entry points."""

from __future__ import annotations

import logging
import sys

from .env import optional_env_var
from .errors import ConfigurationError

LOG_LEVEL_ENV = "FACTRECALL_LOG_LEVEL"
LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"

# Chatty below WARNING even when factrecall itself logs at DEBUG.
QUIET_LOGGERS = ("sqlalchemy.engine", "sqlalchemy.pool")


def log_level_from_env(default: int = logging.INFO) -> int:
    name = optional_env_var(LOG_LEVEL_ENV)
    if name is None:
        return default
    level = logging.getLevelNamesMapping().get(name.upper())
    if level is None:
        raise ConfigurationError(
            f"{LOG_LEVEL_ENV} must be a logging level name, got {name!r}", variable=LOG_LEVEL_ENV
        )
    return level


def configure_logging(*, level: int | None = None, force: bool = False) -> None:
    """Send log records to stderr, keeping stdout free for command output.

    Without an explicit ``level`` the root level comes from ``FACTRECALL_LOG_LEVEL``
    (default INFO). ``force=True`` replaces handlers installed earlier.
    """

    logging.basicConfig(
        level=log_level_from_env() if level is None else level,
        format=LOG_FORMAT,
        datefmt="%H:%M:%S",
        stream=sys.stderr,
        force=force,
    )
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
