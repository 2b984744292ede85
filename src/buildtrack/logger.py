"""Logging for buildtrack with semantic verbosity levels.

Messages are routed by what they describe rather than by severity:

- changes (-v 1): projects loaded, dependencies added or removed, files written
- checks (-v 2): constraint results, skipped dependency edges
- debug (-v 3): every layout event and layout pass
"""

from __future__ import annotations

import logging
import sys
from typing import Any, TextIO

CHANGES_LEVEL = 25  # Between INFO (20) and WARNING (30)
CHECKS_LEVEL = 15  # Between DEBUG (10) and INFO (20)

logging.addLevelName(CHANGES_LEVEL, "CHANGES")
logging.addLevelName(CHECKS_LEVEL, "CHECKS")

VERBOSITY_SILENT = 0
VERBOSITY_CHANGES = 1
VERBOSITY_CHECKS = 2
VERBOSITY_DEBUG = 3

VERBOSITY_LEVELS = {
    VERBOSITY_SILENT: logging.ERROR,
    VERBOSITY_CHANGES: CHANGES_LEVEL,
    VERBOSITY_CHECKS: CHECKS_LEVEL,
    VERBOSITY_DEBUG: logging.DEBUG,
}

LOGGER_NAME = "buildtrack"
PLAIN_FORMAT = "%(message)s"
DEBUG_FORMAT = "[%(levelname)s] %(message)s"


class BuildtrackLogger(logging.Logger):
    """Logger adding changes() and checks() between the standard levels."""

    def _emit(self, level: int, msg: str, args: tuple[Any, ...], **kwargs: Any) -> None:
        if self.isEnabledFor(level):
            self._log(level, msg, args, **kwargs)

    def changes(self, msg: str, *args: Any, **kwargs: Any) -> None:
        """Report a change to project data or an output file."""
        self._emit(CHANGES_LEVEL, msg, args, **kwargs)

    def checks(self, msg: str, *args: Any, **kwargs: Any) -> None:
        """Report a constraint or edge decision."""
        self._emit(CHECKS_LEVEL, msg, args, **kwargs)


def get_logger() -> BuildtrackLogger:
    """Return the shared buildtrack logger (configure it with setup_logger())."""
    logging.setLoggerClass(BuildtrackLogger)
    logger = logging.getLogger(LOGGER_NAME)
    assert isinstance(logger, BuildtrackLogger)
    return logger


def setup_logger(verbosity: int, stream: TextIO | None = None) -> None:
    """Configure the buildtrack logger for a CLI verbosity.

    Replaces any handler installed by an earlier call. At debug verbosity
    each line is prefixed with its level name.

    Args:
        verbosity: 0=errors only, 1=changes, 2=checks, 3=debug; values
                   outside that range are clamped
        stream: Output stream (defaults to sys.stderr)
    """
    verbosity = min(max(verbosity, VERBOSITY_SILENT), VERBOSITY_DEBUG)

    logger = get_logger()
    logger.handlers.clear()
    logger.setLevel(VERBOSITY_LEVELS[verbosity])

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(
        logging.Formatter(DEBUG_FORMAT if verbosity == VERBOSITY_DEBUG else PLAIN_FORMAT)
    )
    logger.addHandler(handler)
    logger.propagate = False


def reset_logger() -> None:
    """Drop handlers and return to errors-only (used between tests)."""
    logger = get_logger()
    logger.handlers.clear()
    logger.setLevel(VERBOSITY_LEVELS[VERBOSITY_SILENT])


def checks_enabled() -> bool:
    return get_logger().isEnabledFor(CHECKS_LEVEL)


def debug_enabled() -> bool:
    return get_logger().isEnabledFor(logging.DEBUG)
