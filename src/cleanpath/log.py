from __future__ import annotations

import logging
import sys
from typing import TextIO

LOGGER_NAME = "cleanpath"

logger = logging.getLogger(LOGGER_NAME)

# "verbose level k" messages are logged at level_for(k), so that a run with
# verbosity N shows exactly the messages with k <= N. They never reach down
# to DEBUG, which is reserved for -D output.
_BASE = logging.INFO


def level_for(verbosity: int) -> int:
    return max(_BASE + 1 - verbosity, logging.DEBUG + 1)


def verbose(level: int, msg: str, *args: object) -> None:
    logger.log(level_for(level), msg, *args)


def debug(msg: str, *args: object) -> None:
    logger.debug(msg, *args)


class CommentFormatter(logging.Formatter):
    """Wraps each message in comment delimiters so it can be eval'd safely."""

    def __init__(self, start: str | None = None, end: str | None = None):
        super().__init__("%(message)s")
        self.start = start or ""
        self.end = end or ""

    def format(self, record: logging.LogRecord) -> str:
        msg = super().format(record)
        if record.levelno == logging.DEBUG:
            msg = "[DEBUG] " + msg
        return f"{self.start}{msg}{self.end}"


class _VerbosityFilter(logging.Filter):
    def __init__(self, threshold: int, debug_on: bool):
        super().__init__()
        self.threshold = threshold
        self.debug_on = debug_on

    def filter(self, record: logging.LogRecord) -> bool:
        if record.levelno == logging.DEBUG:
            return self.debug_on
        return record.levelno >= self.threshold


SH_COMMENTS = ("# ", None)
C_COMMENTS = ("/* ", " */")
NO_COMMENTS = (None, None)


def configure_logging(
    *,
    verbosity: int = 0,
    debug_on: bool = False,
    stream: TextIO | None = None,
    comments: tuple[str | None, str | None] = NO_COMMENTS,
) -> logging.Handler:
    """(Re)install the single handler on the cleanpath logger."""
    for h in list(logger.handlers):
        logger.removeHandler(h)

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(CommentFormatter(*comments))
    threshold = level_for(verbosity) if verbosity > 0 else logging.WARNING
    handler.addFilter(_VerbosityFilter(threshold, debug_on))
    logger.addHandler(handler)
    logger.propagate = False
    logger.setLevel(logging.DEBUG if debug_on else threshold)
    return handler
