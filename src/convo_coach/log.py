"""Console logging for the convo-coach CLI.

Library modules only create ``logging.getLogger(__name__)`` loggers and
never configure output.  The CLI calls :func:`setup_logging` once so that
pipeline diagnostics (segment boundaries, strategy choices, dropped
critique entries, the per-response summary line) reach *stderr* in a
pipe-separated format, leaving *stdout* free for the report or JSON.
"""

from __future__ import annotations

import logging
import sys
from typing import TextIO

PACKAGE_LOGGER = "convo_coach"

_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"

_HANDLER_ATTR = "_convo_coach_log_handler"


def setup_logging(level: str = "INFO", stream: TextIO | None = None) -> logging.Logger:
    """Attach the convo-coach handler to the package logger.

    Only the ``convo_coach`` logger hierarchy is configured, so embedding
    applications keep control of the root logger.  Records still propagate
    upward.  Repeated calls reuse the existing handler and only change the
    level and, when given, the stream.

    Args:
        level: A standard logging level name, any case (e.g. ``"debug"``).
        stream: Destination for log lines.  Defaults to ``sys.stderr`` at
            call time.

    Returns:
        The configured package logger.

    Raises:
        ValueError: If *level* is not a recognised logging level name.
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        raise ValueError(f"Invalid log level: {level!r}")

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(numeric_level)

    handler = next(
        (h for h in package_logger.handlers if getattr(h, _HANDLER_ATTR, False)),
        None,
    )
    if handler is None:
        handler = logging.StreamHandler(stream or sys.stderr)
        handler.setFormatter(logging.Formatter(_LOG_FORMAT, datefmt=_DATE_FORMAT))
        setattr(handler, _HANDLER_ATTR, True)
        package_logger.addHandler(handler)
    elif stream is not None:
        handler.setStream(stream)

    handler.setLevel(numeric_level)
    return package_logger
