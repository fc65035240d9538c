"""Configuration loading for convo-coach.

Reads settings from environment variables (with .env support via
python-dotenv).  Every setting has a default; invalid values are reported
together in a single :class:`ConfigError`.
"""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass

from dotenv import load_dotenv

from convo_coach.highlights import DEFAULT_HIGHLIGHT_MARKER
from convo_coach.segmenter import DEFAULT_CRITIQUE_LABEL

_LABEL_RE = re.compile(r"^\w+$")


class ConfigError(Exception):
    """Raised when configuration is invalid."""


@dataclass(frozen=True)
class Settings:
    """Application settings loaded from environment variables.

    Attributes:
        log_level: Logging level (default ``"INFO"``).
        highlight_marker: Token wrapping highlighted phrases in upstream
            output (default ``"(highlight)"``).
        critique_label: Keyword introducing critique entries
            (default ``"feedback"``).
    """

    log_level: str = "INFO"
    highlight_marker: str = DEFAULT_HIGHLIGHT_MARKER
    critique_label: str = DEFAULT_CRITIQUE_LABEL


def load_settings() -> Settings:
    """Load and validate settings from environment variables.

    Calls :func:`dotenv.load_dotenv` so a ``.env`` file in the working
    directory is picked up automatically.

    Returns:
        A validated :class:`Settings` instance.

    Raises:
        ConfigError: If ``LOG_LEVEL`` is not a logging level name,
            ``HIGHLIGHT_MARKER`` is whitespace-only, or ``CRITIQUE_LABEL`` is
            not a single word.  The message names **all** invalid variables.
    """
    load_dotenv()

    values: dict[str, str] = {}
    invalid: list[str] = []

    log_level = os.environ.get("LOG_LEVEL", "").strip()
    if log_level:
        if isinstance(logging.getLevelName(log_level.upper()), int):
            values["log_level"] = log_level.upper()
        else:
            invalid.append("LOG_LEVEL")

    # Empty means unset; whitespace-only is a mistake.
    marker = os.environ.get("HIGHLIGHT_MARKER", "")
    if marker:
        if marker.strip():
            values["highlight_marker"] = marker.strip()
        else:
            invalid.append("HIGHLIGHT_MARKER")

    label = os.environ.get("CRITIQUE_LABEL", "").strip()
    if label:
        if _LABEL_RE.match(label):
            values["critique_label"] = label
        else:
            invalid.append("CRITIQUE_LABEL")

    if invalid:
        names = ", ".join(invalid)
        raise ConfigError(f"Invalid environment variables: {names}")

    return Settings(**values)
