"""Shared fixtures for convo-coach tests."""

from __future__ import annotations

import logging
from collections.abc import Generator

import pytest

_ENV_VARS = ("LOG_LEVEL", "HIGHLIGHT_MARKER", "CRITIQUE_LABEL")


@pytest.fixture()
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove all convo-coach environment variables.

    Patches ``load_dotenv`` so a real ``.env`` file cannot re-inject values
    that the test explicitly removed.
    """
    monkeypatch.setattr("convo_coach.config.load_dotenv", lambda *_a, **_kw: None)
    for key in _ENV_VARS:
        monkeypatch.delenv(key, raising=False)


@pytest.fixture()
def sample_response() -> str:
    """An upstream response using wrapper markers and numbered feedback."""
    return (
        "user: (highlight)I dunno(highlight). Something... quiet.\n"
        "ai: Hmm, quiet. Maybe some cozy fiction or poetry?\n"
        "\n"
        "user: I don't really read much.\n"
        "ai: That's okay! Do you like short stories?\n"
        "\n"
        "user: (highlight)I guess(highlight).\n"
        "ai: Nice. [hands over a book] This one is light but sweet.\n"
        "\n"
        "----\n"
        "\n"
        'feedback 1: Avoid non-committal phrases like "I dunno"; be more specific.\n'
        "\n"
        'feedback 2: Avoid non-committal phrases like "I guess"; be more decisive.'
    )


@pytest.fixture(autouse=True)
def _reset_loggers() -> Generator[None, None, None]:
    """Restore root and package loggers after each test to prevent handler leaks."""
    saved = [
        (logger, logger.handlers[:], logger.level)
        for logger in (logging.getLogger(), logging.getLogger("convo_coach"))
    ]
    yield
    for logger, handlers, level in saved:
        logger.handlers = handlers
        logger.setLevel(level)
