"""Parser for the end-of-session conversation summary.

The upstream model is asked to answer with two sections::

    GOOD: what the user did well
    BAD: what the user could improve

Either section may be missing; a stock encouragement is substituted.
"""

from __future__ import annotations

import logging
import re

from convo_coach.models.feedback import ConversationSummary

logger = logging.getLogger(__name__)

DEFAULT_GOOD = "You engaged in the conversation!"
DEFAULT_BAD = "Keep practicing to improve your conversational skills."

_GOOD_RE = re.compile(r"GOOD:\s*(.*?)(?=BAD:|\Z)", re.IGNORECASE | re.DOTALL)
_BAD_RE = re.compile(r"BAD:\s*(.+)", re.IGNORECASE | re.DOTALL)


def parse_summary(raw: str | None) -> ConversationSummary:
    """Parse a GOOD/BAD summary response.

    Args:
        raw: The upstream response text.  ``None`` is treated as ``""``.

    Returns:
        A :class:`ConversationSummary`; missing or blank sections fall back
        to :data:`DEFAULT_GOOD` and :data:`DEFAULT_BAD`.
    """
    text = raw or ""

    good_match = _GOOD_RE.search(text)
    bad_match = _BAD_RE.search(text)

    good = good_match.group(1).strip() if good_match else ""
    bad = bad_match.group(1).strip() if bad_match else ""

    if not good:
        logger.debug("Summary has no GOOD section; using default")
    if not bad:
        logger.debug("Summary has no BAD section; using default")

    return ConversationSummary(good=good or DEFAULT_GOOD, bad=bad or DEFAULT_BAD)
