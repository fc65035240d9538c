"""Split raw upstream feedback text into transcript and critique regions.

The upstream model is asked to put a dashed divider between the annotated
transcript and its critique lines, but does not always do so.  When the
divider is missing the first critique marker (``feedback:``,
``feedback 2:`` ...) is used instead.
"""

from __future__ import annotations

import functools
import logging
import re

from convo_coach.models.transcript import Segment

logger = logging.getLogger(__name__)

DEFAULT_CRITIQUE_LABEL = "feedback"

# A line made only of three or more dashes, flanked by newlines.
_DIVIDER_RE = re.compile(r"\n-{3,}[ \t]*\r?\n")


@functools.lru_cache(maxsize=16)
def critique_marker_pattern(label: str) -> str:
    """Return the regex source matching ``<label> [numeral]:``.

    Args:
        label: The critique keyword, e.g. ``"feedback"``.

    Returns:
        An uncompiled pattern, meant to be embedded in larger patterns
        compiled with :data:`re.IGNORECASE`.
    """
    return rf"\b{re.escape(label)}[ \t]*\d*[ \t]*:"


@functools.lru_cache(maxsize=16)
def _line_marker_re(label: str) -> re.Pattern[str]:
    return re.compile(
        rf"(?:^|\n)[ \t]*{critique_marker_pattern(label)}", re.IGNORECASE
    )


def split_sections(
    raw: str | None,
    critique_label: str = DEFAULT_CRITIQUE_LABEL,
) -> Segment:
    """Split *raw* into a transcript head and a critique tail.

    Args:
        raw: The full upstream response.  ``None`` is treated as ``""``.
        critique_label: Keyword that introduces a critique entry.

    Returns:
        A :class:`Segment`.  Never raises; when neither a divider nor a
        critique marker is present the whole trimmed input becomes the
        head and the tail is empty.
    """
    text = raw or ""

    divider = _DIVIDER_RE.search(text)
    if divider:
        logger.debug("Split on dashed divider at offset %d", divider.start())
        return Segment(
            head=text[: divider.start()].strip(),
            tail=text[divider.end():].strip(),
            boundary="divider",
        )

    marker = _line_marker_re(critique_label).search(text)
    if marker:
        logger.debug(
            "No divider found; split on first %r marker at offset %d",
            critique_label,
            marker.start(),
        )
        return Segment(
            head=text[: marker.start()].strip(),
            tail=text[marker.start():].strip(),
            boundary="critique_marker",
        )

    logger.debug("No divider or critique marker found; tail is empty")
    return Segment(head=text.strip())
