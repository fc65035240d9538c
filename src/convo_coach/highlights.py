"""Highlight extraction: replace points of interest with reference keys.

The upstream model marks points of interest in one of several textual
conventions.  Each convention is a *strategy*: a function taking a message
and the wrapper marker and returning the candidate spans it found.  For
every message the strategies in :data:`HIGHLIGHT_STRATEGIES` are tried in
order and the first one that finds anything wins.

Accepted spans are replaced left-to-right by ``(highlighted<N>)`` keys, with
``N`` running across the whole message list.
"""

from __future__ import annotations

import functools
import logging
import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass, replace

from convo_coach.models.transcript import (
    REFERENCE_KEY_RE,
    HighlightSpan,
    MessageRecord,
    reference_key,
)

logger = logging.getLogger(__name__)

DEFAULT_HIGHLIGHT_MARKER = "(highlight)"

# A single-line parenthetical allowing one level of nesting, so
# "(I (really) dunno)" is taken whole.
_PARENTHETICAL_RE = re.compile(r"\(((?:[^()\n]|\([^()\n]*\))*)\)")

# Pre-assigned alias tokens such as "[H1]" or "[POI_2]".  The trailing
# digits keep stage directions like "[SIGHS]" out.
ALIAS_RE = re.compile(r"\[([A-Z][A-Z_]*\d+)\]")


@dataclass(frozen=True)
class Candidate:
    """A span of message text that a strategy wants to replace.

    Attributes:
        start: Offset of the first replaced character.
        end: Offset one past the last replaced character.
        original_text: Phrase recorded for the resulting key.
        alias: Alias token name, for pre-assigned highlights.
    """

    start: int
    end: int
    original_text: str
    alias: str | None = None


HighlightStrategy = Callable[[MessageRecord, str], list[Candidate]]


@functools.lru_cache(maxsize=16)
def _wrapper_re(marker: str) -> re.Pattern[str]:
    token = re.escape(marker)
    # Interior may not contain the marker itself, so a dangling marker
    # never swallows the next pair.  Phrases may cross line breaks and the
    # marker's case is not significant.
    return re.compile(
        rf"{token}((?:(?!{token}).)+){token}", re.DOTALL | re.IGNORECASE
    )


def wrapped_candidates(message: MessageRecord, marker: str) -> list[Candidate]:
    """Find every ``marker phrase marker`` span, for any sender."""
    found: list[Candidate] = []
    for match in _wrapper_re(marker).finditer(message.text):
        phrase = match.group(1).strip()
        if phrase:
            found.append(Candidate(match.start(), match.end(), phrase))
    return found


def parenthetical_candidates(
    message: MessageRecord, marker: str
) -> list[Candidate]:
    """Find the first ``(phrase)`` in a user message.

    One level of nested parentheses is kept inside the phrase; deeper
    nesting matches only the inner part.  Parentheticals containing a
    reference key or the wrapper marker (in any case) are skipped.  Only
    one phrase is taken per message.
    """
    if message.sender != "user":
        return []
    folded_marker = marker.casefold()
    for match in _PARENTHETICAL_RE.finditer(message.text):
        if (
            REFERENCE_KEY_RE.search(match.group(0))
            or folded_marker in match.group(0).casefold()
        ):
            continue
        phrase = match.group(1).strip()
        if phrase:
            return [Candidate(match.start(), match.end(), phrase)]
    return []


def alias_candidates(message: MessageRecord, marker: str) -> list[Candidate]:  # noqa: ARG001
    """Find pre-assigned ``[ALIAS1]`` tokens in a user message.

    The original text is left empty; an alias-keyed critique entry
    supplies it during assembly.
    """
    if message.sender != "user":
        return []
    return [
        Candidate(match.start(), match.end(), "", alias=match.group(1))
        for match in ALIAS_RE.finditer(message.text)
    ]


HIGHLIGHT_STRATEGIES: tuple[HighlightStrategy, ...] = (
    wrapped_candidates,
    parenthetical_candidates,
    alias_candidates,
)


def substitute(
    text: str,
    candidates: Sequence[Candidate],
    next_index: int,
) -> tuple[str, list[HighlightSpan]]:
    """Replace *candidates* in *text* with sequential reference keys.

    Args:
        text: The message body.
        candidates: Non-overlapping spans within *text*.
        next_index: ``N`` for the leftmost candidate.

    Returns:
        The rewritten text and one :class:`HighlightSpan` per candidate,
        numbered left-to-right.
    """
    parts: list[str] = []
    spans: list[HighlightSpan] = []
    cursor = 0
    for candidate in sorted(candidates, key=lambda c: c.start):
        parts.append(text[cursor: candidate.start])
        parts.append(reference_key(next_index))
        spans.append(
            HighlightSpan(
                sequence_index=next_index,
                original_text=candidate.original_text,
                alias=candidate.alias,
            )
        )
        next_index += 1
        cursor = candidate.end
    parts.append(text[cursor:])
    return "".join(parts), spans


def extract_highlights(
    messages: Sequence[MessageRecord],
    marker: str = DEFAULT_HIGHLIGHT_MARKER,
    start: int = 1,
) -> tuple[list[MessageRecord], list[HighlightSpan]]:
    """Replace points of interest in *messages* with reference keys.

    Args:
        messages: Parsed messages in appearance order.
        marker: Token used on both sides of an explicitly wrapped phrase.
        start: ``N`` for the first key.  Callers raise this when the text
            already contains keys so numbers are never reused.

    Returns:
        A ``(messages, highlights)`` pair.  Messages without a match are
        returned unchanged; highlights are in discovery order.
    """
    out_messages: list[MessageRecord] = []
    highlights: list[HighlightSpan] = []
    next_index = start

    for message in messages:
        candidates: list[Candidate] = []
        for strategy in HIGHLIGHT_STRATEGIES:
            candidates = strategy(message, marker)
            if candidates:
                logger.debug(
                    "%s found %d highlight(s) in %s message",
                    strategy.__name__,
                    len(candidates),
                    message.sender,
                )
                break

        if not candidates:
            out_messages.append(message)
            continue

        text, spans = substitute(message.text, candidates, next_index)
        next_index += len(spans)
        highlights.extend(spans)
        out_messages.append(replace(message, text=text))

    return out_messages, highlights
