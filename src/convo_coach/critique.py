"""Critique extraction and annotation assembly.

Parses critique entries out of the tail of an upstream response and binds
them to the highlights found in the transcript, producing the final
reference-key -> ``(original_text, critique_text)`` map.

Three entry layouts are recognised, tried in the order of
:data:`ENTRY_STRATEGIES`.  The first one that yields any entries is used
for the whole response; mixed layouts are not reconciled per entry.

- **alias** -- ``[H1]: "original phrase" critique`` (optionally prefixed by
  ``feedback:``), bound to the highlight carrying the same alias.
- **quoted** -- ``feedback: "target phrase" critique``, bound to a highlight
  with the same phrase or to a fresh highlight cut from a user message.
- **positional** -- ``feedback: critique``, bound to highlights by order.
"""

from __future__ import annotations

import functools
import logging
import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field, replace

from convo_coach.highlights import ALIAS_RE, Candidate, substitute
from convo_coach.models.transcript import (
    REFERENCE_KEY_RE,
    AnnotationWarning,
    CritiqueEntry,
    HighlightSpan,
    MessageRecord,
)
from convo_coach.segmenter import DEFAULT_CRITIQUE_LABEL, critique_marker_pattern

logger = logging.getLogger(__name__)

_OPEN_QUOTE = "\"“"
_CLOSE_QUOTE = "\"”"
_QUOTED = rf"[{_OPEN_QUOTE}]([^{_CLOSE_QUOTE}\n]+)[{_CLOSE_QUOTE}]"

# Separators the model tends to put between a quoted phrase and its critique.
_LEADING_SEPARATORS = " \t\r\n:;,.-–—"

EntryStrategy = Callable[[str, str], list[CritiqueEntry]]


@dataclass(frozen=True)
class Assembly:
    """Result of :func:`assemble`.

    Attributes:
        messages: Messages after any highlights originated by quoted
            entries have been substituted.
        highlights: All highlights, extracted and originated, in key order.
        annotations: Reference key to ``(original_text, critique_text)``.
        warnings: Dropped entries and keys left without critique text.
    """

    messages: list[MessageRecord] = field(default_factory=list)
    highlights: list[HighlightSpan] = field(default_factory=list)
    annotations: dict[str, tuple[str, str]] = field(default_factory=dict)
    warnings: list[AnnotationWarning] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Entry strategies
# ---------------------------------------------------------------------------


@functools.lru_cache(maxsize=16)
def _alias_entry_re(label: str) -> re.Pattern[str]:
    return re.compile(
        rf"^[ \t]*(?:\b{re.escape(label)}[ \t]*\d*[ \t]*:?[ \t]*)?"
        rf"{ALIAS_RE.pattern}[ \t]*:?[ \t]*(.*)$",
        re.IGNORECASE | re.MULTILINE,
    )


@functools.lru_cache(maxsize=16)
def _quoted_entry_re(label: str) -> re.Pattern[str]:
    marker = critique_marker_pattern(label)
    return re.compile(
        rf"{marker}\s*{_QUOTED}(.*?)(?={marker}|\Z)",
        re.IGNORECASE | re.DOTALL,
    )


@functools.lru_cache(maxsize=16)
def _plain_entry_re(label: str) -> re.Pattern[str]:
    return re.compile(
        rf"{critique_marker_pattern(label)}[ \t]*(\S[^\n]*)", re.IGNORECASE
    )


def alias_entries(tail: str, label: str) -> list[CritiqueEntry]:
    """Parse ``[ALIAS]: ["phrase"] critique`` lines."""
    entries: list[CritiqueEntry] = []
    for match in _alias_entry_re(label).finditer(tail):
        # Alias tokens are uppercase; IGNORECASE must not widen that.
        alias = match.group(1)
        if not ALIAS_RE.fullmatch(f"[{alias}]"):
            continue
        rest = match.group(2).strip()
        target: str | None = None
        quoted = re.match(_QUOTED, rest)
        if quoted:
            target = quoted.group(1).strip()
            rest = rest[quoted.end():].lstrip(_LEADING_SEPARATORS)
        entries.append(
            CritiqueEntry(
                sequence_index=len(entries),
                text=rest.strip(),
                target=target,
                alias=alias,
            )
        )
    return entries


def quoted_entries(tail: str, label: str) -> list[CritiqueEntry]:
    """Parse ``feedback[N]: "target" critique`` entries."""
    entries: list[CritiqueEntry] = []
    for match in _quoted_entry_re(label).finditer(tail):
        target = match.group(1).strip()
        if not target:
            continue
        entries.append(
            CritiqueEntry(
                sequence_index=len(entries),
                text=match.group(2).lstrip(_LEADING_SEPARATORS).strip(),
                target=target,
            )
        )
    return entries


def positional_entries(tail: str, label: str) -> list[CritiqueEntry]:
    """Parse plain ``feedback[N]: critique`` lines in order."""
    return [
        CritiqueEntry(sequence_index=idx, text=match.group(1).strip())
        for idx, match in enumerate(_plain_entry_re(label).finditer(tail))
    ]


ENTRY_STRATEGIES: tuple[EntryStrategy, ...] = (
    alias_entries,
    quoted_entries,
    positional_entries,
)


def extract_critiques(
    tail: str,
    critique_label: str = DEFAULT_CRITIQUE_LABEL,
) -> list[CritiqueEntry]:
    """Return the entries of the first strategy that finds any.

    Args:
        tail: The critique region of the upstream response.
        critique_label: Keyword that introduces a critique entry.

    Returns:
        Entries in appearance order, or an empty list.
    """
    if not tail or not tail.strip():
        return []
    for strategy in ENTRY_STRATEGIES:
        entries = strategy(tail, critique_label)
        if entries:
            logger.debug("%s parsed %d critique entries", strategy.__name__, len(entries))
            return entries
    logger.debug("No critique entries recognised in tail")
    return []


# ---------------------------------------------------------------------------
# Assembly
# ---------------------------------------------------------------------------


def _normalise(phrase: str) -> str:
    return " ".join(phrase.split()).casefold()


def _find_unconsumed(text: str, target: str) -> int:
    """Return the offset of the first *target* not inside a reference key."""
    keys = [m.span() for m in REFERENCE_KEY_RE.finditer(text)]
    for match in re.finditer(re.escape(target), text):
        if not any(match.start() < k_end and k_start < match.end() for k_start, k_end in keys):
            return match.start()
    return -1


class _Binder:
    """Mutable working state for one :func:`assemble` call."""

    def __init__(
        self,
        highlights: Sequence[HighlightSpan],
        messages: Sequence[MessageRecord],
        start: int,
    ) -> None:
        self.highlights = list(highlights)
        self.messages = list(messages)
        self.start = start
        self.critiques: dict[int, str] = {}
        self.warnings: list[AnnotationWarning] = []

    def next_index(self) -> int:
        return max((h.sequence_index + 1 for h in self.highlights), default=self.start)

    def drop(self, entry: CritiqueEntry, reason: str) -> None:
        logger.warning("Dropping critique entry %d: %s", entry.sequence_index, reason)
        self.warnings.append(
            AnnotationWarning(
                kind="unresolved_reference",
                message=f"Critique entry dropped: {reason}",
                detail=entry.text,
            )
        )

    def bind_alias(self, entry: CritiqueEntry) -> None:
        for pos, span in enumerate(self.highlights):
            if span.alias == entry.alias and span.sequence_index not in self.critiques:
                if entry.target:
                    self.highlights[pos] = replace(span, original_text=entry.target)
                self.critiques[span.sequence_index] = entry.text
                return
        self.drop(entry, f"no highlight tagged [{entry.alias}]")

    def bind_quoted(self, entry: CritiqueEntry) -> None:
        target = entry.target or ""
        wanted = _normalise(target)
        for span in self.highlights:
            if (
                span.sequence_index not in self.critiques
                and _normalise(span.original_text) == wanted
            ):
                self.critiques[span.sequence_index] = entry.text
                return

        for pos, message in enumerate(self.messages):
            if message.sender != "user":
                continue
            offset = _find_unconsumed(message.text, target)
            if offset < 0:
                continue
            index = self.next_index()
            text, spans = substitute(
                message.text,
                [Candidate(offset, offset + len(target), target)],
                index,
            )
            self.messages[pos] = replace(message, text=text)
            self.highlights.extend(spans)
            self.critiques[index] = entry.text
            logger.debug("Originated highlight %d from quoted phrase %r", index, target)
            return

        self.drop(entry, f"quoted phrase {target!r} not found in any user message")

    def bind_positional(self, entries: Sequence[CritiqueEntry]) -> None:
        for span, entry in zip(self.highlights, entries):
            self.critiques[span.sequence_index] = entry.text
        for entry in entries[len(self.highlights):]:
            self.drop(entry, "more critique entries than highlights")

    def annotations(self) -> dict[str, tuple[str, str]]:
        result: dict[str, tuple[str, str]] = {}
        for span in sorted(self.highlights, key=lambda h: h.sequence_index):
            critique = self.critiques.get(span.sequence_index)
            if critique is None:
                logger.info("No critique found for %s", span.key)
                self.warnings.append(
                    AnnotationWarning(
                        kind="unresolved_reference",
                        message="Highlight has no matching critique",
                        detail=span.key,
                    )
                )
                critique = ""
            result[span.key] = (span.original_text, critique)
        return result


def assemble(
    tail: str,
    highlights: Sequence[HighlightSpan],
    messages: Sequence[MessageRecord] = (),
    critique_label: str = DEFAULT_CRITIQUE_LABEL,
    start: int = 1,
) -> Assembly:
    """Bind critique entries in *tail* to *highlights*.

    Args:
        tail: The critique region of the upstream response.
        highlights: Highlights from
            :func:`~convo_coach.highlights.extract_highlights`.
        messages: The post-extraction messages.  Quoted entries whose phrase
            matches no existing highlight are cut out of these; without
            messages such entries are dropped.
        critique_label: Keyword that introduces a critique entry.
        start: Lowest key number free for originated highlights when
            *highlights* is empty.

    Returns:
        An :class:`Assembly`.  Every highlight gets a map entry; one
        without critique text maps to an empty critique string.
    """
    binder = _Binder(highlights, messages, start)
    entries = extract_critiques(tail, critique_label)

    if entries and entries[0].alias is not None:
        for entry in entries:
            binder.bind_alias(entry)
    elif entries and entries[0].target is not None:
        for entry in entries:
            binder.bind_quoted(entry)
    elif entries:
        binder.bind_positional(entries)

    annotations = binder.annotations()
    return Assembly(
        messages=binder.messages,
        highlights=sorted(binder.highlights, key=lambda h: h.sequence_index),
        annotations=annotations,
        warnings=binder.warnings,
    )
