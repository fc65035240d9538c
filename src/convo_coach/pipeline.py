"""Pipeline orchestrator for transcript annotation.

Wires the four stages together: segmenting the raw upstream response,
parsing speaker-tagged messages, extracting highlights, and assembling the
critique map.  The top-level entry point is :func:`annotate_feedback`,
which returns an :class:`~convo_coach.models.transcript.AnnotatedTranscript`
suitable for serialization or rendering by the demo output formatter.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from types import MappingProxyType

from convo_coach.critique import assemble
from convo_coach.highlights import DEFAULT_HIGHLIGHT_MARKER, extract_highlights
from convo_coach.models.transcript import (
    REFERENCE_KEY_RE,
    AnnotatedTranscript,
    AnnotationWarning,
    MessageRecord,
    reference_key,
)
from convo_coach.parser import parse_messages
from convo_coach.segmenter import DEFAULT_CRITIQUE_LABEL, split_sections

logger = logging.getLogger(__name__)


def annotate_feedback(
    raw: str | None,
    *,
    highlight_marker: str = DEFAULT_HIGHLIGHT_MARKER,
    critique_label: str = DEFAULT_CRITIQUE_LABEL,
) -> AnnotatedTranscript:
    """Turn a raw upstream feedback response into an annotated transcript.

    Executes four stages:

    1. **Segment** -- split the response into transcript and critique.
    2. **Parse** -- extract ``user`` / ``ai`` messages.
    3. **Highlight** -- replace points of interest with reference keys.
    4. **Assemble** -- bind critique entries to the keys.

    Missing structure is never an error: each stage degrades to the
    emptiest valid result and records an
    :class:`~convo_coach.models.transcript.AnnotationWarning`.

    Args:
        raw: The full text returned by the upstream text-generation call.
        highlight_marker: Token wrapping explicitly highlighted phrases.
        critique_label: Keyword introducing each critique entry.

    Returns:
        An :class:`AnnotatedTranscript` in which every reference key that
        appears in a message has an annotation entry.
    """
    warnings: list[AnnotationWarning] = []

    # --- Stage 1: Segment -------------------------------------------------
    segment = split_sections(raw, critique_label)
    if segment.boundary is None:
        warnings.append(
            AnnotationWarning(
                kind="structural_absence",
                message="No divider or critique marker; no critique available",
            )
        )

    # --- Stage 2: Parse ---------------------------------------------------
    messages = parse_messages(segment.head)
    if not messages and segment.head:
        warnings.append(
            AnnotationWarning(
                kind="structural_absence",
                message="No speaker labels found in transcript",
                detail=segment.head[:80],
            )
        )
    logger.debug("Parsed %d message(s)", len(messages))

    # --- Stage 3: Highlight -----------------------------------------------
    stray = _stray_key_indexes(messages)
    start = max(stray, default=0) + 1
    messages, highlights = extract_highlights(
        messages, marker=highlight_marker, start=start
    )

    # --- Stage 4: Assemble ------------------------------------------------
    assembly = assemble(
        segment.tail, highlights, messages, critique_label, start=start
    )
    warnings.extend(assembly.warnings)

    annotations = dict(assembly.annotations)
    for index in stray:
        key = reference_key(index)
        if key not in annotations:
            logger.warning("Upstream text already contained %s; registering it empty", key)
            annotations[key] = ("", "")
            warnings.append(
                AnnotationWarning(
                    kind="unresolved_reference",
                    message="Reference key present in upstream text",
                    detail=key,
                )
            )

    ordered = dict(sorted(annotations.items(), key=lambda item: _key_index(item[0])))
    logger.info(
        "Annotated %d message(s) with %d highlight(s), %d warning(s)",
        len(assembly.messages),
        len(ordered),
        len(warnings),
    )

    return AnnotatedTranscript(
        messages=tuple(assembly.messages),
        annotations=MappingProxyType(ordered),
        warnings=tuple(warnings),
    )


def _stray_key_indexes(messages: Sequence[MessageRecord]) -> list[int]:
    """Return key numbers already present in the parsed messages."""
    found = {
        int(match.group(1))
        for message in messages
        for match in REFERENCE_KEY_RE.finditer(message.text)
    }
    return sorted(found)


def _key_index(key: str) -> int:
    match = REFERENCE_KEY_RE.fullmatch(key)
    return int(match.group(1)) if match else 0
