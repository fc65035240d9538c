"""Data models for annotated conversation transcripts.

These dataclasses represent the structured output of the annotation
pipeline.  They are intentionally simple frozen stdlib dataclasses; the
pydantic models in :mod:`convo_coach.models.feedback` only exist at the
wire boundary.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Literal

if TYPE_CHECKING:
    from convo_coach.models.feedback import FeedbackPayload

Speaker = Literal["user", "ai"]
SPEAKERS: tuple[str, ...] = ("user", "ai")

WarningKind = Literal["structural_absence", "unresolved_reference"]

# Reference keys look like "(highlighted3)".
REFERENCE_KEY_RE = re.compile(r"\(highlighted(\d+)\)")


def reference_key(index: int) -> str:
    """Return the reference key for the 1-based highlight *index*."""
    return f"(highlighted{index})"


@dataclass(frozen=True)
class Segment:
    """Raw upstream text split into transcript and critique regions.

    Attributes:
        head: The annotated transcript region.
        tail: The critique region, possibly empty.
        boundary: Which marker produced the split: ``"divider"`` for a
            dashed line, ``"critique_marker"`` for the first critique
            entry, or ``None`` when no structure was found.
    """

    head: str
    tail: str = ""
    boundary: Literal["divider", "critique_marker"] | None = None


@dataclass(frozen=True)
class MessageRecord:
    """A single speaker turn.

    Attributes:
        sender: ``"user"`` or ``"ai"``.
        text: Message body; may contain embedded reference keys.
    """

    sender: Speaker
    text: str


@dataclass(frozen=True)
class HighlightSpan:
    """A point of interest replaced by a reference key.

    Attributes:
        sequence_index: The ``N`` of the ``(highlighted<N>)`` key.
        original_text: The verbatim highlighted phrase.  Empty for alias
            highlights until a critique entry supplies it.
        alias: Bracket token name (e.g. ``"H1"``) for highlights that the
            upstream output pre-assigned, otherwise ``None``.
    """

    sequence_index: int
    original_text: str
    alias: str | None = None

    @property
    def key(self) -> str:
        return reference_key(self.sequence_index)


@dataclass(frozen=True)
class CritiqueEntry:
    """A unit of critique text extracted from the tail.

    Attributes:
        sequence_index: 0-based discovery order within the tail.
        text: The critique text.
        target: Quoted phrase the entry refers to, for quoted-target entries.
        alias: Bracket token the entry refers to, for alias-keyed entries.
    """

    sequence_index: int
    text: str
    target: str | None = None
    alias: str | None = None


@dataclass(frozen=True)
class AnnotationWarning:
    """A non-fatal diagnostic produced while annotating a transcript.

    Attributes:
        kind: ``"structural_absence"`` when an expected marker was missing,
            ``"unresolved_reference"`` when a key has no critique text.
        message: Human-readable description.
        detail: The offending key, phrase, or text fragment, if any.
    """

    kind: WarningKind
    message: str
    detail: str = ""


@dataclass(frozen=True)
class AnnotatedTranscript:
    """Top-level return type of :func:`~convo_coach.pipeline.annotate_feedback`.

    Attributes:
        messages: Speaker-tagged messages in appearance order.
        annotations: Read-only mapping from reference key to
            ``(original_text, critique_text)``, ordered by key number.
        warnings: Non-fatal diagnostics collected along the way.
    """

    messages: tuple[MessageRecord, ...] = ()
    annotations: Mapping[str, tuple[str, str]] = field(
        default_factory=lambda: MappingProxyType({})
    )
    warnings: tuple[AnnotationWarning, ...] = ()

    def to_payload(self) -> FeedbackPayload:
        """Convert to the pydantic wire model consumed by the web client."""
        from convo_coach.models.feedback import FeedbackPayload, MessagePayload

        return FeedbackPayload(
            messages=[
                MessagePayload(sender=m.sender, text=m.text) for m in self.messages
            ],
            highlights=dict(self.annotations),
        )
