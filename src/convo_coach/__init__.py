"""convo-coach: feedback annotation for conversation practice.

Turns the semi-structured feedback text returned by a text-generation
provider into speaker-tagged messages whose points of interest are replaced
by reference keys, plus a map from each key to its critique.
"""

from __future__ import annotations

from convo_coach.critique import assemble, extract_critiques
from convo_coach.highlights import extract_highlights
from convo_coach.models.feedback import (
    ConversationSummary,
    FeedbackPayload,
    MessagePayload,
)
from convo_coach.models.transcript import (
    AnnotatedTranscript,
    AnnotationWarning,
    CritiqueEntry,
    HighlightSpan,
    MessageRecord,
    Segment,
)
from convo_coach.parser import format_transcript, parse_messages
from convo_coach.pipeline import annotate_feedback
from convo_coach.segmenter import split_sections
from convo_coach.summary import parse_summary

__version__ = "0.1.0"

__all__ = [
    "AnnotatedTranscript",
    "AnnotationWarning",
    "ConversationSummary",
    "CritiqueEntry",
    "FeedbackPayload",
    "HighlightSpan",
    "MessagePayload",
    "MessageRecord",
    "Segment",
    "annotate_feedback",
    "assemble",
    "extract_critiques",
    "extract_highlights",
    "format_transcript",
    "parse_messages",
    "parse_summary",
    "split_sections",
]
