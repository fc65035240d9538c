"""Data models for convo-coach."""

from __future__ import annotations

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
]
