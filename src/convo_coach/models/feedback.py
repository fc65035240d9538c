"""Pydantic models for the feedback payloads sent to the web client.

- :class:`MessagePayload` -- one ``{sender, text}`` message.
- :class:`FeedbackPayload` -- the annotated transcript, serialized as
  ``{"messages": [...], "highlights": {"(highlighted1)": [orig, critique]}}``.
- :class:`ConversationSummary` -- the end-of-session GOOD/BAD summary.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class MessagePayload(BaseModel):
    """A single message as rendered by the client.

    Attributes:
        sender: ``"user"`` or ``"ai"``.
        text: Message body, possibly containing reference keys.
    """

    model_config = ConfigDict(frozen=True)

    sender: Literal["user", "ai"]
    text: str


class FeedbackPayload(BaseModel):
    """The annotated transcript in its client-facing shape.

    Attributes:
        messages: Ordered messages.
        highlights: Reference key to ``(original_text, critique_text)``.
            Tuples serialize as two-element JSON arrays.
    """

    model_config = ConfigDict(frozen=True)

    messages: list[MessagePayload] = Field(default_factory=list)
    highlights: dict[str, tuple[str, str]] = Field(default_factory=dict)


class ConversationSummary(BaseModel):
    """What the user did well and what they could improve.

    Attributes:
        good: Things the user did well.
        bad: Areas where the user could improve.
    """

    model_config = ConfigDict(frozen=True)

    good: str
    bad: str
