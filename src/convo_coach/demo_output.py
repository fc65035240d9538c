"""Console formatter for annotated transcripts.

Renders an :class:`~convo_coach.models.transcript.AnnotatedTranscript` as
structured console output: the conversation with its reference keys, the
critique behind each key, and any warnings.

The primary entry point is :func:`format_annotated_transcript`, which
returns the formatted string.  :func:`print_annotated_transcript` writes it
to stdout.
"""

from __future__ import annotations

import sys

from convo_coach.models.feedback import ConversationSummary
from convo_coach.models.transcript import AnnotatedTranscript

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_BANNER_WIDTH = 60
_SEPARATOR = "=" * _BANNER_WIDTH
_SENDER_TAGS = {"user": "USER", "ai": "AI  "}


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def format_annotated_transcript(result: AnnotatedTranscript) -> str:
    """Render an :class:`AnnotatedTranscript` for the console.

    The output has three labelled sections:

    - **Conversation** -- each message with its sender tag.
    - **Highlights** -- each reference key, the original phrase, and its
      critique.
    - **Summary** -- counts and warnings.

    Args:
        result: The annotated transcript to format.

    Returns:
        A multi-line string ready for console display.
    """
    lines: list[str] = []

    _append_banner(lines, "CONVERSATION FEEDBACK")
    _append_conversation(lines, result)
    _append_highlights(lines, result)
    _append_summary(lines, result)
    lines.append(_SEPARATOR)

    return "\n".join(lines)


def format_summary(summary: ConversationSummary) -> str:
    """Render a GOOD/BAD :class:`ConversationSummary` for the console."""
    lines: list[str] = []
    _append_banner(lines, "CONVERSATION SUMMARY")
    lines.append("")
    lines.append(f"  Did well: {summary.good}")
    lines.append(f"  To improve: {summary.bad}")
    lines.append(_SEPARATOR)
    return "\n".join(lines)


def print_annotated_transcript(result: AnnotatedTranscript) -> None:
    """Format and print an :class:`AnnotatedTranscript` to stdout."""
    sys.stdout.write(format_annotated_transcript(result) + "\n")


# ---------------------------------------------------------------------------
# Internal formatters
# ---------------------------------------------------------------------------


def _append_banner(lines: list[str], title: str) -> None:
    lines.append(_SEPARATOR)
    lines.append(f"  {title}")
    lines.append(_SEPARATOR)


def _append_conversation(lines: list[str], result: AnnotatedTranscript) -> None:
    lines.append("")
    lines.append("--- Conversation ---")

    if not result.messages:
        lines.append("  No messages found.")
        return

    for message in result.messages:
        tag = _SENDER_TAGS.get(message.sender, message.sender.upper())
        body_lines = message.text.split("\n")
        lines.append(f"  [{tag}] {body_lines[0]}")
        # Continuation lines align under the message body.
        for extra in body_lines[1:]:
            lines.append(f"         {extra}")


def _append_highlights(lines: list[str], result: AnnotatedTranscript) -> None:
    lines.append("")
    lines.append("--- Highlights ---")

    if not result.annotations:
        lines.append("  No highlights.")
        return

    for key, (original, critique) in result.annotations.items():
        lines.append(f'  {key} "{original}"')
        lines.append(f"    -> {critique or '(no feedback)'}")


def _append_summary(lines: list[str], result: AnnotatedTranscript) -> None:
    lines.append("")
    lines.append("--- Summary ---")
    lines.append(f"  Messages: {len(result.messages)}")
    lines.append(f"  Highlights: {len(result.annotations)}")
    lines.append(f"  Warnings: {len(result.warnings)}")

    for warning in result.warnings:
        detail = f" ({warning.detail})" if warning.detail else ""
        lines.append(f"    - [{warning.kind}] {warning.message}{detail}")
