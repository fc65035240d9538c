"""Speaker-labelled message parser for annotated transcripts.

Parses text in the format ``user: ...`` / ``ai: ...`` into ordered
:class:`~convo_coach.models.transcript.MessageRecord` objects.  Labels may
start a line or appear inline within a longer block; both layouts go
through the same scan.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable

from convo_coach.models.transcript import MessageRecord

logger = logging.getLogger(__name__)

# "user:" / "AI :" as whole words.  "\s*" lets the colon sit on the next
# line, mirroring how loosely the upstream model formats labels.
_LABEL_RE = re.compile(r"\b(user|ai)\s*:", re.IGNORECASE)


def parse_messages(head: str) -> list[MessageRecord]:
    """Parse the transcript region into speaker-tagged messages.

    Args:
        head: The transcript region of the upstream response.  Each
            speaker label opens a message whose body runs up to the next
            label or the end of the string, across line boundaries.

    Returns:
        Messages in appearance order with trimmed bodies (internal
        newlines preserved).  Text before the first label is discarded;
        an input without labels yields an empty list.
    """
    # Fast path: empty or whitespace-only input.
    if not head or not head.strip():
        return []

    labels = list(_LABEL_RE.finditer(head))
    if not labels:
        logger.debug("No speaker labels found in %d chars of text", len(head))
        return []

    preamble = head[: labels[0].start()].strip()
    if preamble:
        logger.debug("Discarding unlabelled preamble: %r", preamble)

    messages: list[MessageRecord] = []
    for idx, label in enumerate(labels):
        body_end = labels[idx + 1].start() if idx + 1 < len(labels) else len(head)
        messages.append(
            MessageRecord(
                sender=label.group(1).lower(),  # type: ignore[arg-type]
                text=head[label.end(): body_end].strip(),
            )
        )

    return messages


def format_transcript(messages: Iterable[MessageRecord]) -> str:
    """Render messages back into ``sender: text`` lines.

    This is the transcript layout sent upstream for review, so the output
    of :func:`parse_messages` on the result round-trips.

    Args:
        messages: Messages to render.

    Returns:
        One ``sender: text`` line per message, joined with ``\\n``.
    """
    return "\n".join(f"{m.sender}: {m.text}" for m in messages)
