"""
Property-based tests for transcript annotation.

Uses Hypothesis to generate upstream responses mixing wrapped, parenthetical
and unmarked user messages with positional, quoted, or missing critique
blocks, and checks the invariants every consumer relies on.
"""

from __future__ import annotations

import string

from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from convo_coach.critique import assemble
from convo_coach.highlights import extract_highlights
from convo_coach.models.transcript import REFERENCE_KEY_RE, HighlightSpan
from convo_coach.pipeline import annotate_feedback

# Lowercase words only: no colons, quotes or brackets, so generated text
# never forms labels or markers by accident.
phrases = st.text(alphabet=string.ascii_lowercase, min_size=1, max_size=10)

user_lines = st.one_of(
    phrases.map(lambda p: f"user: (highlight){p}(highlight) ok"),
    phrases.map(lambda p: f"user: well ({p}) then"),
    st.tuples(phrases, phrases).map(
        lambda ps: f"user: (highlight){ps[0]}(highlight) and (highlight){ps[1]}(highlight)"
    ),
    phrases.map(lambda p: f"user: {p}"),
)
ai_lines = phrases.map(lambda p: f"ai: ({p}) sure")

transcripts = st.lists(st.one_of(user_lines, ai_lines), min_size=0, max_size=8)

tails = st.one_of(
    st.just(""),
    st.lists(phrases, max_size=6).map(
        lambda ps: "\n".join(f"feedback {i}: {p}" for i, p in enumerate(ps, 1))
    ),
    st.lists(st.tuples(phrases, phrases), max_size=6).map(
        lambda ps: "\n".join(f'feedback: "{t}" {c}' for t, c in ps)
    ),
)

_SETTINGS = settings(
    max_examples=100,
    deadline=None,
    suppress_health_check=[HealthCheck.function_scoped_fixture],
)


def _build_response(lines: list[str], tail: str) -> str:
    body = "\n".join(lines)
    return f"{body}\n----\n{tail}" if tail else body


def _keys_in_order(texts: list[str]) -> list[int]:
    return [int(m.group(1)) for text in texts for m in REFERENCE_KEY_RE.finditer(text)]


# =============================================================================
# Property 1: No dangling reference keys
# =============================================================================


@given(lines=transcripts, tail=tails)
@_SETTINGS
def test_no_dangling_keys_property(lines: list[str], tail: str) -> None:
    """Every key in any message body has an annotation entry."""
    result = annotate_feedback(_build_response(lines, tail))

    for message in result.messages:
        for match in REFERENCE_KEY_RE.finditer(message.text):
            assert match.group(0) in result.annotations


# =============================================================================
# Property 2: Keys are 1..N in discovery order
# =============================================================================


@given(lines=transcripts, tail=tails.filter(lambda t: '"' not in t))
@_SETTINGS
def test_key_ordering_property(lines: list[str], tail: str) -> None:
    """Without quoted entries, keys appear top-to-bottom as 1..N."""
    result = annotate_feedback(_build_response(lines, tail))

    found = _keys_in_order([m.text for m in result.messages])
    assert found == list(range(1, len(found) + 1))
    assert list(result.annotations) == [f"(highlighted{n})" for n in found]


# =============================================================================
# Property 3: Empty tail never loses a highlight
# =============================================================================


@given(texts=st.lists(phrases, max_size=10))
@_SETTINGS
def test_empty_tail_keeps_all_highlights_property(texts: list[str]) -> None:
    """assemble('') returns one empty-critique entry per highlight."""
    highlights = [HighlightSpan(sequence_index=i, original_text=t) for i, t in enumerate(texts, 1)]

    result = assemble("", highlights)

    assert len(result.annotations) == len(highlights)
    assert all(critique == "" for _, critique in result.annotations.values())


# =============================================================================
# Property 4: Re-extraction is idempotent
# =============================================================================


@given(lines=transcripts)
@_SETTINGS
def test_reextraction_idempotent_property(lines: list[str]) -> None:
    """Running extraction over its own output finds nothing new."""
    result = annotate_feedback("\n".join(lines))
    messages = list(result.messages)

    again, spans = extract_highlights(messages)

    assert again == messages
    assert spans == []


# =============================================================================
# Property 5: Arbitrary text never raises
# =============================================================================


@given(raw=st.text(max_size=300))
@_SETTINGS
def test_arbitrary_text_never_raises_property(raw: str) -> None:
    """Any string produces a result with no dangling keys."""
    result = annotate_feedback(raw)

    for message in result.messages:
        assert message.sender in ("user", "ai")
        for match in REFERENCE_KEY_RE.finditer(message.text):
            assert match.group(0) in result.annotations
