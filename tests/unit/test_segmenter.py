"""Unit tests for splitting upstream responses into head and tail."""

from __future__ import annotations

from convo_coach.segmenter import split_sections


class TestDivider:
    """A dashed line separates transcript from critique."""

    def test_split_on_dashed_divider(self) -> None:
        """Text before the divider is the head, text after is the tail."""
        raw = "user: hi\nai: hello\n----\nfeedback: say more"

        segment = split_sections(raw)

        assert segment.head == "user: hi\nai: hello"
        assert segment.tail == "feedback: say more"
        assert segment.boundary == "divider"

    def test_three_dashes_is_enough(self) -> None:
        """Three dashes qualify as a divider."""
        segment = split_sections("user: hi\n---\nfeedback: x")

        assert segment.boundary == "divider"
        assert segment.tail == "feedback: x"

    def test_two_dashes_is_not_a_divider(self) -> None:
        """Two dashes do not split; the critique marker does instead."""
        segment = split_sections("user: hi\n--\nfeedback: x")

        assert segment.boundary == "critique_marker"
        assert segment.head == "user: hi\n--"

    def test_long_divider_and_surrounding_whitespace_trimmed(self) -> None:
        """Head and tail are trimmed around a long divider."""
        raw = "  user: hi  \n\n------------------------------------------------\n\n  feedback: x  "

        segment = split_sections(raw)

        assert segment.head == "user: hi"
        assert segment.tail == "feedback: x"

    def test_divider_with_trailing_spaces_and_crlf(self) -> None:
        """Trailing blanks and a carriage return on the divider line are tolerated."""
        segment = split_sections("user: hi\n----  \r\nfeedback: x")

        assert segment.boundary == "divider"
        assert segment.tail == "feedback: x"

    def test_dashes_inside_a_line_do_not_split(self) -> None:
        """Dashes that share a line with other text are not a divider."""
        segment = split_sections("user: well --- maybe\nai: ok")

        assert segment.boundary is None
        assert segment.tail == ""

    def test_only_first_divider_splits(self) -> None:
        """A later divider stays inside the tail."""
        segment = split_sections("user: a\n---\nfeedback: b\n---\nfeedback: c")

        assert segment.head == "user: a"
        assert segment.tail == "feedback: b\n---\nfeedback: c"


class TestCritiqueMarkerFallback:
    """Without a divider the first critique marker starts the tail."""

    def test_split_on_first_feedback_line(self) -> None:
        """Everything from the first feedback line is the tail."""
        raw = "user: I dunno\nai: ok\nfeedback: be specific\nfeedback: more"

        segment = split_sections(raw)

        assert segment.head == "user: I dunno\nai: ok"
        assert segment.tail == "feedback: be specific\nfeedback: more"
        assert segment.boundary == "critique_marker"

    def test_numbered_marker_case_insensitive(self) -> None:
        """``Feedback 1 :`` is recognised regardless of case and spacing."""
        segment = split_sections("user: hi\nFeedback 1 : try again")

        assert segment.tail == "Feedback 1 : try again"

    def test_marker_at_start_of_text(self) -> None:
        """A response that is only critique has an empty head."""
        segment = split_sections("feedback: nothing to say")

        assert segment.head == ""
        assert segment.tail == "feedback: nothing to say"

    def test_custom_label(self) -> None:
        """A configured critique label replaces ``feedback``."""
        segment = split_sections("user: hi\ncritique 2: louder", critique_label="critique")

        assert segment.tail == "critique 2: louder"


class TestNoStructure:
    """Absent markers degrade to an empty tail."""

    def test_plain_transcript(self) -> None:
        """No divider, no marker: whole trimmed text is the head."""
        segment = split_sections("  user: hello\nai: hi there  ")

        assert segment.head == "user: hello\nai: hi there"
        assert segment.tail == ""
        assert segment.boundary is None

    def test_empty_string(self) -> None:
        """Empty input yields empty head and tail."""
        segment = split_sections("")

        assert segment.head == ""
        assert segment.tail == ""

    def test_none_is_treated_as_empty(self) -> None:
        """``None`` input does not raise."""
        segment = split_sections(None)

        assert segment.head == ""
        assert segment.tail == ""

    def test_feedback_word_without_colon_is_not_a_marker(self) -> None:
        """The bare word ``feedback`` in a message does not split."""
        segment = split_sections("user: thanks for the feedback\nai: sure")

        assert segment.boundary is None
