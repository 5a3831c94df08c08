"""Tests for comment markup parsing."""
import pytest

from opening_drills.lib.models import ArrowMark, MarkColor, SquareMark
from opening_drills.study.parsers.markup import parse_markup, strip_directives


class TestParseMarkup:
    def test_squares_and_arrows(self):
        result = parse_markup("Good move! [%csl Ra1,Gb2][%cal Yb4a2]")

        assert result.clean_text == "Good move!"
        assert result.highlighted_squares == [
            SquareMark("a1", MarkColor.RED),
            SquareMark("b2", MarkColor.GREEN),
        ]
        assert result.arrows == [ArrowMark("b4", "a2", MarkColor.YELLOW)]

    def test_plain_comment_is_untouched(self):
        result = parse_markup("  Develops the knight.  ")

        assert result.clean_text == "Develops the knight."
        assert result.highlighted_squares == []
        assert result.arrows == []

    def test_short_tokens_are_dropped(self):
        result = parse_markup("[%csl Ra1,G,Bb][%cal Ye2e4,Rd2]")

        assert result.highlighted_squares == [SquareMark("a1", MarkColor.RED)]
        assert result.arrows == [ArrowMark("e2", "e4", MarkColor.YELLOW)]

    def test_file_letter_is_case_insensitive(self):
        result = parse_markup("[%csl GE4][%cal BG1F3]")

        assert result.highlighted_squares == [SquareMark("e4", MarkColor.GREEN)]
        assert result.arrows == [ArrowMark("g1", "f3", MarkColor.BLUE)]

    def test_unknown_color_and_off_board_squares_dropped(self):
        result = parse_markup("[%csl Xa1,Ri9,Bh8]")

        assert result.highlighted_squares == [SquareMark("h8", MarkColor.BLUE)]

    def test_every_tagged_directive_is_removed(self):
        result = parse_markup("[%clk 0:05:00] Sharp line [%eval 0.35] [%csl Rd4]")

        assert result.clean_text == "Sharp line"
        assert result.highlighted_squares == [SquareMark("d4", MarkColor.RED)]

    def test_spaces_inside_token_list(self):
        result = parse_markup("[%cal Gd1h5, Rf7f6]")

        assert [a.color for a in result.arrows] == [MarkColor.GREEN, MarkColor.RED]

    @pytest.mark.parametrize("raw", ["", "[%csl]", "[%cal ]", "[%csl ,,,]"])
    def test_degenerate_input_never_raises(self, raw):
        result = parse_markup(raw)

        assert result.clean_text == ""
        assert result.highlighted_squares == []
        assert result.arrows == []


def test_strip_directives():
    assert strip_directives("Plan [%cal Gc1g5] with Bg5") == "Plan  with Bg5"
