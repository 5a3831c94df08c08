"""Tests for movetext tokenizing, variation stripping and comment alignment."""
import logging

from opening_drills.study.parsers.movetext import (
    COMMENT,
    MOVE,
    MOVE_NUMBER,
    NAG,
    RESULT,
    align_comments,
    normalize_san,
    strip_variations,
    tokenize_movetext,
)


class TestStripVariations:
    def test_removes_flat_variation(self):
        text = "1. e4 e5 (1... c5 2. Nf3) 2. Nf3"
        assert strip_variations(text).split() == ["1.", "e4", "e5", "2.", "Nf3"]

    def test_removes_nested_variations(self):
        text = "1. e4 (1. d4 d5 (1... Nf6 2. c4) 2. c4) 1... e5 2. Nf3"
        assert strip_variations(text).split() == ["1.", "e4", "1...", "e5", "2.", "Nf3"]

    def test_keeps_parentheses_inside_mainline_comments(self):
        text = "1. e4 {the king pawn (best by test)} e5"
        assert "{the king pawn (best by test)}" in strip_variations(text)

    def test_drops_comments_inside_variations(self):
        text = "1. e4 ({Also good:} 1. d4 {closed}) e5"
        result = strip_variations(text)
        assert "Also good" not in result
        assert "closed" not in result

    def test_unbalanced_parentheses(self):
        assert strip_variations("1. e4 ) e5").split() == ["1.", "e4", "e5"]
        assert strip_variations("1. e4 e5 (2. d4 exd4").split() == ["1.", "e4", "e5"]


class TestTokenize:
    def test_token_kinds(self):
        tokens = list(tokenize_movetext("1.e4 {Best} e5 $1 2. Nf3 1-0"))

        assert tokens == [
            (MOVE_NUMBER, "1."),
            (MOVE, "e4"),
            (COMMENT, "{Best}"),
            (MOVE, "e5"),
            (NAG, "$1"),
            (MOVE_NUMBER, "2."),
            (MOVE, "Nf3"),
            (RESULT, "1-0"),
        ]

    def test_castling_is_a_move_not_a_result(self):
        kinds = [kind for kind, _ in tokenize_movetext("5. 0-0 0-0-0")]
        assert kinds == [MOVE_NUMBER, MOVE, MOVE]

    def test_black_move_number(self):
        tokens = list(tokenize_movetext("3...Bc5"))
        assert tokens == [(MOVE_NUMBER, "3..."), (MOVE, "Bc5")]


class TestNormalizeSan:
    def test_strips_glyphs_and_checks(self):
        assert normalize_san("Nf3!?") == "Nf3"
        assert normalize_san("Qxf7#") == "Qxf7"
        assert normalize_san("Bb5+!") == "Bb5"

    def test_castling_and_promotion(self):
        assert normalize_san("0-0") == "O-O"
        assert normalize_san("0-0-0+") == "O-O-O"
        assert normalize_san("e8=Q") == normalize_san("e8Q")


class TestAlignComments:
    def test_comment_follows_move(self):
        text = "1. e4 {King pawn} e5 2. Nf3 {Attacks e5} Nc6"
        aligned = align_comments(text, ["e4", "e5", "Nf3", "Nc6"])

        assert aligned == {0: ["King pawn"], 1: [], 2: ["Attacks e5"], 3: []}

    def test_repeated_move_text_is_attributed_to_its_own_occurrence(self):
        text = ("1. Nf3 {first} Nf6 2. Ng1 Ng8 3. Nf3 {second} Nf6 {black again}")
        moves = ["Nf3", "Nf6", "Ng1", "Ng8", "Nf3", "Nf6"]

        aligned = align_comments(text, moves)

        assert aligned[0] == ["first"]
        assert aligned[1] == []
        assert aligned[4] == ["second"]
        assert aligned[5] == ["black again"]

    def test_multiple_comments_for_one_move(self):
        aligned = align_comments("1. d4 {Queen pawn} {[%csl Gd4]} d5", ["d4", "d5"])
        assert aligned[0] == ["Queen pawn", "[%csl Gd4]"]

    def test_variation_comments_are_ignored(self):
        text = "1. e4 {main} (1. d4 {side}) 1... c5 {Sicilian}"
        aligned = align_comments(text, ["e4", "c5"])

        assert aligned == {0: ["main"], 1: ["Sicilian"]}

    def test_annotation_glyphs_and_check_marks(self):
        text = "1. e4 e5 2. Qh5!? {Early queen} Nc6 3. Bc4 Nf6?? 4. Qxf7# {Mate}"
        moves = ["e4", "e5", "Qh5", "Nc6", "Bc4", "Nf6", "Qxf7#"]

        aligned = align_comments(text, moves)

        assert aligned[2] == ["Early queen"]
        assert aligned[6] == ["Mate"]

    def test_comment_before_first_move_is_not_attached(self):
        aligned = align_comments("{Intro} 1. e4 e5", ["e4", "e5"])
        assert aligned == {0: [], 1: []}

    def test_miss_degrades_remaining_moves(self, caplog):
        text = "1. e4 {a} e5 {b} 2. Nf3 {c}"
        with caplog.at_level(logging.WARNING, logger="opening_drills"):
            aligned = align_comments(text, ["e4", "e5", "Bc4", "Nf3"])

        assert aligned == {0: ["a"], 1: ["b"], 2: [], 3: []}
        assert "Bc4" in caplog.text

    def test_line_comments(self):
        aligned = align_comments("1. e4 ; best by test\ne5", ["e4", "e5"])
        assert aligned[0] == ["best by test"]
