"""Tests for the python-chess backed rules oracle."""
import chess
import pytest

from opening_drills.lib.errors import IllegalMove, MalformedScript
from opening_drills.lib.oracle import STANDARD_FEN, ChessRulesOracle

PROMOTION_FEN = "8/P7/8/8/8/8/8/k6K w - - 0 1"


@pytest.fixture
def oracle():
    return ChessRulesOracle()


class TestDecodeScript:
    def test_decodes_mainline(self, oracle):
        script = oracle.decode_script("1. e4 e5 2. Nf3 Nc6 3. Bb5")

        assert [m.san for m in script.moves] == ["e4", "e5", "Nf3", "Nc6", "Bb5"]
        assert [m.side for m in script.moves] == [chess.WHITE, chess.BLACK] * 2 + [chess.WHITE]
        assert script.start_fen == STANDARD_FEN

    def test_final_fen(self, oracle):
        script = oracle.decode_script("1. e4")
        assert script.final_fen == "rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b KQkq - 0 1"

    def test_empty_script(self, oracle):
        script = oracle.decode_script("")
        assert script.moves == []
        assert script.final_fen == STANDARD_FEN

    def test_illegal_move_is_malformed(self, oracle):
        with pytest.raises(MalformedScript):
            oracle.decode_script("1. e4 e5 2. Ke3")

    def test_bad_start_position(self, oracle):
        with pytest.raises(MalformedScript):
            oracle.decode_script("1. e4", fen="not a fen")


class TestApplyMoveText:
    def test_san(self, oracle):
        applied = oracle.apply_move_text(STANDARD_FEN, "Nf3")

        assert applied.san == "Nf3"
        assert applied.uci == "g1f3"
        assert (applied.from_square, applied.to_square) == ("g1", "f3")

    def test_uci(self, oracle):
        assert oracle.apply_move_text(STANDARD_FEN, "e2e4").san == "e4"

    def test_uci_promotion_defaults_to_queen(self, oracle):
        assert oracle.apply_move_text(PROMOTION_FEN, "a7a8").san == "a8=Q+"
        assert oracle.apply_move_text(PROMOTION_FEN, "a7a8n").san == "a8=N"

    @pytest.mark.parametrize("text", ["Ke2", "e5", "", "--", "Zz9", "e2e5"])
    def test_rejected(self, oracle, text):
        with pytest.raises(IllegalMove):
            oracle.apply_move_text(STANDARD_FEN, text)

