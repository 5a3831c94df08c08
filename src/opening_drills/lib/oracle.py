"""Rules oracle backed by python-chess: legal move application and SAN decoding."""

import io
import logging
import re
from dataclasses import dataclass
from typing import List, Optional

import chess
import chess.pgn

from opening_drills.lib.errors import IllegalMove, MalformedScript

logger = logging.getLogger("opening_drills")

STANDARD_FEN = chess.STARTING_FEN

_UCI_RE = re.compile(r"^[a-h][1-8][a-h][1-8][qrbn]?$")


@dataclass(frozen=True)
class DecodedMove:
    """A mainline move as decoded from move text."""
    san: str
    side: chess.Color
    fen_after: str


@dataclass(frozen=True)
class DecodedScript:
    start_fen: str
    moves: List[DecodedMove]

    @property
    def final_fen(self) -> str:
        return self.moves[-1].fen_after if self.moves else self.start_fen


@dataclass(frozen=True)
class AppliedMove:
    """Result of applying one move to a position."""
    san: str
    uci: str
    from_square: str
    to_square: str
    fen_after: str


def _wrap_as_pgn(movetext: str, fen: Optional[str] = None) -> str:
    """Wrap cleaned movetext in PGN headers for parsing."""
    headers = ['[Event "?"]', '[Result "*"]']
    if fen and fen.strip() != STANDARD_FEN:
        headers.append(f'[FEN "{fen.strip()}"]')
        headers.append('[SetUp "1"]')
    header_block = "\n".join(headers)
    return f"{header_block}\n\n{movetext} *"


class ChessRulesOracle:
    """
    Delegates all chess rules to python-chess.

    Positions are exchanged as FEN strings so callers never hold a mutable board.
    """

    def decode_script(self, movetext: str, fen: Optional[str] = None) -> DecodedScript:
        """
        Decode a full move-text script into its ordered mainline moves.

        Args:
            movetext: Move text without headers, comments or variations.
            fen: Optional starting position; defaults to the standard start.

        Returns:
            DecodedScript with the start position and every move's SAN, mover and resulting FEN.

        Raises:
            MalformedScript: if python-chess reports any error while reading the moves.
        """
        game = chess.pgn.read_game(io.StringIO(_wrap_as_pgn(movetext, fen)))
        if game is None:
            raise MalformedScript("No game found in move text")
        if game.errors:
            raise MalformedScript(str(game.errors[0]))

        try:
            board = game.board()
        except ValueError as e:
            raise MalformedScript(f"Invalid starting position: {e}") from e

        start_fen = board.fen()
        moves = []
        for move in game.mainline_moves():
            side = board.turn
            san = board.san(move)
            board.push(move)
            moves.append(DecodedMove(san=san, side=side, fen_after=board.fen()))

        return DecodedScript(start_fen=start_fen, moves=moves)

    def apply_move_text(self, fen: str, move_text: str) -> AppliedMove:
        """
        Apply a move given in SAN or UCI to a position.

        Bare UCI pawn moves to the last rank are promoted to a queen.

        Raises:
            IllegalMove: if the text does not describe a legal move in the position.
        """
        try:
            board = chess.Board(fen)
        except ValueError as e:
            raise IllegalMove(move_text, fen) from e

        move = self._parse_move(board, move_text.strip())
        if move is None:
            raise IllegalMove(move_text, fen)

        san = board.san(move)
        board.push(move)
        return AppliedMove(
            san=san,
            uci=move.uci(),
            from_square=chess.square_name(move.from_square),
            to_square=chess.square_name(move.to_square),
            fen_after=board.fen(),
        )

    @staticmethod
    def _parse_move(board: chess.Board, text: str) -> Optional[chess.Move]:
        if not text:
            return None

        if _UCI_RE.match(text.lower()):
            move = chess.Move.from_uci(text.lower())
            piece = board.piece_at(move.from_square)
            if (move.promotion is None and piece is not None and piece.piece_type == chess.PAWN
                    and chess.square_rank(move.to_square) in (0, 7)):
                move = chess.Move(move.from_square, move.to_square, promotion=chess.QUEEN)
            if move in board.legal_moves:
                return move

        try:
            move = board.parse_san(text)
        except ValueError:
            return None
        # parse_san accepts "--" as a null move
        return move if move else None
