"""Split multi-game PGN into games and turn each game's mainline into a StudyLine."""

import logging
from datetime import datetime
from typing import List, Optional

from opening_drills.lib.errors import MalformedScript
from opening_drills.lib.models import AnnotatedMove, SchedulingState, StudyLine
from opening_drills.lib.oracle import ChessRulesOracle
from opening_drills.study.parsers.markup import parse_markup
from opening_drills.study.parsers.movetext import align_comments, strip_variations
from opening_drills.study.parsers.pgn_sanitizer import PGNSanitizer

logger = logging.getLogger("opening_drills")

GAME_START_MARKER = "[Event"


class LineExtractor:
    """
    Turns PGN text into StudyLines, one per game.

    Variations are discarded; only the mainline becomes a line. A game the
    oracle cannot decode is skipped without affecting the rest of the batch.
    """

    def __init__(self, oracle: Optional[ChessRulesOracle] = None):
        self.oracle = oracle or ChessRulesOracle()

    @staticmethod
    def split_games(pgn_text: str) -> List[str]:
        """GAME SLICER: a new game starts at an [Event line once the current buffer has content."""
        games = []
        current: List[str] = []

        for line in pgn_text.splitlines():
            if line.strip().startswith(GAME_START_MARKER) and "".join(current).strip():
                games.append("\n".join(current))
                current = []
            current.append(line)

        if "".join(current).strip():
            games.append("\n".join(current))

        return games

    def extract_line(self, game_text: str, now: Optional[datetime] = None) -> Optional[StudyLine]:
        """
        Build one StudyLine from a single game.

        Returns:
            The line (unnamed, default scheduling), or None when the game is
            malformed or has no moves.
        """
        headers = PGNSanitizer.parse_headers(game_text)
        movetext = PGNSanitizer.strip_headers(game_text)
        oracle_text = PGNSanitizer.strip_comments(strip_variations(movetext))

        try:
            decoded = self.oracle.decode_script(oracle_text, fen=headers.get("FEN"))
        except MalformedScript as e:
            logger.warning(f"Skipping game {headers.get('Event', '?')!r}: {e}")
            return None

        if not decoded.moves:
            logger.info(f"Skipping game {headers.get('Event', '?')!r}: no moves.")
            return None

        comments = align_comments(movetext, [m.san for m in decoded.moves])

        moves = []
        for index, decoded_move in enumerate(decoded.moves):
            raw = " ".join(comments.get(index, []))
            if raw:
                parsed = parse_markup(raw)
                moves.append(AnnotatedMove(
                    move_text=decoded_move.san,
                    side=decoded_move.side,
                    comment=parsed.clean_text or None,
                    highlighted_squares=tuple(parsed.highlighted_squares),
                    arrows=tuple(parsed.arrows),
                ))
            else:
                moves.append(AnnotatedMove(move_text=decoded_move.san, side=decoded_move.side))

        return StudyLine(
            start_fen=decoded.start_fen,
            moves=tuple(moves),
            scheduling=SchedulingState.new(now),
        )

    def extract_lines(self, pgn_text: str, now: Optional[datetime] = None) -> List[StudyLine]:
        lines = []
        for game_text in self.split_games(pgn_text):
            line = self.extract_line(game_text, now=now)
            if line is not None:
                lines.append(line)
        return lines
