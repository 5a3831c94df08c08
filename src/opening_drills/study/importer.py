"""Turn raw PGN text into named study lines and repertoires."""

import dataclasses
import logging
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from opening_drills.lib.errors import NoLinesFound
from opening_drills.lib.models import Repertoire, StudyLine, utc_now
from opening_drills.study.parsers.extractor import LineExtractor
from opening_drills.study.parsers.naming import derive_name
from opening_drills.study.parsers.pgn_sanitizer import PGNSanitizer

logger = logging.getLogger("opening_drills")


class PGNLineParser:
    """Composition root for parsing: extraction, comment alignment, markup and naming."""

    def __init__(self, extractor: Optional[LineExtractor] = None):
        self.extractor = extractor or LineExtractor()

    def parse(self, pgn_text: str, now: Optional[datetime] = None) -> List[StudyLine]:
        """
        Parse every game in `pgn_text` into a named StudyLine.

        Games that cannot be decoded or have no moves are skipped. Lines without
        a derivable name are labelled "Chapter N" by their position in the result.
        """
        lines: List[StudyLine] = []
        games = self.extractor.split_games(pgn_text)

        for game_text in games:
            line = self.extractor.extract_line(game_text, now=now)
            if line is None:
                continue
            headers = PGNSanitizer.parse_headers(game_text)
            name = derive_name(headers, PGNSanitizer.first_comment(PGNSanitizer.strip_headers(game_text)))
            lines.append(dataclasses.replace(line, name=name or f"Chapter {len(lines) + 1}"))

        logger.info(f"Parsed {len(lines)} line(s) from {len(games)} game(s).")
        return lines


def repertoire_name_from_path(path: str) -> str:
    """File name without a .pgn extension."""
    name = Path(path).name
    if name.lower().endswith(".pgn"):
        name = name[:-4]
    return name


def build_repertoire(pgn_text: str, name: Optional[str] = None,
                     parser: Optional[PGNLineParser] = None,
                     now: Optional[datetime] = None) -> Repertoire:
    """
    Parse PGN into a new Repertoire with zeroed statistics.

    Raises:
        NoLinesFound: if no game in the text produced a line.
    """
    now = now or utc_now()
    lines = (parser or PGNLineParser()).parse(pgn_text, now=now)
    if not lines:
        raise NoLinesFound("No valid moves found in PGN")

    return Repertoire(
        name=name or f"Repertoire {now:%Y-%m-%d}",
        lines=lines,
        created_at=now,
    )
