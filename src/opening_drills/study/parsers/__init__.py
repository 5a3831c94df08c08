"""PGN parsing: markup, comment alignment, line extraction and naming."""

from opening_drills.study.parsers.extractor import LineExtractor
from opening_drills.study.parsers.markup import ParsedComment, parse_markup, strip_directives
from opening_drills.study.parsers.movetext import align_comments, strip_variations, tokenize_movetext
from opening_drills.study.parsers.naming import derive_name
from opening_drills.study.parsers.pgn_sanitizer import PGNSanitizer

__all__ = [
    "LineExtractor",
    "ParsedComment",
    "parse_markup",
    "strip_directives",
    "align_comments",
    "strip_variations",
    "tokenize_movetext",
    "derive_name",
    "PGNSanitizer",
]
