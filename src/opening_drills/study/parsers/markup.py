"""Extract [%csl]/[%cal] board markup and clean prose from PGN comments."""

import re
from dataclasses import dataclass, field
from typing import List, Optional

from opening_drills.lib.models import ArrowMark, MarkColor, SquareMark

_CSL_RE = re.compile(r"\[%csl\s+([^\]]*)\]")
_CAL_RE = re.compile(r"\[%cal\s+([^\]]*)\]")
# Any tagged directive: [%csl ...], [%cal ...], [%clk ...], [%eval ...], ...
_DIRECTIVE_RE = re.compile(r"\[%\w+[^\]]*\]")
_SQUARE_RE = re.compile(r"^[a-h][1-8]$")


@dataclass
class ParsedComment:
    clean_text: str
    highlighted_squares: List[SquareMark] = field(default_factory=list)
    arrows: List[ArrowMark] = field(default_factory=list)


def _color(char: str) -> Optional[MarkColor]:
    try:
        return MarkColor(char.upper())
    except ValueError:
        return None


def _square(text: str) -> Optional[str]:
    square = text.lower()
    return square if _SQUARE_RE.match(square) else None


def strip_directives(text: str) -> str:
    """Remove every [%word ...] directive and trim the result."""
    return _DIRECTIVE_RE.sub("", text).strip()


def parse_markup(raw: str) -> ParsedComment:
    """
    Split a raw comment into clean text, highlighted squares and arrows.

    Best effort: malformed tokens are dropped, never rejected.

    Example:
        >>> parse_markup("Good move! [%csl Ra1,Gb2][%cal Yb4a2]").clean_text
        'Good move!'
    """
    result = ParsedComment(clean_text=strip_directives(raw))

    for block in _CSL_RE.finditer(raw):
        for token in block.group(1).split(","):
            token = token.strip()
            if len(token) < 3:
                continue
            color = _color(token[0])
            square = _square(token[1:3])
            if color and square:
                result.highlighted_squares.append(SquareMark(square, color))

    for block in _CAL_RE.finditer(raw):
        for token in block.group(1).split(","):
            token = token.strip()
            if len(token) < 5:
                continue
            color = _color(token[0])
            from_square = _square(token[1:3])
            to_square = _square(token[3:5])
            if color and from_square and to_square:
                result.arrows.append(ArrowMark(from_square, to_square, color))

    return result
