"""Derive a display name for a parsed line from its headers or first comment."""

import re
from typing import Mapping, Optional

from opening_drills.study.parsers.markup import strip_directives

HEADER_PREFERENCE = ("Event", "Opening", "Variation", "ECO", "Site", "Annotator", "White", "Black")
MAX_COMMENT_NAME_LENGTH = 100
PLACEHOLDER = "?"

# Some authoring tools store chapter titles such as "1.e4 e5 2.Nf3" in the player fields.
_MOVE_SEQUENCE_RE = re.compile(r"\d+\.|\.\.\.|…")


def _usable(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    if not value or value == PLACEHOLDER:
        return None
    return value


def derive_name(headers: Mapping[str, str], first_annotation_raw: Optional[str] = None) -> Optional[str]:
    """
    Pick a line name, first match wins:

    1. "<White> - <Black>" when both are set and one of them reads like moves.
    2. The first usable header in HEADER_PREFERENCE order.
    3. The first line of the first comment, markup removed, if shorter than 100 chars.
    4. None, leaving the caller to use a positional label.
    """
    white = _usable(headers.get("White"))
    black = _usable(headers.get("Black"))
    if white and black and (_MOVE_SEQUENCE_RE.search(white) or _MOVE_SEQUENCE_RE.search(black)):
        return f"{white} - {black}"

    for key in HEADER_PREFERENCE:
        value = _usable(headers.get(key))
        if value:
            return value

    if first_annotation_raw:
        lines = first_annotation_raw.strip().splitlines()
        first_line = strip_directives(lines[0]) if lines else ""
        if first_line and len(first_line) < MAX_COMMENT_NAME_LENGTH:
            return first_line

    return None
