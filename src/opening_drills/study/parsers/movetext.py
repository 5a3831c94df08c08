"""Tokenize PGN movetext and attach comments to the mainline moves they follow."""

import logging
import re
from typing import Dict, Iterator, List, Sequence, Tuple

from opening_drills.lib.errors import AlignmentMiss

logger = logging.getLogger("opening_drills")

COMMENT = "comment"
MOVE_NUMBER = "move_number"
MOVE = "move"
NAG = "nag"
RESULT = "result"
OTHER = "other"

_TOKEN_RE = re.compile(
    r"(?P<comment>\{[^}]*\}?|;[^\n]*)"
    r"|(?P<result>(?:1-0|0-1|1/2-1/2|\*)(?![\w-]))"
    r"|(?P<move_number>\d+(?:\.+|…))"
    r"|(?P<nag>\$\d+)"
    r"|(?P<move>[^\s{};$()\[\]]+)"
    r"|(?P<other>\S)"
)

_GLYPHS_RE = re.compile(r"[!?+#]+$")


def strip_variations(text: str) -> str:
    """
    Remove every parenthesized variation in one linear pass.

    Braced comments on the mainline are copied verbatim, so parentheses inside
    them do not count. A stray ')' is dropped; an unclosed '(' drops the rest.
    """
    out = []
    depth = 0
    i = 0
    n = len(text)
    while i < n:
        ch = text[i]
        if ch == "{":
            end = text.find("}", i)
            end = n if end == -1 else end + 1
            if depth == 0:
                out.append(text[i:end])
            i = end
            continue
        if ch == ";":
            end = text.find("\n", i)
            end = n if end == -1 else end
            if depth == 0:
                out.append(text[i:end])
            i = end
            continue
        if ch == "(":
            if depth == 0:
                out.append(" ")
            depth += 1
        elif ch == ")":
            if depth > 0:
                depth -= 1
        elif depth == 0:
            out.append(ch)
        i += 1
    return "".join(out)


def tokenize_movetext(text: str) -> Iterator[Tuple[str, str]]:
    """Yield (kind, text) pairs for variation-free movetext."""
    for match in _TOKEN_RE.finditer(text):
        kind = match.lastgroup
        yield kind, match.group(kind)


def normalize_san(token: str) -> str:
    """Reduce a move token to a comparable form ("0-0+!" -> "O-O", "e8=Q#" -> "e8Q")."""
    san = _GLYPHS_RE.sub("", token.strip()).replace("=", "")
    if san in ("0-0", "0-0-0"):
        san = san.replace("0", "O")
    return san


def comment_text(token: str) -> str:
    """Inner text of a '{...}' or ';...' comment token."""
    if token.startswith("{"):
        return token[1:-1].strip() if token.endswith("}") else token[1:].strip()
    return token[1:].strip()


def align_comments(script_text: str, move_texts: Sequence[str]) -> Dict[int, List[str]]:
    """
    Recover the comments PGN places after each mainline move.

    Move tokens are matched against `move_texts` in lockstep, so a SAN that
    repeats later in the line (a piece returning to a square, a transposition)
    is always attributed to its own occurrence.

    Args:
        script_text: Annotated movetext (headers already removed).
        move_texts: Mainline SAN moves, in order, as decoded by the oracle.

    Returns:
        dict of move index -> list of raw comment strings; every index is present.
        After an alignment miss the missed move and all later moves map to [].
    """
    aligned: Dict[int, List[str]] = {i: [] for i in range(len(move_texts))}
    tokens = list(tokenize_movetext(strip_variations(script_text)))
    cursor = 0

    for index, move_text in enumerate(move_texts):
        try:
            position = _locate(tokens, cursor, index, move_text)
        except AlignmentMiss as e:
            logger.warning(f"Comment alignment stopped: {e}")
            break

        cursor = position + 1
        while cursor < len(tokens) and tokens[cursor][0] != MOVE:
            kind, text = tokens[cursor]
            if kind == COMMENT:
                comment = comment_text(text)
                if comment:
                    aligned[index].append(comment)
            cursor += 1

    return aligned


def _locate(tokens: List[Tuple[str, str]], start: int, index: int, move_text: str) -> int:
    wanted = normalize_san(move_text)
    for position in range(start, len(tokens)):
        kind, text = tokens[position]
        if kind == MOVE and normalize_san(text) == wanted:
            return position
    raise AlignmentMiss(index, move_text)
