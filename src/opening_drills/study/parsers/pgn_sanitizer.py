import re
from typing import Dict, Optional

_HEADER_LINE_RE = re.compile(r'^\s*\[(\w+)\s+"((?:[^"\\]|\\.)*)"\s*\]\s*$')
_BRACE_COMMENT_RE = re.compile(r'\{[^}]*\}?')
_LINE_COMMENT_RE = re.compile(r';[^\n]*')


class PGNSanitizer:
    """Header and comment handling on raw PGN text."""

    @staticmethod
    def parse_headers(pgn_text: str) -> Dict[str, str]:
        """Collect [Key "Value"] header lines; the first occurrence of a key wins."""
        headers: Dict[str, str] = {}
        for line in pgn_text.splitlines():
            m = _HEADER_LINE_RE.match(line)
            if m:
                headers.setdefault(m.group(1), m.group(2).replace('\\"', '"'))
        return headers

    @staticmethod
    def strip_headers(pgn_text: str) -> str:
        """
        Drop every header line, keeping the movetext.

        Only whole lines are removed, so [%csl ...] markup inside comments survives.
        """
        lines = [line for line in pgn_text.splitlines() if not _HEADER_LINE_RE.match(line)]
        return "\n".join(lines).strip()

    @staticmethod
    def strip_comments(movetext: str) -> str:
        """Remove {...} and ;... comments, which the rules oracle need not understand."""
        text = _BRACE_COMMENT_RE.sub(" ", movetext)
        return _LINE_COMMENT_RE.sub(" ", text)

    @staticmethod
    def first_comment(pgn_text: str) -> Optional[str]:
        """Inner text of the first {...} comment, or None."""
        m = re.search(r'\{([^}]*)\}', pgn_text)
        return m.group(1) if m else None
