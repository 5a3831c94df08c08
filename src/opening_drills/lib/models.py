from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Optional, Tuple
import uuid

import chess

DEFAULT_EASINESS = 2.5
MIN_EASINESS = 1.3


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _side_to_str(side: chess.Color) -> str:
    return "w" if side == chess.WHITE else "b"


def _side_from_str(value: str) -> chess.Color:
    return chess.WHITE if value == "w" else chess.BLACK


def _parse_time(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    return datetime.fromisoformat(value)


class MarkColor(Enum):
    """Closed set of colors used by [%csl] and [%cal] markup."""
    YELLOW = "Y"
    RED = "R"
    GREEN = "G"
    BLUE = "B"


@dataclass(frozen=True)
class SquareMark:
    square: str
    color: MarkColor


@dataclass(frozen=True)
class ArrowMark:
    from_square: str
    to_square: str
    color: MarkColor


@dataclass(frozen=True)
class AnnotatedMove:
    """
    One move of a study line together with its annotation.

    Attributes:
        move_text: Standard Algebraic Notation of the move (e.g., "Nf3").
        side: The side that made the move (chess.WHITE or chess.BLACK).
        comment: Comment text with markup directives removed.
        highlighted_squares: Colored squares from [%csl] markup, in source order.
        arrows: Colored arrows from [%cal] markup, in source order.
    """
    move_text: str
    side: chess.Color
    comment: Optional[str] = None
    highlighted_squares: Tuple[SquareMark, ...] = ()
    arrows: Tuple[ArrowMark, ...] = ()

    @property
    def has_annotation(self) -> bool:
        return bool(self.comment or self.highlighted_squares or self.arrows)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "san": self.move_text,
            "color": _side_to_str(self.side),
            "comment": self.comment,
            "highlightedSquares": [
                {"square": m.square, "color": m.color.value} for m in self.highlighted_squares
            ],
            "arrows": [
                {"from": a.from_square, "to": a.to_square, "color": a.color.value} for a in self.arrows
            ],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AnnotatedMove":
        return cls(
            move_text=data["san"],
            side=_side_from_str(data["color"]),
            comment=data.get("comment"),
            highlighted_squares=tuple(
                SquareMark(m["square"], MarkColor(m["color"])) for m in data.get("highlightedSquares", [])
            ),
            arrows=tuple(
                ArrowMark(a["from"], a["to"], MarkColor(a["color"])) for a in data.get("arrows", [])
            ),
        )


@dataclass(frozen=True)
class SchedulingState:
    """
    SM-2 review state of a study line.

    Invariants: easiness_factor >= 1.3, and interval_days >= 1 whenever
    consecutive_correct >= 1.
    """
    easiness_factor: float
    interval_days: int
    consecutive_correct: int
    next_review_time: datetime
    last_review_time: Optional[datetime] = None

    @classmethod
    def new(cls, now: Optional[datetime] = None) -> "SchedulingState":
        """Defaults for a freshly imported line, due immediately."""
        return cls(
            easiness_factor=DEFAULT_EASINESS,
            interval_days=0,
            consecutive_correct=0,
            next_review_time=now or utc_now(),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "easinessFactor": self.easiness_factor,
            "interval": self.interval_days,
            "repetitions": self.consecutive_correct,
            "nextReviewDate": self.next_review_time.isoformat(),
            "lastReviewed": self.last_review_time.isoformat() if self.last_review_time else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SchedulingState":
        return cls(
            easiness_factor=float(data.get("easinessFactor", DEFAULT_EASINESS)),
            interval_days=int(data.get("interval", 0)),
            consecutive_correct=int(data.get("repetitions", 0)),
            next_review_time=_parse_time(data.get("nextReviewDate")) or utc_now(),
            last_review_time=_parse_time(data.get("lastReviewed")),
        )


@dataclass
class StudyLine:
    """
    A complete line from a starting position, drilled as one flashcard.

    Only `scheduling` and `mistake_move_indices` change after parsing; callers
    produce updated copies with dataclasses.replace instead of mutating.
    """
    start_fen: str
    moves: Tuple[AnnotatedMove, ...]
    name: Optional[str] = None
    scheduling: SchedulingState = field(default_factory=SchedulingState.new)
    mistake_move_indices: FrozenSet[int] = frozenset()
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "startFen": self.start_fen,
            "name": self.name,
            "moves": [m.to_dict() for m in self.moves],
            "scheduling": self.scheduling.to_dict(),
            "mistakeMoveIndices": sorted(self.mistake_move_indices),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StudyLine":
        return cls(
            id=data["id"],
            start_fen=data["startFen"],
            name=data.get("name"),
            moves=tuple(AnnotatedMove.from_dict(m) for m in data.get("moves", [])),
            scheduling=SchedulingState.from_dict(data.get("scheduling", {})),
            mistake_move_indices=frozenset(data.get("mistakeMoveIndices", [])),
        )


@dataclass
class Repertoire:
    """A named collection of study lines plus aggregate review counters."""
    name: str
    lines: List[StudyLine] = field(default_factory=list)
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    created_at: datetime = field(default_factory=utc_now)
    last_studied: Optional[datetime] = None
    total_reviews: int = 0
    correct_reviews: int = 0
    current_streak: int = 0
    longest_streak: int = 0

    @property
    def accuracy(self) -> int:
        if self.total_reviews == 0:
            return 0
        return int(self.correct_reviews * 100 / self.total_reviews + 0.5)

    def find_line(self, line_id: str) -> Optional[StudyLine]:
        for line in self.lines:
            if line.id == line_id:
                return line
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "createdAt": self.created_at.isoformat(),
            "lastStudied": self.last_studied.isoformat() if self.last_studied else None,
            "lines": [line.to_dict() for line in self.lines],
            "streak": self.current_streak,
            "longestStreak": self.longest_streak,
            "stats": {
                "totalReviews": self.total_reviews,
                "correctReviews": self.correct_reviews,
                "accuracy": self.accuracy,
            },
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Repertoire":
        stats = data.get("stats", {})
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            lines=[StudyLine.from_dict(line) for line in data.get("lines", [])],
            created_at=_parse_time(data.get("createdAt")) or utc_now(),
            last_studied=_parse_time(data.get("lastStudied")),
            total_reviews=int(stats.get("totalReviews", 0)),
            correct_reviews=int(stats.get("correctReviews", 0)),
            current_streak=int(data.get("streak", 0)),
            longest_streak=int(data.get("longestStreak", 0)),
        )
