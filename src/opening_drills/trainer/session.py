"""Drill session state machine.

A session replays one StudyLine: the user plays one side, the other side is
auto-played. All state lives in an immutable DrillSessionState; the functions
below are pure transitions (given the rules oracle) and DrillSessionEngine is
the host-side driver that paces the automatic steps.
"""
import logging
import time
from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import Callable, FrozenSet, Optional, Tuple

import chess

from opening_drills.lib.errors import IllegalMove
from opening_drills.lib.models import AnnotatedMove, StudyLine, utc_now
from opening_drills.lib.oracle import ChessRulesOracle
from opening_drills.trainer.scheduler import Outcome, schedule

logger = logging.getLogger("opening_drills")

PLAYED_MOVES_SHOWN = 3


class Phase(Enum):
    LOADING = "loading"
    REPLAYING = "replaying"
    AWAITING_MOVE = "awaiting_move"
    FEEDBACK_CORRECT = "feedback_correct"
    FEEDBACK_INCORRECT = "feedback_incorrect"
    AUTO_PLAYING = "auto_playing"
    COMPLETE = "complete"
    EXITED = "exited"
    FAULTED = "faulted"


# Phases advanced by step() without user input.
AUTOMATIC_PHASES = (Phase.LOADING, Phase.REPLAYING, Phase.FEEDBACK_CORRECT, Phase.AUTO_PLAYING)
# Phases that accept a move attempt.
INPUT_PHASES = (Phase.AWAITING_MOVE, Phase.FEEDBACK_INCORRECT)
TERMINAL_PHASES = (Phase.COMPLETE, Phase.EXITED, Phase.FAULTED)


@dataclass(frozen=True)
class Hint:
    origin_square: str
    arrow: Optional[Tuple[str, str]] = None


@dataclass(frozen=True)
class DrillSessionState:
    """
    Everything a session knows; never mutated, only replaced.

    Attributes:
        line: Private copy of the line being drilled.
        user_side: The side the user plays.
        fen: Current board position.
        cursor: Index of the next move in line.moves to be played.
        resume_index: Moves before this index are replayed automatically.
        error_count: Wrong attempts on the current expected move; drives hints.
        session_mistakes: Move indices answered wrongly at least once this session.
        white_annotation / black_annotation: Last annotated move seen per side.
        played_moves: SAN of the most recent moves, newest last.
        faults: Stored move the oracle rejected during replay or auto-play;
            such a move ends the session in FAULTED.
    """
    line: StudyLine
    user_side: chess.Color
    fen: str
    cursor: int = 0
    phase: Phase = Phase.LOADING
    resume_index: int = 0
    correct_count: int = 0
    incorrect_count: int = 0
    error_count: int = 0
    session_mistakes: FrozenSet[int] = frozenset()
    white_annotation: Optional[AnnotatedMove] = None
    black_annotation: Optional[AnnotatedMove] = None
    played_moves: Tuple[str, ...] = ()
    faults: Tuple[str, ...] = ()

    @property
    def is_finished(self) -> bool:
        return self.phase in TERMINAL_PHASES

    @property
    def expected_index(self) -> Optional[int]:
        """Index of the next move the user has to find, or None at the end of the line."""
        for index in range(self.cursor, len(self.line.moves)):
            if self.line.moves[index].side == self.user_side:
                return index
        return None

    @property
    def expected_move(self) -> Optional[AnnotatedMove]:
        index = self.expected_index
        return None if index is None else self.line.moves[index]

    @property
    def remaining_user_moves(self) -> int:
        return sum(1 for move in self.line.moves[self.cursor:] if move.side == self.user_side)

    @property
    def live_annotations(self) -> Tuple[AnnotatedMove, ...]:
        """Annotated moves to display, the side that moved first in the pair first."""
        first, second = (
            (self.white_annotation, self.black_annotation)
            if self.user_side == chess.WHITE
            else (self.black_annotation, self.white_annotation)
        )
        return tuple(move for move in (first, second) if move is not None)


@dataclass(frozen=True)
class SessionReport:
    """
    What a finished or abandoned session hands back for persistence.

    `line` carries the new scheduling state (completed sessions only) and
    the new mistake indices.
    """
    line: StudyLine
    outcome: Optional[Outcome]
    correct_count: int
    incorrect_count: int
    completed: bool
    faulted: bool = False

    @property
    def scheduled(self) -> bool:
        return self.outcome is not None

    @property
    def streak_broken(self) -> bool:
        return self.incorrect_count > 0


def start_session(line: StudyLine, user_side: chess.Color = chess.WHITE) -> DrillSessionState:
    """Create the LOADING state; resumes just before the earliest stored mistake."""
    in_range = [i for i in line.mistake_move_indices if 0 <= i < len(line.moves)]
    return DrillSessionState(
        line=line,
        user_side=user_side,
        fen=line.start_fen,
        resume_index=min(in_range) if in_range else 0,
    )


def _fault(state: DrillSessionState, error: IllegalMove) -> DrillSessionState:
    logger.warning(f"Line {state.line.id}: stored move {state.cursor} rejected, session stopped: {error}")
    return replace(state, phase=Phase.FAULTED, faults=state.faults + (str(error),))


def _settle(state: DrillSessionState, oracle: ChessRulesOracle) -> DrillSessionState:
    if state.cursor >= len(state.line.moves):
        return replace(state, phase=Phase.COMPLETE)
    move = state.line.moves[state.cursor]
    if move.side != state.user_side:
        return replace(state, phase=Phase.AUTO_PLAYING)
    # The user can only be asked for a move that is legal here.
    try:
        oracle.apply_move_text(state.fen, move.move_text)
    except IllegalMove as e:
        return _fault(state, e)
    return replace(state, phase=Phase.AWAITING_MOVE)


def _with_annotation(state: DrillSessionState, move: AnnotatedMove) -> DrillSessionState:
    # A user move starts a new move pair: the opponent's previous note goes away.
    if move.side == state.user_side:
        own = move if move.has_annotation else None
        if state.user_side == chess.WHITE:
            return replace(state, white_annotation=own, black_annotation=None)
        return replace(state, black_annotation=own, white_annotation=None)
    if not move.has_annotation:
        return state
    if move.side == chess.WHITE:
        return replace(state, white_annotation=move)
    return replace(state, black_annotation=move)


def _played(state: DrillSessionState, san: str) -> Tuple[str, ...]:
    return (state.played_moves + (san,))[-PLAYED_MOVES_SHOWN:]


def _play_stored_move(state: DrillSessionState, oracle: ChessRulesOracle) -> DrillSessionState:
    """
    Apply line.moves[cursor].

    A move the oracle rejects leaves the board and cursor where they are and
    ends the session in FAULTED; nothing after it can be played.
    """
    move = state.line.moves[state.cursor]
    try:
        applied = oracle.apply_move_text(state.fen, move.move_text)
    except IllegalMove as e:
        return _fault(state, e)

    state = replace(
        state,
        fen=applied.fen_after,
        cursor=state.cursor + 1,
        played_moves=_played(state, applied.san),
    )
    return _with_annotation(state, move)


def step(state: DrillSessionState, oracle: ChessRulesOracle) -> DrillSessionState:
    """
    Advance one automatic step: load, replay one move, or auto-play one opponent move.

    FEEDBACK_INCORRECT steps back to AWAITING_MOVE. Other phases are returned unchanged.
    """
    if state.phase is Phase.LOADING:
        if state.resume_index > 0:
            logger.info(f"Resuming line {state.line.id} at move {state.resume_index}.")
            return replace(state, phase=Phase.REPLAYING)
        return _settle(state, oracle)

    if state.phase is Phase.REPLAYING:
        state = _play_stored_move(state, oracle)
        if state.phase is Phase.REPLAYING and state.cursor >= state.resume_index:
            return _settle(state, oracle)
        return state

    if state.phase in (Phase.FEEDBACK_CORRECT, Phase.AUTO_PLAYING):
        if state.cursor < len(state.line.moves) and state.line.moves[state.cursor].side != state.user_side:
            state = _play_stored_move(state, oracle)
            if state.phase is Phase.FAULTED:
                return state
        return _settle(state, oracle)

    if state.phase is Phase.FEEDBACK_INCORRECT:
        return replace(state, phase=Phase.AWAITING_MOVE)

    return state


def submit_move(state: DrillSessionState, move_text: str, oracle: ChessRulesOracle) -> DrillSessionState:
    """
    Check a user move (SAN or UCI) against the expected move.

    A correct move is played and the cursor advances (FEEDBACK_CORRECT). A wrong
    or illegal move leaves the board untouched (FEEDBACK_INCORRECT) and records
    the expected move's index as a session mistake.
    """
    if state.phase not in INPUT_PHASES:
        return state

    index = state.expected_index
    if index is None:
        return _settle(state, oracle)
    expected = state.line.moves[index]

    try:
        applied = oracle.apply_move_text(state.fen, move_text)
    except IllegalMove:
        applied = None

    if applied is not None and applied.san == expected.move_text:
        state = replace(
            state,
            fen=applied.fen_after,
            cursor=index + 1,
            phase=Phase.FEEDBACK_CORRECT,
            correct_count=state.correct_count + 1,
            error_count=0,
            played_moves=_played(state, applied.san),
        )
        return _with_annotation(state, expected)

    logger.debug(f"Line {state.line.id}: {move_text!r} rejected, expected {expected.move_text}.")
    return replace(
        state,
        phase=Phase.FEEDBACK_INCORRECT,
        incorrect_count=state.incorrect_count + 1,
        error_count=state.error_count + 1,
        session_mistakes=state.session_mistakes | {index},
    )


def current_hint(state: DrillSessionState, oracle: ChessRulesOracle) -> Optional[Hint]:
    """Origin square after one wrong attempt; origin plus full-move arrow after two or more."""
    if state.error_count == 0 or state.phase not in INPUT_PHASES:
        return None
    expected = state.expected_move
    if expected is None:
        return None
    try:
        applied = oracle.apply_move_text(state.fen, expected.move_text)
    except IllegalMove:
        return None
    if state.error_count >= 2:
        return Hint(applied.from_square, (applied.from_square, applied.to_square))
    return Hint(applied.from_square)


def exit_session(state: DrillSessionState) -> DrillSessionState:
    if state.is_finished:
        return state
    return replace(state, phase=Phase.EXITED)


def conclude(state: DrillSessionState, now: Optional[datetime] = None) -> SessionReport:
    """
    Produce the SessionReport for a completed or abandoned session.

    Completed: any wrong attempt makes the outcome INCORRECT; the line is
    rescheduled and its mistakes replaced by this session's (empty if clean).
    Abandoned or faulted: no rescheduling; this session's mistakes are kept with
    the stored mistakes the user had not reached yet.
    """
    line = state.line
    if state.phase is Phase.COMPLETE:
        outcome = Outcome.CORRECT if state.incorrect_count == 0 else Outcome.INCORRECT
        mistakes = state.session_mistakes if state.incorrect_count else frozenset()
        line = replace(
            line,
            scheduling=schedule(outcome, line.scheduling, now),
            mistake_move_indices=frozenset(mistakes),
        )
        return SessionReport(line, outcome, state.correct_count, state.incorrect_count, completed=True)

    unreached = frozenset(i for i in line.mistake_move_indices if i >= state.cursor)
    line = replace(line, mistake_move_indices=state.session_mistakes | unreached)
    return SessionReport(line, None, state.correct_count, state.incorrect_count, completed=False,
                         faulted=state.phase is Phase.FAULTED)


class DrillSessionEngine:
    """
    Host-side driver for one session.

    Runs automatic steps (loading, replay, auto-play) with `auto_play_delay`
    seconds between moves; pass 0 to run them back to back.

    Example:
        >>> engine = DrillSessionEngine(line, auto_play_delay=0)
        >>> engine.begin()
        >>> engine.submit("e4")
    """

    def __init__(self, line: StudyLine, user_side: chess.Color = chess.WHITE,
                 oracle: Optional[ChessRulesOracle] = None, auto_play_delay: float = 0.8,
                 sleep: Callable[[float], None] = time.sleep,
                 on_update: Optional[Callable[[DrillSessionState], None]] = None):
        self.oracle = oracle or ChessRulesOracle()
        self.auto_play_delay = auto_play_delay
        self._sleep = sleep
        self._on_update = on_update
        self.state = start_session(line, user_side)

    def _set(self, state: DrillSessionState) -> DrillSessionState:
        self.state = state
        if self._on_update:
            self._on_update(state)
        return state

    def run_pending(self) -> DrillSessionState:
        """Run automatic steps until the user is prompted or the line ends."""
        while self.state.phase in AUTOMATIC_PHASES:
            if self.auto_play_delay and self.state.phase is not Phase.LOADING:
                self._sleep(self.auto_play_delay)
            self._set(step(self.state, self.oracle))
        return self.state

    def begin(self) -> DrillSessionState:
        return self.run_pending()

    def submit(self, move_text: str) -> DrillSessionState:
        """Submit a user move; a correct one also triggers the opponent's replies."""
        state = self._set(submit_move(self.state, move_text, self.oracle))
        if state.phase is Phase.FEEDBACK_CORRECT:
            return self.run_pending()
        return state

    def hint(self) -> Optional[Hint]:
        return current_hint(self.state, self.oracle)

    def exit(self) -> DrillSessionState:
        return self._set(exit_session(self.state))

    def report(self, now: Optional[datetime] = None) -> SessionReport:
        if not self.state.is_finished:
            self.exit()
        return conclude(self.state, now or utc_now())
