"""Spaced-repetition scheduling and drill sessions."""

from opening_drills.trainer.scheduler import Outcome, schedule, is_due, format_next_review, mastery_percent
from opening_drills.trainer.session import (
    DrillSessionEngine,
    DrillSessionState,
    Hint,
    Phase,
    SessionReport,
    conclude,
    current_hint,
    exit_session,
    start_session,
    step,
    submit_move,
)
from opening_drills.trainer.service import RepertoireTrainer

__all__ = [
    "Outcome",
    "schedule",
    "is_due",
    "format_next_review",
    "mastery_percent",
    "DrillSessionEngine",
    "DrillSessionState",
    "Hint",
    "Phase",
    "SessionReport",
    "conclude",
    "current_hint",
    "exit_session",
    "start_session",
    "step",
    "submit_move",
    "RepertoireTrainer",
]
