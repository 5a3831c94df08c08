"""SM-2 (SuperMemo 2) scheduling with binary pass/fail outcomes.

A drilled line is either answered cleanly or not, so the 0-5 quality scale
collapses to two points: correct -> 4, incorrect -> 0.
"""
import math
from dataclasses import replace
from datetime import datetime, timedelta
from enum import Enum
from typing import Optional

from opening_drills.lib.models import DEFAULT_EASINESS, MIN_EASINESS, SchedulingState, utc_now


class Outcome(Enum):
    CORRECT = "correct"
    INCORRECT = "incorrect"


QUALITY = {
    Outcome.CORRECT: 4,
    Outcome.INCORRECT: 0,
}


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def next_easiness(easiness_factor: float, quality: int) -> float:
    """EF' = max(1.3, EF + (0.1 - (5-q) * (0.08 + (5-q) * 0.02)))."""
    delta = 0.1 - (5 - quality) * (0.08 + (5 - quality) * 0.02)
    return max(MIN_EASINESS, easiness_factor + delta)


def schedule(outcome: Outcome, state: SchedulingState, now: Optional[datetime] = None) -> SchedulingState:
    """Calculate the next review state from a pass/fail outcome.

    Args:
        outcome: Whether the line was completed without mistakes.
        state: Scheduling state before this review.
        now: Review time; defaults to the current UTC time.

    Returns:
        A new SchedulingState; `state` is left untouched.
    """
    now = now or utc_now()
    easiness = next_easiness(state.easiness_factor, QUALITY[outcome])

    if outcome is Outcome.INCORRECT:
        consecutive = 0
        interval = 1
    else:
        consecutive = state.consecutive_correct + 1
        if consecutive == 1:
            interval = 1
        elif consecutive == 2:
            interval = 6
        else:
            interval = max(1, _round_half_up(state.interval_days * easiness))

    return replace(
        state,
        easiness_factor=easiness,
        interval_days=interval,
        consecutive_correct=consecutive,
        next_review_time=now + timedelta(days=interval),
        last_review_time=now,
    )


def is_due(state: SchedulingState, now: Optional[datetime] = None) -> bool:
    return state.next_review_time <= (now or utc_now())


def format_next_review(state: SchedulingState, now: Optional[datetime] = None) -> str:
    """Human-readable distance to the next review ("Due now", "Tomorrow", "In 3 weeks")."""
    now = now or utc_now()
    if state.next_review_time <= now:
        return "Due now"

    days = math.ceil((state.next_review_time - now).total_seconds() / 86400)
    if days == 1:
        return "Tomorrow"
    if days < 7:
        return f"In {days} days"
    if days < 30:
        return f"In {math.ceil(days / 7)} weeks"
    return f"In {math.ceil(days / 30)} months"


def mastery_percent(state: SchedulingState) -> int:
    """Easiness mapped onto 0-100 (1.3 -> 0, 2.5 -> 100); 0 until first passed."""
    if state.consecutive_correct == 0:
        return 0
    normalized = (state.easiness_factor - MIN_EASINESS) / (DEFAULT_EASINESS - MIN_EASINESS)
    return _round_half_up(normalized * 100)
