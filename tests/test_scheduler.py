"""Tests for SM-2 scheduling."""
from datetime import datetime, timedelta, timezone

import pytest

from opening_drills.lib.models import SchedulingState
from opening_drills.trainer.scheduler import (
    Outcome,
    format_next_review,
    is_due,
    mastery_percent,
    next_easiness,
    schedule,
)

NOW = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def fresh():
    return SchedulingState.new(NOW)


class TestSchedule:
    def test_correct_sequence_from_default_easiness(self, fresh):
        state = fresh
        intervals = []
        for _ in range(4):
            state = schedule(Outcome.CORRECT, state, NOW)
            intervals.append(state.interval_days)

        assert intervals == [1, 6, 15, 38]
        assert state.easiness_factor == pytest.approx(2.5)
        assert state.consecutive_correct == 4

    def test_review_times(self, fresh):
        state = schedule(Outcome.CORRECT, fresh, NOW)

        assert state.last_review_time == NOW
        assert state.next_review_time == NOW + timedelta(days=1)

    def test_incorrect_resets_and_lowers_easiness(self, fresh):
        state = schedule(Outcome.CORRECT, fresh, NOW)
        state = schedule(Outcome.CORRECT, state, NOW)
        state = schedule(Outcome.INCORRECT, state, NOW)

        assert state.consecutive_correct == 0
        assert state.interval_days == 1
        assert state.easiness_factor == pytest.approx(1.7)
        assert state.next_review_time == NOW + timedelta(days=1)

    def test_easiness_never_drops_below_floor(self, fresh):
        state = fresh
        for _ in range(5):
            state = schedule(Outcome.INCORRECT, state, NOW)
        assert state.easiness_factor == pytest.approx(1.3)

    def test_input_state_is_not_modified(self, fresh):
        schedule(Outcome.CORRECT, fresh, NOW)
        assert fresh.consecutive_correct == 0
        assert fresh.last_review_time is None

    def test_interval_rounds_half_up(self):
        state = SchedulingState(easiness_factor=1.3, interval_days=5, consecutive_correct=2,
                                next_review_time=NOW)
        # EF stays 1.3 on a correct answer at the floor: 5 * 1.3 = 6.5 -> 7
        assert schedule(Outcome.CORRECT, state, NOW).interval_days == 7

    def test_next_easiness(self):
        assert next_easiness(2.5, 4) == pytest.approx(2.5)
        assert next_easiness(2.5, 5) == pytest.approx(2.6)
        assert next_easiness(1.4, 0) == pytest.approx(1.3)


class TestDueAndLabels:
    def test_new_line_is_due(self, fresh):
        assert is_due(fresh, NOW)
        assert format_next_review(fresh, NOW) == "Due now"

    def test_not_due_before_next_review(self, fresh):
        state = schedule(Outcome.CORRECT, fresh, NOW)
        assert not is_due(state, NOW + timedelta(hours=23))
        assert is_due(state, NOW + timedelta(days=1))

    @pytest.mark.parametrize("days, label", [
        (1, "Tomorrow"),
        (3, "In 3 days"),
        (14, "In 2 weeks"),
        (20, "In 3 weeks"),
        (60, "In 2 months"),
    ])
    def test_format_next_review(self, days, label):
        state = SchedulingState(2.5, days, 1, NOW + timedelta(days=days))
        assert format_next_review(state, NOW) == label


class TestMastery:
    def test_unreviewed_line_has_no_mastery(self, fresh):
        assert mastery_percent(fresh) == 0

    def test_mastery_scales_with_easiness(self):
        assert mastery_percent(SchedulingState(2.5, 1, 1, NOW)) == 100
        assert mastery_percent(SchedulingState(1.9, 1, 1, NOW)) == 50
        assert mastery_percent(SchedulingState(1.3, 1, 3, NOW)) == 0
