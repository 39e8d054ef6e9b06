from __future__ import annotations

import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest


ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from db.schemas import Habit, HabitGoal, HabitInstance  # noqa: E402
from services.completion_service import (  # noqa: E402
    apply_completion,
    coerce_goal_value,
    evaluate_completion,
)
from services.errors import InvalidGoalValueError  # noqa: E402


NOW = datetime(2026, 2, 23, 18, 30, tzinfo=timezone.utc)
LATER = datetime(2026, 2, 23, 21, 0, tzinfo=timezone.utc)

RUN_5K = Habit(id="run", name="Run", goal=HabitGoal(target=5, unit="km"))
READ = Habit(id="read", name="Read 1 Chapter")


def _instance(habit: Habit, **overrides) -> HabitInstance:
    data = {"id": f"2026-02-23_{habit.id}", "habit_id": habit.id, "date": "2026-02-23"}
    data.update(overrides)
    return HabitInstance(**data)


def test_goal_threshold_decides_completion_regardless_of_toggle():
    assert evaluate_completion(RUN_5K, toggle=False, value=5.0) is True
    assert evaluate_completion(RUN_5K, toggle=True, value=4.9) is False
    assert evaluate_completion(RUN_5K, toggle=True, value=None) is False


def test_boolean_habit_uses_toggle():
    assert evaluate_completion(READ, toggle=True, value=None) is True
    assert evaluate_completion(READ, toggle=False, value=None) is False


def test_goal_value_logged_at_target_completes_instance():
    done = apply_completion(_instance(RUN_5K), RUN_5K, toggle=False, value=5, now=NOW)
    short = apply_completion(_instance(RUN_5K, completed=True, completed_at=NOW), RUN_5K, toggle=True, value=4.9, now=LATER)

    assert done.completed is True
    assert done.value == 5.0
    assert done.completed_at == NOW
    assert short.completed is False
    assert short.value == 4.9
    assert short.completed_at is None


def test_completed_at_stamped_on_transition_only():
    first = apply_completion(_instance(READ), READ, toggle=True, now=NOW)
    again = apply_completion(first, READ, toggle=True, now=LATER)
    undone = apply_completion(again, READ, toggle=False, now=LATER)

    assert first.completed_at == NOW
    assert again.completed_at == NOW
    assert undone.completed is False
    assert undone.completed_at is None


def test_apply_completion_returns_copy():
    original = _instance(READ)
    apply_completion(original, READ, toggle=True, now=NOW)
    assert original.completed is False
    assert original.completed_at is None


@pytest.mark.parametrize("bad_value", [None, "abc", True, float("nan"), [5]])
def test_goal_habit_rejects_missing_or_non_numeric_value(bad_value):
    with pytest.raises(InvalidGoalValueError):
        apply_completion(_instance(RUN_5K), RUN_5K, toggle=True, value=bad_value, now=NOW)


def test_numeric_strings_are_accepted():
    assert coerce_goal_value(" 5.5 ") == 5.5
    assert coerce_goal_value(3) == 3.0
    assert coerce_goal_value(None) is None
