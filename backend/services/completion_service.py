from __future__ import annotations

import math
from datetime import datetime
from typing import Any

from db.schemas import Habit, HabitInstance
from services.errors import InvalidGoalValueError


def coerce_goal_value(raw: Any) -> float | None:
    """Numeric value from user input; None passes through, anything else non-numeric raises."""
    if raw is None:
        return None
    if isinstance(raw, bool):
        raise InvalidGoalValueError("value must be a number, not a boolean")
    if isinstance(raw, (int, float)):
        value = float(raw)
    elif isinstance(raw, str) and raw.strip():
        try:
            value = float(raw.strip())
        except ValueError:
            raise InvalidGoalValueError(f"value '{raw}' is not numeric")
    else:
        raise InvalidGoalValueError(f"value {raw!r} is not numeric")
    if not math.isfinite(value):
        raise InvalidGoalValueError("value must be a finite number")
    return value


def evaluate_completion(habit: Habit, toggle: bool, value: float | None) -> bool:
    if habit.goal is not None:
        return value is not None and value >= habit.goal.target
    return bool(toggle)


def apply_completion(
    instance: HabitInstance,
    habit: Habit,
    *,
    toggle: bool,
    value: Any = None,
    now: datetime,
) -> HabitInstance:
    """Return the instance with completion applied; the input is left unmodified.

    Goal habits need a numeric value and ignore the toggle. completed_at is stamped
    on the transition to completed and cleared on the transition away from it.
    """
    numeric = coerce_goal_value(value)
    if habit.goal is not None and numeric is None:
        raise InvalidGoalValueError(f"habit '{habit.id}' has a goal; a numeric value is required")

    completed = evaluate_completion(habit, toggle, numeric)
    if completed and not instance.completed:
        completed_at = now
    elif completed:
        completed_at = instance.completed_at or now
    else:
        completed_at = None
    return instance.model_copy(
        update={
            "completed": completed,
            "completed_at": completed_at,
            "value": numeric,
        }
    )
