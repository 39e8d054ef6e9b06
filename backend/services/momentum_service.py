from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable

from db.schemas import DayStats, Habit, HabitInstance, InterestProgress
from services.errors import ScheduleRuleUnrecognizedError
from services.recurrence_service import applies_on, parse_schedule_rule
from utils.datetime_utils import date_key, day_name, parse_date_key
from utils.units import clamp_pct, completion_pct, round_half_up


STRENGTH_RATE_WEIGHT = 0.7
STRENGTH_MOMENTUM_WEIGHT = 0.3
STREAK_CAP_DAYS = 21
DAYS_PER_LEVEL = 7


@dataclass(frozen=True)
class HabitMomentum:
    streak: int
    strength: int


def _instances_by_day(habit: Habit, instances: Iterable[HabitInstance]) -> dict[str, HabitInstance]:
    return {row.date: row for row in instances if row.habit_id == habit.id}


def compute_streak(habit: Habit, instances: Iterable[HabitInstance], today: date) -> int:
    """Consecutive completed scheduled days, scanning backward from today.

    Today's occurrence only counts once completed; leaving it open does not break
    the run. Any earlier scheduled day that is incomplete or has no instance ends
    the scan. Occurrences after today are ignored.
    """
    by_day = _instances_by_day(habit, instances)
    if not by_day:
        return 0
    try:
        parse_schedule_rule(habit.schedule)
    except ScheduleRuleUnrecognizedError:
        return 0

    earliest = parse_date_key(min(by_day))
    streak = 0
    cursor = today
    while cursor >= earliest:
        if applies_on(habit, cursor):
            row = by_day.get(date_key(cursor))
            if row is not None and row.completed:
                streak += 1
            elif cursor != today:
                break
        cursor = cursor - timedelta(days=1)
    return streak


def scored_instances(habit: Habit, instances: Iterable[HabitInstance], today: date) -> list[HabitInstance]:
    """History that counts toward the completion rate: past days plus today once done."""
    today_key = date_key(today)
    return [
        row
        for row in _instances_by_day(habit, instances).values()
        if row.date < today_key or (row.date == today_key and row.completed)
    ]


def compute_strength(
    habit: Habit,
    instances: Iterable[HabitInstance],
    today: date,
    *,
    streak: int | None = None,
) -> int:
    rows = list(instances)
    scored = scored_instances(habit, rows, today)
    if not scored:
        return 0
    completed = sum(1 for row in scored if row.completed)
    rate = (completed / len(scored)) * 100.0
    if streak is None:
        streak = compute_streak(habit, rows, today)
    momentum = (min(streak, STREAK_CAP_DAYS) / STREAK_CAP_DAYS) * 100.0
    return clamp_pct(STRENGTH_RATE_WEIGHT * rate + STRENGTH_MOMENTUM_WEIGHT * momentum)


def habit_momentum(habit: Habit, instances: Iterable[HabitInstance], today: date) -> HabitMomentum:
    rows = list(instances)
    streak = compute_streak(habit, rows, today)
    return HabitMomentum(streak=streak, strength=compute_strength(habit, rows, today, streak=streak))


def with_momentum(habit: Habit, instances: Iterable[HabitInstance], today: date) -> Habit:
    momentum = habit_momentum(habit, instances, today)
    return habit.model_copy(update={"streak": momentum.streak, "strength": momentum.strength})


def day_stats(dates: Iterable[str], instances: Iterable[HabitInstance]) -> list[DayStats]:
    by_day: dict[str, list[HabitInstance]] = {}
    for row in instances:
        by_day.setdefault(row.date, []).append(row)

    result: list[DayStats] = []
    for key in dates:
        rows = by_day.get(key, [])
        total = len(rows)
        completed = sum(1 for row in rows if row.completed)
        result.append(
            DayStats(
                date=key,
                day_name=day_name(parse_date_key(key)),
                completion_rate=completion_pct(total, completed),
                total_habits=total,
                completed_habits=completed,
            )
        )
    return result


def interest_progress(habits: Iterable[Habit]) -> list[InterestProgress]:
    """Per-interest level: one level per seven days of combined streak."""
    grouped: dict[str, list[Habit]] = {}
    for habit in habits:
        grouped.setdefault(habit.interest, []).append(habit)

    result: list[InterestProgress] = []
    for interest, rows in grouped.items():
        total_streak = sum(int(row.streak) for row in rows)
        result.append(
            InterestProgress(
                interest=interest,
                active_habits=len(rows),
                total_streak=total_streak,
                level=max(1, total_streak // DAYS_PER_LEVEL + 1),
                progress_to_next_level=round_half_up(((total_streak % DAYS_PER_LEVEL) / DAYS_PER_LEVEL) * 100.0),
            )
        )
    return result
