from __future__ import annotations

import logging
from datetime import date
from typing import Iterable

from db.schemas import Habit, HabitInstance, ScheduleRule
from services.errors import ScheduleRuleUnrecognizedError
from utils.datetime_utils import date_key, is_weekend, parse_date_key

logger = logging.getLogger(__name__)


def parse_schedule_rule(raw: object) -> ScheduleRule:
    if isinstance(raw, ScheduleRule):
        return raw
    try:
        return ScheduleRule(str(raw or "").strip())
    except ValueError:
        raise ScheduleRuleUnrecognizedError(raw)


def applies_on(habit: Habit, day: date) -> bool:
    """Whether the habit has an occurrence on day.

    Custom behaves like Daily until habits carry an explicit weekday set. An
    unrecognized rule fails closed: the habit is never scheduled.
    """
    try:
        rule = parse_schedule_rule(habit.schedule)
    except ScheduleRuleUnrecognizedError as exc:
        logger.warning(f"Habit '{habit.id}' treated as unscheduled: {exc}")
        return False
    if rule == ScheduleRule.WEEKDAYS:
        return not is_weekend(day)
    if rule == ScheduleRule.WEEKENDS:
        return is_weekend(day)
    return True


def instance_id(day_key: str, habit_id: str) -> str:
    return f"{day_key}_{habit_id}"


def _normalize_days(dates: Iterable[date | str]) -> list[date]:
    seen: set[date] = set()
    days: list[date] = []
    for raw in dates:
        day = parse_date_key(raw) if isinstance(raw, str) else raw
        if day in seen:
            continue
        seen.add(day)
        days.append(day)
    return sorted(days)


def materialize(
    habits: Iterable[Habit],
    dates: Iterable[date | str],
    existing_instances: Iterable[HabitInstance],
) -> list[HabitInstance]:
    """Instances missing for every scheduled (habit, date) pair.

    Only new records are returned; existing ones are never touched, so feeding the
    output back in as ``existing_instances`` yields nothing further.
    """
    days = _normalize_days(dates)
    existing_keys = {(row.habit_id, row.date) for row in existing_instances}
    created: list[HabitInstance] = []
    seen_habits: set[str] = set()
    for habit in habits:
        if habit.id in seen_habits:
            continue
        seen_habits.add(habit.id)
        for day in days:
            if not applies_on(habit, day):
                continue
            key = date_key(day)
            dedupe_key = (habit.id, key)
            if dedupe_key in existing_keys:
                continue
            created.append(
                HabitInstance(
                    id=instance_id(key, habit.id),
                    habit_id=habit.id,
                    date=key,
                    completed=False,
                )
            )
            existing_keys.add(dedupe_key)
    return created
