from __future__ import annotations

import sys
from datetime import date
from pathlib import Path

import pytest


ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from db.schemas import Habit, HabitInstance, ScheduleRule  # noqa: E402
from services.errors import ScheduleRuleUnrecognizedError  # noqa: E402
from services.recurrence_service import (  # noqa: E402
    applies_on,
    instance_id,
    materialize,
    parse_schedule_rule,
)
from utils.datetime_utils import date_window  # noqa: E402


SATURDAY = date(2026, 2, 21)
MONDAY = date(2026, 2, 23)
WEEK = date_window(MONDAY, 3, 3)  # Fri .. Thu


def _habit(habit_id: str, schedule) -> Habit:
    return Habit(id=habit_id, name=habit_id.title(), schedule=schedule)


def test_applies_on_follows_schedule_rule():
    assert applies_on(_habit("daily", ScheduleRule.DAILY), SATURDAY) is True
    assert applies_on(_habit("weekdays", ScheduleRule.WEEKDAYS), SATURDAY) is False
    assert applies_on(_habit("weekdays", ScheduleRule.WEEKDAYS), MONDAY) is True
    assert applies_on(_habit("weekends", ScheduleRule.WEEKENDS), SATURDAY) is True
    assert applies_on(_habit("weekends", ScheduleRule.WEEKENDS), MONDAY) is False
    assert applies_on(_habit("custom", ScheduleRule.CUSTOM), SATURDAY) is True
    assert applies_on(_habit("custom", ScheduleRule.CUSTOM), MONDAY) is True


def test_schedule_tag_strings_load_as_rules():
    habit = _habit("weekdays", "Weekdays")
    assert habit.schedule == ScheduleRule.WEEKDAYS
    assert parse_schedule_rule("Weekends") == ScheduleRule.WEEKENDS


def test_unrecognized_schedule_fails_closed():
    habit = _habit("odd", "Fortnightly")

    assert habit.schedule == "Fortnightly"
    assert all(applies_on(habit, day) is False for day in WEEK)
    assert materialize([habit], WEEK, []) == []
    with pytest.raises(ScheduleRuleUnrecognizedError):
        parse_schedule_rule(habit.schedule)


def test_materialize_creates_deterministic_pending_instances():
    habit = _habit("run", ScheduleRule.DAILY)
    created = materialize([habit], [MONDAY], [])

    assert len(created) == 1
    row = created[0]
    assert row.id == "2026-02-23_run" == instance_id("2026-02-23", "run")
    assert row.habit_id == "run"
    assert row.date == "2026-02-23"
    assert row.completed is False
    assert row.value is None
    assert row.completed_at is None


def test_materialize_only_scheduled_days():
    weekdays = _habit("work", ScheduleRule.WEEKDAYS)
    weekends = _habit("hike", ScheduleRule.WEEKENDS)
    created = materialize([weekdays, weekends], WEEK, [])

    work_dates = sorted(row.date for row in created if row.habit_id == "work")
    hike_dates = sorted(row.date for row in created if row.habit_id == "hike")
    assert work_dates == ["2026-02-20", "2026-02-23", "2026-02-24", "2026-02-25", "2026-02-26"]
    assert hike_dates == ["2026-02-21", "2026-02-22"]


def test_materialize_is_idempotent():
    habits = [_habit("run", ScheduleRule.DAILY), _habit("work", ScheduleRule.WEEKDAYS)]
    first = materialize(habits, WEEK, [])
    second = materialize(habits, WEEK, first)

    assert second == []
    assert len({(row.habit_id, row.date) for row in first}) == len(first)


def test_materialize_never_touches_existing_instances():
    habit = _habit("run", ScheduleRule.DAILY)
    existing = HabitInstance(id="2026-02-23_run", habit_id="run", date="2026-02-23", completed=True, value=3.0)
    created = materialize([habit], [MONDAY, date(2026, 2, 24)], [existing])

    assert [row.date for row in created] == ["2026-02-24"]
    assert existing.completed is True
    assert existing.value == 3.0


def test_materialize_ignores_repeated_dates_and_habits():
    habit = _habit("run", ScheduleRule.DAILY)
    created = materialize([habit, habit], [MONDAY, "2026-02-23", MONDAY], [])
    assert [row.id for row in created] == ["2026-02-23_run"]
