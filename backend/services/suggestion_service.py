from __future__ import annotations

from typing import Iterable

from db.schemas import (
    AppOpenTrigger,
    Habit,
    LocationTrigger,
    ManualTrigger,
    ScheduleRule,
    ScreenTimeTrigger,
)


MAX_SUGGESTIONS = 5

SUGGESTED_HABITS: tuple[Habit, ...] = (
    Habit(
        id="h1",
        name="Morning Run (Gym)",
        icon="Activity",
        interest="Health",
        schedule=ScheduleRule.DAILY,
        trigger=LocationTrigger(location_name="Gold's Gym"),
    ),
    Habit(
        id="h2",
        name="Market Analysis",
        icon="TrendingUp",
        interest="Finance",
        schedule=ScheduleRule.WEEKDAYS,
        trigger=AppOpenTrigger(app_name="Market Terminal", action_detail="Check S&P 500"),
    ),
    Habit(
        id="h3",
        name="Social Media < 30m",
        icon="Smartphone",
        interest="Detox",
        schedule=ScheduleRule.DAILY,
        trigger=ScreenTimeTrigger(threshold_minutes=30),
    ),
    Habit(
        id="h4",
        name="Read 1 Chapter",
        icon="BookOpen",
        interest="Learning",
        schedule=ScheduleRule.DAILY,
        trigger=ManualTrigger(),
    ),
    Habit(
        id="h5",
        name="Deep Work Session",
        icon="Zap",
        interest="Productivity",
        schedule=ScheduleRule.WEEKDAYS,
        trigger=AppOpenTrigger(app_name="Timer Started"),
    ),
)


def get_suggestions(interests: Iterable[str]) -> list[Habit]:
    """Catalog habits matching the interests first, padded from the rest of the catalog."""
    wanted = {str(item).strip().lower() for item in interests if str(item).strip()}
    matches = [row for row in SUGGESTED_HABITS if row.interest.lower() in wanted]
    if len(matches) < MAX_SUGGESTIONS:
        picked = {row.id for row in matches}
        matches.extend(row for row in SUGGESTED_HABITS if row.id not in picked)
    return [row.model_copy(deep=True) for row in matches[:MAX_SUGGESTIONS]]
