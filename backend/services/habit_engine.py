from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import date, datetime
from typing import Any, Callable, Iterable

from config import settings
from db.document_store import DocumentStore
from db.schemas import (
    ALL_COLLECTIONS,
    HABITS,
    INSTANCES,
    PROFILE,
    PROFILE_ID,
    PROJECTS,
    TASKS,
    DayStats,
    Habit,
    HabitInstance,
    InterestProgress,
    ProfileSettings,
    Project,
    ProjectStatus,
    Task,
    UserProfile,
)
from services.completion_service import apply_completion
from services.errors import NotFoundError
from services.momentum_service import day_stats, interest_progress, with_momentum
from services.project_rollup_service import apply_rollup
from services.recurrence_service import materialize
from services.suggestion_service import get_suggestions
from utils.datetime_utils import date_key, date_window, parse_date_key, today_for_tz, utcnow

logger = logging.getLogger(__name__)


def _default_today() -> date:
    return today_for_tz(settings.TIMEZONE)


def _normalize_date_keys(dates: Iterable[date | str]) -> list[str]:
    keys = {date_key(parse_date_key(raw) if isinstance(raw, str) else raw) for raw in dates}
    return sorted(keys)


class HabitEngine:
    """Habit, task and project operations over an explicit document store handle.

    Derived values (habit streak/strength, project progress/status) are recomputed
    from stored history; every mutating call is one unit of work that is committed
    on success and rolled back on failure.
    """

    def __init__(
        self,
        store: DocumentStore,
        *,
        today_fn: Callable[[], date] | None = None,
        now_fn: Callable[[], datetime] | None = None,
    ):
        self.store = store
        self._today_fn = today_fn or _default_today
        self._now_fn = now_fn or utcnow

    def today(self) -> date:
        return self._today_fn()

    def week_dates(self) -> list[str]:
        window = date_window(self.today(), settings.WEEK_DAYS_BEFORE, settings.WEEK_DAYS_AFTER)
        return [date_key(day) for day in window]

    @asynccontextmanager
    async def _unit_of_work(self):
        try:
            yield
        except BaseException:
            await self.store.rollback()
            raise
        else:
            await self.store.commit()

    async def _require(self, collection: str, record_id: str):
        record = await self.store.get(collection, record_id)
        if record is None:
            raise NotFoundError(collection, record_id)
        return record

    # ----- habits -----

    async def get_habits(self) -> list[Habit]:
        habits = await self.store.list_where(HABITS)
        instances = await self.store.list_where(INSTANCES)
        by_habit: dict[str, list[HabitInstance]] = {}
        for row in instances:
            by_habit.setdefault(row.habit_id, []).append(row)
        today = self.today()
        return [with_momentum(habit, by_habit.get(habit.id, []), today) for habit in habits]

    async def get_habit(self, habit_id: str) -> Habit:
        habit = await self._require(HABITS, habit_id)
        instances = await self.store.list_where(INSTANCES, lambda row: row.habit_id == habit_id)
        return with_momentum(habit, instances, self.today())

    async def add_habit(self, habit: Habit) -> Habit:
        stored = habit.model_copy(update={"streak": 0, "strength": 0})
        async with self._unit_of_work():
            await self.store.put(HABITS, stored)
        logger.info(f"Saved habit '{stored.id}' ({stored.schedule})")
        return stored

    async def get_suggestions(self, interests: Iterable[str]) -> list[Habit]:
        return get_suggestions(interests)

    # ----- instances -----

    async def _materialize(self, habits: list[Habit], keys: list[str]) -> tuple[list[HabitInstance], int]:
        key_set = set(keys)
        existing = await self.store.list_where(INSTANCES, lambda row: row.date in key_set)
        created = materialize(habits, keys, existing)
        inserted = 0
        for row in created:
            if await self.store.put_if_absent(INSTANCES, row):
                inserted += 1
        if inserted:
            logger.info(f"Materialized {inserted} habit instance(s) across {len(keys)} day(s)")
        return existing + created, inserted

    async def get_instances_for_dates(self, dates: Iterable[date | str]) -> list[HabitInstance]:
        keys = _normalize_date_keys(dates)
        if not keys:
            return []
        async with self._unit_of_work():
            habits = await self.store.list_where(HABITS)
            rows, _inserted = await self._materialize(habits, keys)
        habit_ids = {habit.id for habit in habits}
        rows = [row for row in rows if row.habit_id in habit_ids]
        return sorted(rows, key=lambda row: (row.date, row.habit_id))

    async def set_instance_completion(
        self,
        instance_id: str,
        toggle: bool,
        value: Any = None,
    ) -> HabitInstance:
        async with self._unit_of_work():
            instance = await self._require(INSTANCES, instance_id)
            habit = await self._require(HABITS, instance.habit_id)
            updated = apply_completion(instance, habit, toggle=toggle, value=value, now=self._now_fn())
            await self.store.put(INSTANCES, updated)
        return updated

    async def get_day_stats(self, dates: Iterable[date | str]) -> list[DayStats]:
        keys = _normalize_date_keys(dates)
        instances = await self.get_instances_for_dates(keys)
        return day_stats(keys, instances)

    async def get_interest_progress(self) -> list[InterestProgress]:
        return interest_progress(await self.get_habits())

    # ----- tasks -----

    async def get_tasks(self) -> list[Task]:
        return await self.store.list_where(TASKS)

    async def _rollup(self, project_id: str) -> Project | None:
        project = await self.store.get(PROJECTS, project_id)
        if project is None:
            logger.warning(f"Skipping rollup for missing project '{project_id}'")
            return None
        tasks = await self.store.list_where(TASKS, lambda row: row.project_id == project_id)
        updated = apply_rollup(project, tasks)
        await self.store.put(PROJECTS, updated)
        return updated

    async def add_task(self, task: Task) -> Task:
        async with self._unit_of_work():
            existing = await self.store.get(TASKS, task.id)
            await self.store.put(TASKS, task)
            previous_project = existing.project_id if existing else None
            for project_id in sorted({previous_project, task.project_id} - {None}):
                await self._rollup(project_id)
        return task

    async def update_task(self, task_id: str, changes: dict[str, Any]) -> Task:
        async with self._unit_of_work():
            current = await self._require(TASKS, task_id)
            payload = current.model_dump()
            payload.update(changes)
            payload["id"] = current.id
            updated = Task.model_validate(payload)
            await self.store.put(TASKS, updated)
            for project_id in sorted({current.project_id, updated.project_id} - {None}):
                await self._rollup(project_id)
        return updated

    async def delete_task(self, task_id: str) -> None:
        async with self._unit_of_work():
            current = await self._require(TASKS, task_id)
            await self.store.delete(TASKS, task_id)
            if current.project_id:
                await self._rollup(current.project_id)

    # ----- projects -----

    async def get_projects(self) -> list[Project]:
        return await self.store.list_where(PROJECTS)

    async def add_project(self, project: Project) -> Project:
        async with self._unit_of_work():
            existing = await self.store.get(PROJECTS, project.id)
            if existing is not None and existing.status == ProjectStatus.ARCHIVED:
                project = project.model_copy(update={"status": ProjectStatus.ARCHIVED})
            elif project.status != ProjectStatus.ARCHIVED:
                project = project.model_copy(update={"status": ProjectStatus.ACTIVE})
            tasks = await self.store.list_where(TASKS, lambda row: row.project_id == project.id)
            stored = apply_rollup(project, tasks)
            await self.store.put(PROJECTS, stored)
        return stored

    async def rollup_project(self, project_id: str) -> Project:
        async with self._unit_of_work():
            await self._require(PROJECTS, project_id)
            updated = await self._rollup(project_id)
        return updated

    async def archive_project(self, project_id: str) -> Project:
        async with self._unit_of_work():
            project = await self._require(PROJECTS, project_id)
            archived = project.model_copy(update={"status": ProjectStatus.ARCHIVED})
            await self.store.put(PROJECTS, archived)
        return archived

    async def restore_project(self, project_id: str) -> Project:
        async with self._unit_of_work():
            project = await self._require(PROJECTS, project_id)
            await self.store.put(PROJECTS, project.model_copy(update={"status": ProjectStatus.ACTIVE}))
            restored = await self._rollup(project_id)
        return restored

    # ----- profile & onboarding -----

    async def get_profile(self) -> UserProfile:
        return await self._require(PROFILE, PROFILE_ID)

    async def init_profile(self, email: str, name: str) -> UserProfile:
        existing = await self.store.get(PROFILE, PROFILE_ID)
        if existing is not None and existing.email == email:
            return existing
        profile = UserProfile(email=email, name=name)
        async with self._unit_of_work():
            await self.store.put(PROFILE, profile)
        return profile

    async def update_profile_settings(self, profile_settings: ProfileSettings) -> UserProfile:
        async with self._unit_of_work():
            profile = await self._require(PROFILE, PROFILE_ID)
            updated = profile.model_copy(update={"settings": profile_settings})
            await self.store.put(PROFILE, updated)
        return updated

    async def complete_onboarding(
        self,
        interests: list[str],
        habits: list[Habit],
        permissions: ProfileSettings,
    ) -> dict[str, int]:
        window = date_window(self.today(), settings.ONBOARDING_DAYS_BEFORE, settings.ONBOARDING_DAYS_AFTER)
        keys = [date_key(day) for day in window]
        async with self._unit_of_work():
            profile = await self._require(PROFILE, PROFILE_ID)
            await self.store.put(
                PROFILE,
                profile.model_copy(update={"onboarded": True, "interests": list(interests), "settings": permissions}),
            )
            stored = [row.model_copy(update={"streak": 0, "strength": 0}) for row in habits]
            # The chosen habits replace the current set; instances stay as history.
            await self.store.delete_all(HABITS)
            for habit in stored:
                await self.store.put(HABITS, habit)
            _rows, seeded = await self._materialize(stored, keys)
        logger.info(f"Onboarding completed with {len(stored)} habit(s), {seeded} instance(s) seeded")
        return {"habits": len(stored), "instances_seeded": seeded}

    # ----- reset -----

    async def reset_all(self) -> dict[str, int]:
        removed: dict[str, int] = {}
        async with self._unit_of_work():
            for collection in ALL_COLLECTIONS:
                removed[collection] = await self.store.delete_all(collection)
        logger.info(f"Reset cleared {sum(removed.values())} record(s)")
        return removed
