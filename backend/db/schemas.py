"""
Document schemas.

Each Pydantic model below is the shape of one record in a document collection.
Records are persisted as JSON (``model_dump(mode="json")``) and validated on the way
back out, so the store never hands a raw dict to the services.

- Habit -> "habits"
- HabitInstance -> "instances"
- Task -> "tasks"
- Project -> "projects"
- UserProfile -> "profile"
"""
from __future__ import annotations

import uuid
from datetime import datetime
from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator

from utils.datetime_utils import parse_date_key


HABITS = "habits"
INSTANCES = "instances"
TASKS = "tasks"
PROJECTS = "projects"
PROFILE = "profile"

ALL_COLLECTIONS = (HABITS, INSTANCES, TASKS, PROJECTS, PROFILE)

PROFILE_ID = "me"


def _new_id() -> str:
    return uuid.uuid4().hex


def _validate_date_key(value: str) -> str:
    parse_date_key(value)
    return value


class ScheduleRule(str, Enum):
    DAILY = "Daily"
    WEEKDAYS = "Weekdays"
    WEEKENDS = "Weekends"
    CUSTOM = "Custom"


class TaskPriority(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class ReminderType(str, Enum):
    AT_DEADLINE = "At Deadline"
    ONE_HOUR_BEFORE = "1 Hour Before"
    ONE_DAY_BEFORE = "1 Day Before"
    CUSTOM = "Custom"


class ProjectStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    ARCHIVED = "archived"


# ----- habit triggers -----

class ManualTrigger(BaseModel):
    kind: Literal["MANUAL"] = "MANUAL"


class LocationTrigger(BaseModel):
    kind: Literal["LOCATION"] = "LOCATION"
    location_name: str = Field(..., min_length=1, description="Geofence label, e.g. 'Gold's Gym'")


class AppOpenTrigger(BaseModel):
    kind: Literal["APP_OPEN"] = "APP_OPEN"
    app_name: str = Field(..., min_length=1)
    action_detail: Optional[str] = Field(None, description="Specific action, e.g. 'Check S&P 500'")


class ScreenTimeTrigger(BaseModel):
    kind: Literal["SCREEN_TIME"] = "SCREEN_TIME"
    threshold_minutes: int = Field(..., gt=0)


HabitTrigger = Annotated[
    Union[ManualTrigger, LocationTrigger, AppOpenTrigger, ScreenTimeTrigger],
    Field(discriminator="kind"),
]


# ----- records -----

class HabitGoal(BaseModel):
    target: float = Field(..., gt=0)
    unit: str = ""


class Habit(BaseModel):
    id: str = Field(default_factory=_new_id)
    name: str = Field(..., min_length=1)
    icon: str = "Circle"
    interest: str = "Custom"
    # Unknown tags are kept as plain strings so stored habits written with a newer
    # rule still load; the recurrence service treats them as never scheduled.
    schedule: Annotated[Union[ScheduleRule, str], Field(union_mode="left_to_right")] = ScheduleRule.DAILY
    trigger: HabitTrigger = Field(default_factory=ManualTrigger)
    goal: Optional[HabitGoal] = None
    streak: int = Field(0, ge=0, description="Derived on read, never authoritative")
    strength: int = Field(0, ge=0, le=100, description="Derived on read, never authoritative")


class HabitInstance(BaseModel):
    id: str
    habit_id: str
    date: str = Field(..., description="YYYY-MM-DD")
    completed: bool = False
    completed_at: Optional[datetime] = None
    value: Optional[float] = None

    @field_validator("date")
    @classmethod
    def check_date(cls, value: str) -> str:
        return _validate_date_key(value)


class TaskReminder(BaseModel):
    type: ReminderType = ReminderType.AT_DEADLINE
    custom_date: Optional[datetime] = None


class Task(BaseModel):
    id: str = Field(default_factory=_new_id)
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    due_date: str = Field(..., description="YYYY-MM-DD")
    due_time: Optional[str] = Field(None, pattern=r"^\d{2}:\d{2}$")
    priority: TaskPriority = TaskPriority.MEDIUM
    category: str = "Personal"
    project_id: Optional[str] = None
    completed: bool = False
    reminder: Optional[TaskReminder] = None

    @field_validator("due_date")
    @classmethod
    def check_due_date(cls, value: str) -> str:
        return _validate_date_key(value)


class Project(BaseModel):
    id: str = Field(default_factory=_new_id)
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    start_date: str
    end_date: str
    progress: int = Field(0, ge=0, le=100, description="Derived from linked tasks")
    status: ProjectStatus = ProjectStatus.ACTIVE

    @field_validator("start_date", "end_date")
    @classmethod
    def check_dates(cls, value: str) -> str:
        return _validate_date_key(value)


class ProfileSettings(BaseModel):
    location_enabled: bool = False
    notifications_enabled: bool = False
    screen_time_enabled: bool = False


class UserProfile(BaseModel):
    id: str = PROFILE_ID
    email: str
    name: str
    onboarded: bool = False
    interests: list[str] = Field(default_factory=list)
    settings: ProfileSettings = Field(default_factory=ProfileSettings)


# ----- derived views -----

class DayStats(BaseModel):
    date: str
    day_name: str
    completion_rate: int = Field(..., ge=0, le=100)
    total_habits: int
    completed_habits: int


class InterestProgress(BaseModel):
    interest: str
    active_habits: int
    total_streak: int
    level: int
    progress_to_next_level: int = Field(..., ge=0, le=100)


RECORD_TYPES: dict[str, type[BaseModel]] = {
    HABITS: Habit,
    INSTANCES: HabitInstance,
    TASKS: Task,
    PROJECTS: Project,
    PROFILE: UserProfile,
}
