from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field

from api.deps import get_engine
from db.schemas import Habit, HabitGoal, HabitTrigger, ManualTrigger, ScheduleRule
from services.errors import NotFoundError
from services.habit_engine import HabitEngine


router = APIRouter(prefix="/habits", tags=["habits"])


class HabitCreate(BaseModel):
    id: Optional[str] = None
    name: str = Field(..., min_length=1)
    icon: str = "Circle"
    interest: str = "Custom"
    schedule: ScheduleRule = ScheduleRule.DAILY
    trigger: HabitTrigger = Field(default_factory=ManualTrigger)
    goal: Optional[HabitGoal] = None

    def to_habit(self) -> Habit:
        data = self.model_dump()
        if not data.get("id"):
            data.pop("id")
        return Habit.model_validate(data)


@router.get("")
async def list_habits(engine: HabitEngine = Depends(get_engine)):
    return await engine.get_habits()


@router.post("", status_code=201)
async def create_habit(payload: HabitCreate, engine: HabitEngine = Depends(get_engine)):
    return await engine.add_habit(payload.to_habit())


@router.get("/suggestions")
async def habit_suggestions(
    interests: list[str] = Query(default=[]),
    engine: HabitEngine = Depends(get_engine),
):
    return await engine.get_suggestions(interests)


@router.get("/interests")
async def interest_levels(engine: HabitEngine = Depends(get_engine)):
    return await engine.get_interest_progress()


@router.get("/{habit_id}")
async def get_habit(habit_id: str, engine: HabitEngine = Depends(get_engine)):
    try:
        return await engine.get_habit(habit_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
