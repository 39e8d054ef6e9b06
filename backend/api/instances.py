from __future__ import annotations

from typing import Optional, Union

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from api.deps import get_engine
from services.errors import InvalidGoalValueError, NotFoundError
from services.habit_engine import HabitEngine


router = APIRouter(prefix="/instances", tags=["instances"])


class CompletionUpdate(BaseModel):
    completed: bool = False
    value: Optional[Union[float, str]] = None  # required for goal habits


def _requested_dates(engine: HabitEngine, dates: Optional[str]) -> list[str]:
    if not dates:
        return engine.week_dates()
    return [part.strip() for part in dates.split(",") if part.strip()]


@router.get("")
async def list_instances(
    dates: Optional[str] = None,  # comma separated YYYY-MM-DD; defaults to the week around today
    engine: HabitEngine = Depends(get_engine),
):
    try:
        return await engine.get_instances_for_dates(_requested_dates(engine, dates))
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))


@router.get("/stats")
async def instance_day_stats(
    dates: Optional[str] = None,
    engine: HabitEngine = Depends(get_engine),
):
    try:
        return await engine.get_day_stats(_requested_dates(engine, dates))
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))


@router.post("/{instance_id}/completion")
async def set_completion(
    instance_id: str,
    payload: CompletionUpdate,
    engine: HabitEngine = Depends(get_engine),
):
    try:
        row = await engine.set_instance_completion(instance_id, payload.completed, payload.value)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    except InvalidGoalValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return {
        "status": "ok",
        "instance_id": row.id,
        "completed": row.completed,
        "completed_at": row.completed_at.isoformat() if row.completed_at else None,
        "value": row.value,
    }
