from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ValidationError

from api.deps import get_engine
from db.schemas import Task, TaskPriority, TaskReminder
from services.errors import NotFoundError
from services.habit_engine import HabitEngine


router = APIRouter(prefix="/tasks", tags=["tasks"])


class TaskUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    due_date: Optional[str] = None
    due_time: Optional[str] = None
    priority: Optional[TaskPriority] = None
    category: Optional[str] = None
    project_id: Optional[str] = None
    completed: Optional[bool] = None
    reminder: Optional[TaskReminder] = None


@router.get("")
async def list_tasks(engine: HabitEngine = Depends(get_engine)):
    return await engine.get_tasks()


@router.post("", status_code=201)
async def create_task(payload: Task, engine: HabitEngine = Depends(get_engine)):
    return await engine.add_task(payload)


@router.patch("/{task_id}")
async def update_task(
    task_id: str,
    payload: TaskUpdate,
    engine: HabitEngine = Depends(get_engine),
):
    try:
        return await engine.update_task(task_id, payload.model_dump(exclude_unset=True))
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=exc.errors(include_url=False, include_context=False))


@router.delete("/{task_id}")
async def delete_task(task_id: str, engine: HabitEngine = Depends(get_engine)):
    try:
        await engine.delete_task(task_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    return {"status": "ok", "task_id": task_id}
