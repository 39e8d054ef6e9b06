from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from api.deps import get_engine
from db.schemas import Project
from services.errors import NotFoundError
from services.habit_engine import HabitEngine


router = APIRouter(prefix="/projects", tags=["projects"])


class ProjectCreate(BaseModel):
    id: Optional[str] = None
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    start_date: str
    end_date: str


@router.get("")
async def list_projects(engine: HabitEngine = Depends(get_engine)):
    return await engine.get_projects()


@router.post("", status_code=201)
async def create_project(payload: ProjectCreate, engine: HabitEngine = Depends(get_engine)):
    data = payload.model_dump()
    if not data.get("id"):
        data.pop("id")
    try:
        project = Project.model_validate(data)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return await engine.add_project(project)


@router.post("/{project_id}/archive")
async def archive_project(project_id: str, engine: HabitEngine = Depends(get_engine)):
    try:
        return await engine.archive_project(project_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))


@router.post("/{project_id}/restore")
async def restore_project(project_id: str, engine: HabitEngine = Depends(get_engine)):
    try:
        return await engine.restore_project(project_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
