from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from api.deps import get_engine
from api.habits import HabitCreate
from db.schemas import ProfileSettings
from services.errors import NotFoundError
from services.habit_engine import HabitEngine


router = APIRouter(prefix="/profile", tags=["profile"])


class ProfileCreate(BaseModel):
    email: str = Field(..., min_length=3)
    name: str = Field(..., min_length=1)


class OnboardingRequest(BaseModel):
    interests: list[str] = Field(default_factory=list)
    habits: list[HabitCreate] = Field(default_factory=list)
    permissions: ProfileSettings = Field(default_factory=ProfileSettings)


@router.get("")
async def get_profile(engine: HabitEngine = Depends(get_engine)):
    try:
        return await engine.get_profile()
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))


@router.post("")
async def init_profile(payload: ProfileCreate, engine: HabitEngine = Depends(get_engine)):
    return await engine.init_profile(payload.email.strip(), payload.name.strip())


@router.put("/settings")
async def update_settings(payload: ProfileSettings, engine: HabitEngine = Depends(get_engine)):
    try:
        return await engine.update_profile_settings(payload)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))


@router.post("/onboarding")
async def complete_onboarding(payload: OnboardingRequest, engine: HabitEngine = Depends(get_engine)):
    try:
        result = await engine.complete_onboarding(
            payload.interests,
            [row.to_habit() for row in payload.habits],
            payload.permissions,
        )
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    return {"status": "ok", **result}


@router.delete("/data")
async def reset_all_data(engine: HabitEngine = Depends(get_engine)):
    removed = await engine.reset_all()
    return {"status": "ok", "removed": removed}
