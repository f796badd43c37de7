"""Routes for per-user settings."""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from ...models import UserSettings
from ...services import PreferencesService
from ..deps import get_preferences

router = APIRouter()


class SettingsUpdate(BaseModel):
    user_id: str = Field(min_length=1)
    default_observation_period_days: Optional[int] = Field(default=None, ge=1, le=14)
    email_notifications: Optional[bool] = None
    push_notifications: Optional[bool] = None
    in_app_notifications: Optional[bool] = None
    timezone: Optional[str] = Field(default=None, min_length=1)


@router.get("/settings", response_model=UserSettings)
async def get_user_settings(
    user_id: str = Query(..., min_length=1),
    preferences: PreferencesService = Depends(get_preferences),
):
    """Current settings, created with defaults on first read."""
    return preferences.get_or_create(user_id)


@router.patch("/settings", response_model=UserSettings)
async def update_user_settings(
    body: SettingsUpdate,
    preferences: PreferencesService = Depends(get_preferences),
):
    changes = body.model_dump(exclude_unset=True, exclude={"user_id"})
    return preferences.update(body.user_id, changes)
