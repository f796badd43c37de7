"""Per-user preferences."""

from datetime import datetime
from uuid import uuid4

from pydantic import BaseModel, Field


class UserSettings(BaseModel):
    """Notification and trial defaults for one user, created on first read."""

    id: str = Field(default_factory=lambda: str(uuid4()))
    user_id: str = Field(min_length=1)
    default_observation_period_days: int = Field(default=3, ge=1, le=14)
    email_notifications: bool = True
    push_notifications: bool = False
    in_app_notifications: bool = True
    timezone: str = Field(default="Australia/Sydney", min_length=1)
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)
