"""Timeline annotations: steroid cream episodes and notifications."""

from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, Field, field_validator

from ..utils.dates import to_local_naive


class SteroidCreamStatus(str, Enum):
    ACTIVE = "active"
    ENDED = "ended"


class SteroidCream(BaseModel):
    """A course of steroid cream, shown alongside trials on the timeline."""

    id: str = Field(default_factory=lambda: str(uuid4()))
    baby_id: str
    user_id: Optional[str] = None
    started_at: datetime = Field(default_factory=datetime.now)
    ended_at: Optional[datetime] = None
    duration_days: int = Field(default=7, ge=1)
    notes: Optional[str] = None
    status: SteroidCreamStatus = SteroidCreamStatus.ACTIVE
    created_at: datetime = Field(default_factory=datetime.now)

    @field_validator("started_at", "ended_at")
    @classmethod
    def local_naive(cls, v: Optional[datetime]) -> Optional[datetime]:
        return to_local_naive(v)


class NotificationType(str, Enum):
    OBSERVATION_COMPLETE = "observation_complete"


class Notification(BaseModel):
    """A message scheduled for delivery to a caregiver."""

    id: str = Field(default_factory=lambda: str(uuid4()))
    baby_id: str
    user_id: Optional[str] = None
    trial_id: Optional[str] = None
    type: NotificationType
    title: str
    message: str
    is_read: bool = False
    scheduled_for: Optional[datetime] = None
    sent_at: Optional[datetime] = None
    created_at: datetime = Field(default_factory=datetime.now)

    @field_validator("scheduled_for", "sent_at")
    @classmethod
    def local_naive(cls, v: Optional[datetime]) -> Optional[datetime]:
        return to_local_naive(v)

    def is_due(self, now: datetime) -> bool:
        """Whether the sweep should send this notification at ``now``."""
        if self.sent_at is not None:
            return False
        return self.scheduled_for is None or self.scheduled_for <= to_local_naive(now)
