"""Trial, reaction and brick models."""

from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, Field, field_validator

from ..utils.dates import to_local_naive


class TrialStatus(str, Enum):
    """Lifecycle states of a food trial."""
    OBSERVING = "observing"
    COMPLETED = "completed"
    REACTION = "reaction"


# observing -> completed | reaction; terminal states never move again
ALLOWED_TRANSITIONS: dict[TrialStatus, frozenset[TrialStatus]] = {
    TrialStatus.OBSERVING: frozenset({TrialStatus.COMPLETED, TrialStatus.REACTION}),
    TrialStatus.COMPLETED: frozenset(),
    TrialStatus.REACTION: frozenset(),
}


class Trial(BaseModel):
    """One timed attempt to introduce a food to a baby."""

    id: str = Field(default_factory=lambda: str(uuid4()))
    baby_id: str
    food_id: str
    user_id: Optional[str] = None

    trial_date: datetime
    observation_period_days: int = Field(default=3, ge=1, le=14)
    observation_ends_at: datetime

    status: TrialStatus = TrialStatus.OBSERVING
    notes: Optional[str] = None

    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)

    @field_validator("trial_date", "observation_ends_at", "created_at", "updated_at")
    @classmethod
    def local_naive(cls, v: datetime) -> datetime:
        return to_local_naive(v)

    def can_transition_to(self, target: TrialStatus) -> bool:
        return target in ALLOWED_TRANSITIONS[self.status]

    @property
    def is_observing(self) -> bool:
        return self.status == TrialStatus.OBSERVING


class ReactionType(str, Enum):
    """Symptom tags a caregiver can attach to a reaction."""
    ITCHINESS = "itchiness"
    HIVES = "hives"
    SWELLING = "swelling"
    RASH = "rash"
    VOMITING = "vomiting"
    DIARRHEA = "diarrhea"
    OTHER = "other"


class ReactionSeverity(str, Enum):
    MILD = "mild"
    MODERATE = "moderate"
    SEVERE = "severe"


class ReactionInput(BaseModel):
    """Caregiver-submitted reaction details, validated before any write."""

    types: list[ReactionType] = Field(min_length=1)
    severity: ReactionSeverity
    started_at: datetime = Field(default_factory=datetime.now)
    resolved_at: Optional[datetime] = None
    notes: Optional[str] = None
    photo_url: Optional[str] = None

    @field_validator("started_at", "resolved_at")
    @classmethod
    def local_naive(cls, v: Optional[datetime]) -> Optional[datetime]:
        return to_local_naive(v)


class Reaction(ReactionInput):
    """A reaction observed during a trial."""

    id: str = Field(default_factory=lambda: str(uuid4()))
    trial_id: str
    user_id: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.now)

    @property
    def display_types(self) -> str:
        return ", ".join(t.value.title() for t in self.types)


class BrickType(str, Enum):
    """Outcome markers appended to a food's history."""
    SAFE = "safe"
    WARNING = "warning"
    REACTION = "reaction"


class BrickLog(BaseModel):
    """Immutable record of one trial's terminal outcome."""

    id: str = Field(default_factory=lambda: str(uuid4()))
    baby_id: str
    food_id: str
    trial_id: str
    type: BrickType
    date: datetime = Field(default_factory=datetime.now)
    created_at: datetime = Field(default_factory=datetime.now)

    @field_validator("date")
    @classmethod
    def local_naive(cls, v: datetime) -> datetime:
        return to_local_naive(v)
