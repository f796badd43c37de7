"""Food catalog, baby profile and caregiver models."""

from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, Field, field_validator

from ..utils.dates import to_local_naive


class FoodCategory(str, Enum):
    """Food groups used by the seed catalog."""
    PROTEIN = "protein"
    GRAIN = "grain"
    LEGUME = "legume"
    VEGETABLE = "vegetable"
    FRUIT = "fruit"
    DAIRY = "dairy"
    OTHER = "other"


class Food(BaseModel):
    """A catalog entry for something a baby can be introduced to."""

    id: str = Field(default_factory=lambda: str(uuid4()))
    name: str = Field(min_length=1)
    emoji: Optional[str] = None
    category: Optional[FoodCategory] = None
    is_common: bool = False
    created_at: datetime = Field(default_factory=datetime.now)

    @property
    def display_name(self) -> str:
        """Name prefixed with its emoji, or the bottle fallback."""
        return f"{self.emoji or '🍼'} {self.name}"


class Baby(BaseModel):
    """A baby profile."""

    id: str = Field(default_factory=lambda: str(uuid4()))
    name: str = Field(min_length=1)
    date_of_birth: datetime
    gender: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)

    @field_validator("date_of_birth")
    @classmethod
    def local_naive(cls, v: datetime) -> datetime:
        return to_local_naive(v)


class CaregiverRole(str, Enum):
    PARENT = "parent"
    CAREGIVER = "caregiver"
    DOCTOR = "doctor"


class Caregiver(BaseModel):
    """Access link between a user and a baby.

    The user who created the baby profile carries ``is_creator=True``; the
    flag is stored, never inferred from insertion order.
    """

    id: str = Field(default_factory=lambda: str(uuid4()))
    user_id: str = Field(min_length=1)
    baby_id: str
    role: CaregiverRole = CaregiverRole.PARENT
    is_creator: bool = False
    created_at: datetime = Field(default_factory=datetime.now)
