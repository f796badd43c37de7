"""Routes for baby profiles, caregivers and steroid cream."""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from ...models import Baby, Caregiver, CaregiverRole, SteroidCream
from ...services import BabyService
from ..deps import get_babies

router = APIRouter()
steroid_router = APIRouter()


class BabyCreate(BaseModel):
    user_id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    date_of_birth: datetime
    gender: Optional[str] = None


class BabyUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    date_of_birth: Optional[datetime] = None
    gender: Optional[str] = None


class CaregiverCreate(BaseModel):
    user_id: str = Field(min_length=1)
    role: CaregiverRole = CaregiverRole.CAREGIVER


class SteroidCreamCreate(BaseModel):
    duration_days: int = Field(default=7, ge=1)
    notes: Optional[str] = None
    user_id: Optional[str] = None


@router.get("/", response_model=list[Baby])
async def list_babies(
    user_id: str = Query(..., min_length=1),
    babies: BabyService = Depends(get_babies),
):
    """Babies the user created or was added to as a caregiver."""
    return babies.list_babies_for_user(user_id)


@router.post("/", response_model=Baby)
async def create_baby(body: BabyCreate, babies: BabyService = Depends(get_babies)):
    return babies.create_baby(body.user_id, body.name, body.date_of_birth, body.gender)


@router.get("/{baby_id}", response_model=Baby)
async def get_baby(baby_id: str, babies: BabyService = Depends(get_babies)):
    return babies.get_baby(baby_id)


@router.patch("/{baby_id}", response_model=Baby)
async def update_baby(
    baby_id: str,
    body: BabyUpdate,
    babies: BabyService = Depends(get_babies),
):
    return babies.update_baby(baby_id, body.model_dump(exclude_unset=True))


@router.get("/{baby_id}/caregivers", response_model=list[Caregiver])
async def list_caregivers(baby_id: str, babies: BabyService = Depends(get_babies)):
    babies.get_baby(baby_id)
    return babies.list_caregivers(baby_id)


@router.post("/{baby_id}/caregivers", response_model=Caregiver)
async def add_caregiver(
    baby_id: str,
    body: CaregiverCreate,
    babies: BabyService = Depends(get_babies),
):
    return babies.add_caregiver(baby_id, body.user_id, body.role)


@router.post("/{baby_id}/steroid-cream", response_model=SteroidCream)
async def start_steroid_cream(
    baby_id: str,
    body: SteroidCreamCreate,
    babies: BabyService = Depends(get_babies),
):
    return babies.start_steroid_cream(
        baby_id,
        duration_days=body.duration_days,
        notes=body.notes,
        user_id=body.user_id,
    )


@router.get("/{baby_id}/steroid-cream/active", response_model=Optional[SteroidCream])
async def active_steroid_cream(baby_id: str, babies: BabyService = Depends(get_babies)):
    return babies.get_active_steroid_cream(baby_id)


@steroid_router.patch("/steroid-cream/{cream_id}/end", response_model=SteroidCream)
async def end_steroid_cream(cream_id: str, babies: BabyService = Depends(get_babies)):
    return babies.end_steroid_cream(cream_id)
