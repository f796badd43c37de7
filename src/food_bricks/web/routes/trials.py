"""Routes for food trials, reactions and brick history."""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from ...models import BrickLog, Reaction, ReactionInput, Trial
from ...services import Surface, TrialController, classify, status_label
from ..deps import get_trials

router = APIRouter()


class TrialCreate(BaseModel):
    baby_id: str
    food_id: str
    trial_date: datetime = Field(default_factory=datetime.now)
    observation_period_days: Optional[int] = None
    notes: Optional[str] = None
    user_id: Optional[str] = None


class ReactionCreate(ReactionInput):
    user_id: Optional[str] = None


@router.post("/trials", response_model=Trial)
async def start_trial(body: TrialCreate, trials: TrialController = Depends(get_trials)):
    """Start observing a food for a baby."""
    return trials.start_trial(
        baby_id=body.baby_id,
        food_id=body.food_id,
        trial_date=body.trial_date,
        observation_period_days=body.observation_period_days,
        notes=body.notes,
        user_id=body.user_id,
    )


@router.get("/babies/{baby_id}/trials", response_model=list[Trial])
async def list_trials(baby_id: str, trials: TrialController = Depends(get_trials)):
    return trials.list_trials(baby_id)


@router.patch("/trials/{trial_id}/complete")
async def complete_trial(trial_id: str, trials: TrialController = Depends(get_trials)):
    """Mark a trial as passed with no reaction."""
    brick = trials.complete_trial(trial_id)
    return {
        "message": "Trial completed successfully",
        "brick": brick.model_dump(mode="json"),
    }


@router.post("/trials/{trial_id}/reactions", response_model=Reaction)
async def log_reaction(
    trial_id: str,
    body: ReactionCreate,
    trials: TrialController = Depends(get_trials),
):
    data = ReactionInput.model_validate(body.model_dump(exclude={"user_id"}))
    return trials.log_reaction(trial_id, data, user_id=body.user_id)


@router.delete("/trials/{trial_id}")
async def delete_trial(trial_id: str, trials: TrialController = Depends(get_trials)):
    trials.delete_trial(trial_id)
    return {"message": "Trial deleted successfully"}


@router.get("/babies/{baby_id}/foods/{food_id}/bricks")
async def food_bricks(
    baby_id: str,
    food_id: str,
    trials: TrialController = Depends(get_trials),
):
    """Brick history for one food, with its food-detail status."""
    bricks: list[BrickLog] = trials.get_bricks(baby_id, food_id)
    status = classify(bricks, trials.has_active_trial(baby_id, food_id))
    return {
        "bricks": [b.model_dump(mode="json") for b in bricks],
        "status": status.value,
        "label": status_label(status, Surface.FOOD_DETAIL),
        "tone": status.tone,
    }


@router.delete("/babies/{baby_id}/foods/{food_id}/latest-trial")
async def delete_latest_trial(
    baby_id: str,
    food_id: str,
    trials: TrialController = Depends(get_trials),
):
    """Undo the last entry for a food."""
    trial = trials.delete_latest_trial_for_food(baby_id, food_id)
    return {"message": "Latest trial deleted successfully", "trial_id": trial.id}


@router.delete("/babies/{baby_id}/foods/{food_id}")
async def delete_food_progress(
    baby_id: str,
    food_id: str,
    trials: TrialController = Depends(get_trials),
):
    """Reset all progress for a food."""
    deleted = trials.delete_all_progress_for_food(baby_id, food_id)
    return {"message": "Food progress deleted successfully", "deleted": deleted}
