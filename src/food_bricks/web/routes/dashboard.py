"""Routes for the per-baby dashboard."""

from fastapi import APIRouter, Depends

from ...services import DashboardAggregator, Surface, classify, status_label
from ..deps import get_aggregator

router = APIRouter()


@router.get("/{baby_id}")
async def get_dashboard(
    baby_id: str,
    aggregator: DashboardAggregator = Depends(get_aggregator),
):
    """Stats, active trials, recent activity and per-food progress with status."""
    dashboard = aggregator.build(baby_id)
    payload = dashboard.model_dump(mode="json")
    for entry, progress in zip(payload["food_progress"], dashboard.food_progress):
        status = classify(progress.brick_types, progress.has_active_trial)
        entry["status"] = status.value
        entry["status_label"] = status_label(status, Surface.DASHBOARD)
        entry["tone"] = status.tone
    return payload
