"""Routes for caregiver notifications."""

from fastapi import APIRouter, Depends, Query

from ...models import Notification
from ...services import ReminderService
from ..deps import get_reminders

router = APIRouter()


@router.get("/notifications", response_model=list[Notification])
async def list_notifications(
    user_id: str = Query(..., min_length=1),
    reminders: ReminderService = Depends(get_reminders),
):
    return reminders.list_for_user(user_id)


@router.patch("/notifications/{notification_id}/read", response_model=Notification)
async def mark_notification_read(
    notification_id: str,
    reminders: ReminderService = Depends(get_reminders),
):
    return reminders.mark_read(notification_id)
