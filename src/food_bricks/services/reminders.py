"""Observation reminders."""

import logging
from datetime import datetime
from typing import Callable, Optional

from ..errors import EntityNotFound
from ..models import Notification, NotificationType, Trial
from ..utils.dates import to_local_naive
from .storage import TrackerStorage

logger = logging.getLogger(__name__)


class ReminderService:
    """
    Schedules and sweeps caregiver notifications.

    Delivery (email, push) happens elsewhere; this service only records what
    is due and marks it sent. It never touches trials or bricks.
    """

    def __init__(
        self,
        storage: TrackerStorage,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.storage = storage
        self.clock = clock

    def schedule_observation_reminder(self, trial: Trial) -> None:
        """Queue the "observation complete" notice for when the trial's window closes."""
        notification = Notification(
            baby_id=trial.baby_id,
            user_id=trial.user_id,
            trial_id=trial.id,
            type=NotificationType.OBSERVATION_COMPLETE,
            title="Observation Period Complete",
            message=(
                "The observation period for the food trial has ended. "
                "Please confirm if there were any reactions."
            ),
            scheduled_for=trial.observation_ends_at,
        )
        self.storage.add_notification(notification)
        logger.debug(
            "Scheduled reminder for trial %s at %s",
            trial.id, trial.observation_ends_at.isoformat(),
        )

    def process_due(self, now: Optional[datetime] = None) -> list[Notification]:
        """Mark every due, unsent notification as sent and return them."""
        now = to_local_naive(now or self.clock())
        sent = []
        for notification in self.storage.list_notifications():
            if not notification.is_due(now):
                continue
            notification.sent_at = now
            self.storage.save_notification(notification)
            sent.append(notification)
        if sent:
            logger.info("Processed %d due reminder(s)", len(sent))
        return sent

    def list_for_user(self, user_id: str) -> list[Notification]:
        """Newest first."""
        notifications = self.storage.list_notifications(user_id=user_id)
        notifications.sort(key=lambda n: n.created_at, reverse=True)
        return notifications

    def mark_read(self, notification_id: str) -> Notification:
        notification = self.storage.get_notification(notification_id)
        if notification is None:
            raise EntityNotFound("notification", notification_id)
        notification.is_read = True
        return self.storage.save_notification(notification)
