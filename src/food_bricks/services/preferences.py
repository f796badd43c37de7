"""Per-user notification and trial defaults."""

import logging
from datetime import datetime
from typing import Any, Callable, Optional

from pydantic import ValidationError

from ..errors import InvalidInput
from ..models import UserSettings
from ..utils.config import Settings
from .storage import TrackerStorage

logger = logging.getLogger(__name__)

# Fields a user may change; id and timestamps are managed here
EDITABLE_FIELDS = frozenset({
    "default_observation_period_days",
    "email_notifications",
    "push_notifications",
    "in_app_notifications",
    "timezone",
})


class PreferencesService:
    """Reads and updates ``UserSettings``, creating defaults on first access."""

    def __init__(
        self,
        storage: TrackerStorage,
        settings: Optional[Settings] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.storage = storage
        self.settings = settings or storage.settings
        self.clock = clock

    def get_or_create(self, user_id: str) -> UserSettings:
        prefs = self.storage.get_user_settings(user_id)
        if prefs is not None:
            return prefs
        now = self.clock()
        try:
            prefs = UserSettings(
                user_id=user_id,
                default_observation_period_days=self.settings.default_observation_period_days,
                created_at=now,
                updated_at=now,
            )
        except ValidationError as exc:
            raise InvalidInput("Invalid user settings", details=str(exc)) from exc
        logger.debug("Created default settings for user %s", user_id)
        return self.storage.save_user_settings(prefs)

    def update(self, user_id: str, changes: dict[str, Any]) -> UserSettings:
        """Apply ``changes`` on top of the current (or default) settings."""
        unknown = set(changes) - EDITABLE_FIELDS
        if unknown:
            raise InvalidInput("Unknown settings", details=", ".join(sorted(unknown)))

        with self.storage.transaction():
            current = self.get_or_create(user_id)
            data = {**current.model_dump(), **changes, "updated_at": self.clock()}
            try:
                prefs = UserSettings.model_validate(data)
            except ValidationError as exc:
                raise InvalidInput("Invalid user settings", details=str(exc)) from exc
            self.storage.save_user_settings(prefs)
        logger.info("Updated settings for user %s: %s", user_id, ", ".join(sorted(changes)))
        return prefs
