"""Data models for the food introduction tracker."""

from .food import Baby, Caregiver, CaregiverRole, Food, FoodCategory
from .timeline import Notification, NotificationType, SteroidCream, SteroidCreamStatus
from .trial import (
    BrickLog,
    BrickType,
    Reaction,
    ReactionInput,
    ReactionSeverity,
    ReactionType,
    Trial,
    TrialStatus,
)
from .user import UserSettings

__all__ = [
    "Food",
    "FoodCategory",
    "Baby",
    "Caregiver",
    "CaregiverRole",
    "Trial",
    "TrialStatus",
    "Reaction",
    "ReactionInput",
    "ReactionType",
    "ReactionSeverity",
    "BrickLog",
    "BrickType",
    "SteroidCream",
    "SteroidCreamStatus",
    "Notification",
    "NotificationType",
    "UserSettings",
]
