"""Request-scoped dependencies."""

from typing import Iterator

from fastapi import Depends

from ..services import (
    BabyService,
    DashboardAggregator,
    FoodCatalog,
    PreferencesService,
    ReminderService,
    TrackerStorage,
    TrialController,
)


def get_storage() -> Iterator[TrackerStorage]:
    """Get storage instance, closed when the request finishes."""
    with TrackerStorage() as storage:
        yield storage


def get_trials(storage: TrackerStorage = Depends(get_storage)) -> TrialController:
    return TrialController(storage)


def get_catalog(storage: TrackerStorage = Depends(get_storage)) -> FoodCatalog:
    return FoodCatalog(storage)


def get_babies(storage: TrackerStorage = Depends(get_storage)) -> BabyService:
    return BabyService(storage)


def get_reminders(storage: TrackerStorage = Depends(get_storage)) -> ReminderService:
    return ReminderService(storage)


def get_aggregator(storage: TrackerStorage = Depends(get_storage)) -> DashboardAggregator:
    return DashboardAggregator(storage)


def get_preferences(storage: TrackerStorage = Depends(get_storage)) -> PreferencesService:
    return PreferencesService(storage)
