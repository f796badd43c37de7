"""Shared fixtures."""

from datetime import datetime, timedelta

import pytest

from food_bricks.models import Baby, Food, FoodCategory
from food_bricks.services import (
    BabyService,
    DashboardAggregator,
    FoodCatalog,
    ReminderService,
    TrackerStorage,
    TrialController,
)
from food_bricks.utils.config import Settings


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


@pytest.fixture
def settings(tmp_path):
    return Settings(data_dir=tmp_path)


@pytest.fixture
def storage(settings):
    return TrackerStorage.in_memory(settings)


@pytest.fixture
def clock():
    return FakeClock(datetime(2026, 5, 1, 9, 0))


@pytest.fixture
def reminders(storage, clock):
    return ReminderService(storage, clock=clock)


@pytest.fixture
def controller(storage, reminders, clock):
    return TrialController(storage, reminders=reminders, clock=clock)


@pytest.fixture
def aggregator(storage):
    return DashboardAggregator(storage)


@pytest.fixture
def catalog(storage):
    return FoodCatalog(storage)


@pytest.fixture
def babies(storage, clock):
    return BabyService(storage, clock=clock)


@pytest.fixture
def baby(storage):
    return storage.add_baby(Baby(name="Ada", date_of_birth=datetime(2025, 11, 1)))


@pytest.fixture
def foods(storage):
    """Egg, peanut, milk and oats keyed by lowercase name."""
    created = {}
    for name, emoji, category in [
        ("Egg", "🥚", FoodCategory.PROTEIN),
        ("Peanut", "🥜", FoodCategory.PROTEIN),
        ("Milk", "🥛", FoodCategory.DAIRY),
        ("Oats", "🌾", FoodCategory.GRAIN),
    ]:
        created[name.lower()] = storage.add_food(
            Food(name=name, emoji=emoji, category=category, is_common=True)
        )
    return created


@pytest.fixture
def run_trial(controller, clock):
    """Start a trial and immediately finish it as 'safe' or 'reaction'."""

    def _run(baby_id: str, food_id: str, outcome: str):
        trial = controller.start_trial(baby_id, food_id, clock.advance(days=1))
        clock.advance(hours=1)
        if outcome == "safe":
            controller.complete_trial(trial.id)
        else:
            controller.log_reaction(trial.id, {"types": ["hives"], "severity": "mild"})
        return controller.get_trial(trial.id)

    return _run
