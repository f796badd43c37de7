"""Dashboard aggregation for one baby."""

from collections import defaultdict
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from ..errors import EntityNotFound
from ..models import BrickLog, BrickType, Food, SteroidCream, Trial, TrialStatus
from ..utils.config import Settings
from .storage import TrackerStorage

# Net safe bricks (safe minus warning) needed to count as a safe food
SAFE_FOOD_THRESHOLD = 3
# Reaction bricks needed to count as a food allergy
ALLERGY_THRESHOLD = 2


class DashboardStats(BaseModel):
    total_foods: int = 0
    safe_foods: int = 0
    food_allergies: int = 0


class ActiveTrial(BaseModel):
    """An observing trial joined with its food."""
    trial: Trial
    food: Food

    @property
    def days_left(self) -> int:
        return max((self.trial.observation_ends_at - datetime.now()).days, 0)


class BrickPoint(BaseModel):
    type: BrickType
    date: datetime


class FoodProgress(BaseModel):
    """Raw per-food data. Status is derived by the caller via the classifier."""
    food: Food
    bricks: list[BrickPoint] = Field(default_factory=list)
    pass_count: int = 0
    reaction_count: int = 0
    warning_count: int = 0
    first_trial_date: Optional[datetime] = None
    last_trial_date: Optional[datetime] = None
    has_active_trial: bool = False

    @property
    def brick_types(self) -> list[BrickType]:
        return [b.type for b in self.bricks]


class ActivityEvent(BaseModel):
    id: str
    description: str
    timestamp: datetime
    type: str  # success, error, info, warning


class Dashboard(BaseModel):
    stats: DashboardStats
    active_trials: list[ActiveTrial] = Field(default_factory=list)
    recent_activity: list[ActivityEvent] = Field(default_factory=list)
    food_progress: list[FoodProgress] = Field(default_factory=list)


def trial_event(trial: Trial, food: Food) -> ActivityEvent:
    if trial.status == TrialStatus.COMPLETED:
        description, kind = f"{food.name} trial completed successfully", "success"
    elif trial.status == TrialStatus.REACTION:
        description, kind = f"Reaction to {food.name} logged", "error"
    else:
        description, kind = f"Started {food.name} trial observation", "info"
    return ActivityEvent(id=trial.id, description=description, timestamp=trial.updated_at, type=kind)


def steroid_cream_events(cream: SteroidCream) -> list[ActivityEvent]:
    events = [ActivityEvent(
        id=f"{cream.id}:start",
        description=f"Steroid cream started ({cream.duration_days} days)",
        timestamp=cream.started_at,
        type="warning",
    )]
    if cream.ended_at is not None:
        events.append(ActivityEvent(
            id=f"{cream.id}:end",
            description="Steroid cream ended",
            timestamp=cream.ended_at,
            type="info",
        ))
    return events


class DashboardAggregator:
    """
    Joins a baby's foods, trials, bricks and steroid cream episodes.

    Two different lenses on "safe" coexist on purpose: ``stats.safe_foods``
    counts foods whose safe bricks outnumber warning bricks by at least
    three, while the classifier looks for runs. They can disagree.
    """

    def __init__(self, storage: TrackerStorage, settings: Optional[Settings] = None):
        self.storage = storage
        self.settings = settings or storage.settings

    def build(self, baby_id: str) -> Dashboard:
        if self.storage.get_baby(baby_id) is None:
            raise EntityNotFound("baby", baby_id)
        trials = self.storage.list_trials(baby_id)
        bricks = self.storage.list_bricks(baby_id)

        foods: dict[str, Food] = {}
        for trial in trials:
            if trial.food_id not in foods:
                food = self.storage.get_food(trial.food_id)
                if food is not None:
                    foods[trial.food_id] = food
        trials = [t for t in trials if t.food_id in foods]

        return Dashboard(
            stats=self.compute_stats(trials, bricks),
            active_trials=self.active_trials(trials, foods),
            recent_activity=self.recent_activity(baby_id, trials, foods),
            food_progress=self.food_progress(trials, bricks, foods),
        )

    @staticmethod
    def _bricks_by_food(bricks: list[BrickLog]) -> dict[str, list[BrickLog]]:
        grouped: dict[str, list[BrickLog]] = defaultdict(list)
        for brick in bricks:
            grouped[brick.food_id].append(brick)
        return grouped

    def compute_stats(self, trials: list[Trial], bricks: list[BrickLog]) -> DashboardStats:
        tried = {t.food_id for t in trials}
        grouped = self._bricks_by_food(bricks)
        safe_foods = 0
        allergies = 0
        for food_id in tried:
            food_bricks = grouped.get(food_id, [])
            safe = sum(1 for b in food_bricks if b.type is BrickType.SAFE)
            warning = sum(1 for b in food_bricks if b.type is BrickType.WARNING)
            reaction = sum(1 for b in food_bricks if b.type is BrickType.REACTION)
            if safe - warning >= SAFE_FOOD_THRESHOLD:
                safe_foods += 1
            if reaction >= ALLERGY_THRESHOLD:
                allergies += 1
        return DashboardStats(total_foods=len(tried), safe_foods=safe_foods, food_allergies=allergies)

    def active_trials(self, trials: list[Trial], foods: dict[str, Food]) -> list[ActiveTrial]:
        """Observing trials, soonest-ending first."""
        observing = [t for t in trials if t.status == TrialStatus.OBSERVING]
        observing.sort(key=lambda t: t.observation_ends_at)
        return [ActiveTrial(trial=t, food=foods[t.food_id]) for t in observing]

    def food_progress(
        self,
        trials: list[Trial],
        bricks: list[BrickLog],
        foods: dict[str, Food],
    ) -> list[FoodProgress]:
        grouped = self._bricks_by_food(bricks)
        trials_by_food: dict[str, list[Trial]] = defaultdict(list)
        for trial in trials:
            trials_by_food[trial.food_id].append(trial)

        progress = []
        for food_id, food_trials in trials_by_food.items():
            food_bricks = grouped.get(food_id, [])
            dates = [t.trial_date for t in food_trials]
            progress.append(FoodProgress(
                food=foods[food_id],
                bricks=[BrickPoint(type=b.type, date=b.date) for b in food_bricks],
                pass_count=sum(1 for b in food_bricks if b.type is BrickType.SAFE),
                reaction_count=sum(1 for b in food_bricks if b.type is BrickType.REACTION),
                warning_count=sum(1 for b in food_bricks if b.type is BrickType.WARNING),
                first_trial_date=min(dates),
                last_trial_date=max(dates),
                has_active_trial=any(t.status == TrialStatus.OBSERVING for t in food_trials),
            ))
        progress.sort(key=lambda p: p.last_trial_date, reverse=True)
        return progress

    def recent_activity(
        self,
        baby_id: str,
        trials: list[Trial],
        foods: dict[str, Food],
    ) -> list[ActivityEvent]:
        """Trial and steroid cream events, newest first."""
        events = [trial_event(t, foods[t.food_id]) for t in trials]
        for cream in self.storage.list_steroid_creams(baby_id):
            events.extend(steroid_cream_events(cream))
        events.sort(key=lambda e: e.timestamp, reverse=True)
        return events[: self.settings.recent_activity_limit]
