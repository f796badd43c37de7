"""Trial lifecycle: admission control, terminal transitions and bricks."""

import logging
from datetime import datetime, timedelta
from typing import Any, Callable, Optional, Union

from pydantic import ValidationError

from ..errors import (
    AdmissionLimitExceeded,
    EntityNotFound,
    InvalidInput,
    InvalidTransition,
)
from ..models import (
    BrickLog,
    BrickType,
    Reaction,
    ReactionInput,
    Trial,
    TrialStatus,
)
from ..utils.config import Settings
from .reminders import ReminderService
from .storage import TrackerStorage

logger = logging.getLogger(__name__)


def describe_validation_error(exc: ValidationError) -> str:
    """Flatten a pydantic error into one readable line."""
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()))
        parts.append(f"{loc}: {err['msg']}" if loc else err["msg"])
    return "; ".join(parts)


def reaction_brick_type(prior: list[BrickLog]) -> BrickType:
    """Brick type for a new reaction given the food's earlier bricks.

    The first reaction after established safety (a safe brick, no warning
    yet) is a warning; every other reaction is a plain reaction.
    """
    has_safe = any(b.type is BrickType.SAFE for b in prior)
    has_warning = any(b.type is BrickType.WARNING for b in prior)
    if has_safe and not has_warning:
        return BrickType.WARNING
    return BrickType.REACTION


class TrialController:
    """
    The only writer of trials and bricks.

    Starting a trial is gated by a per-baby limit on concurrent
    observations. Completing a trial or logging a reaction is allowed only
    while the trial is observing, and appends exactly one brick.
    """

    def __init__(
        self,
        storage: TrackerStorage,
        reminders: Optional[ReminderService] = None,
        settings: Optional[Settings] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.storage = storage
        self.settings = settings or storage.settings
        self.clock = clock
        self.reminders = reminders or ReminderService(storage, clock=clock)

    # ===== Reads =====

    def _require_baby(self, baby_id: str) -> None:
        if self.storage.get_baby(baby_id) is None:
            raise EntityNotFound("baby", baby_id)

    def _require_food(self, food_id: str) -> None:
        if self.storage.get_food(food_id) is None:
            raise EntityNotFound("food", food_id)

    def get_trial(self, trial_id: str) -> Trial:
        trial = self.storage.get_trial(trial_id)
        if trial is None:
            raise EntityNotFound("trial", trial_id)
        return trial

    def list_trials(self, baby_id: str) -> list[Trial]:
        """All trials for a baby, most recent trial date first."""
        self._require_baby(baby_id)
        trials = self.storage.list_trials(baby_id)
        trials.sort(key=lambda t: t.trial_date, reverse=True)
        return trials

    def get_bricks(self, baby_id: str, food_id: str) -> list[BrickLog]:
        self._require_baby(baby_id)
        self._require_food(food_id)
        return self.storage.list_bricks(baby_id, food_id)

    def has_active_trial(self, baby_id: str, food_id: str) -> bool:
        return bool(self.storage.list_trials(baby_id, food_id, TrialStatus.OBSERVING))

    # ===== Lifecycle =====

    def start_trial(
        self,
        baby_id: str,
        food_id: str,
        trial_date: datetime,
        observation_period_days: Optional[int] = None,
        notes: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> Trial:
        """Begin observing a food; no brick is written until the trial ends."""
        if observation_period_days is None:
            observation_period_days = self.default_period_for(user_id)
        if not 1 <= observation_period_days <= 14:
            raise InvalidInput(
                "Observation period must be between 1 and 14 days",
                details=f"Got {observation_period_days}",
            )

        self._require_baby(baby_id)
        self._require_food(food_id)

        limit = self.settings.max_active_observations
        with self.storage.transaction():
            active = self.storage.count_observing(baby_id)
            if active >= limit:
                logger.warning(
                    "Rejected trial for baby %s: %d observations already active",
                    baby_id, active,
                )
                raise AdmissionLimitExceeded(limit)

            now = self.clock()
            try:
                trial = Trial(
                    baby_id=baby_id,
                    food_id=food_id,
                    user_id=user_id,
                    trial_date=trial_date,
                    observation_period_days=observation_period_days,
                    observation_ends_at=trial_date + timedelta(days=observation_period_days),
                    notes=notes,
                    created_at=now,
                    updated_at=now,
                )
            except ValidationError as exc:
                raise InvalidInput("Invalid trial", details=describe_validation_error(exc)) from exc
            self.storage.add_trial(trial)

        logger.info(
            "Started trial %s (food %s, baby %s) observing until %s",
            trial.id, food_id, baby_id, trial.observation_ends_at.date().isoformat(),
        )
        self.reminders.schedule_observation_reminder(trial)
        return trial

    def default_period_for(self, user_id: Optional[str]) -> int:
        """The user's saved default period, else the configured one."""
        prefs = self.storage.get_user_settings(user_id) if user_id else None
        if prefs is not None:
            return prefs.default_observation_period_days
        return self.settings.default_observation_period_days

    def _transition(self, trial: Trial, target: TrialStatus) -> None:
        if not trial.can_transition_to(target):
            raise InvalidTransition(trial.id, trial.status.value, target.value)
        trial.status = target
        trial.updated_at = self.clock()
        self.storage.save_trial(trial)

    def complete_trial(self, trial_id: str) -> BrickLog:
        """Close an observation with no reaction and append a safe brick."""
        with self.storage.transaction():
            trial = self.get_trial(trial_id)
            self._transition(trial, TrialStatus.COMPLETED)
            brick = self.storage.append_brick(BrickLog(
                baby_id=trial.baby_id,
                food_id=trial.food_id,
                trial_id=trial.id,
                type=BrickType.SAFE,
                date=self.clock(),
            ))
        logger.info("Completed trial %s: safe brick", trial_id)
        return brick

    def log_reaction(
        self,
        trial_id: str,
        reaction_data: Union[ReactionInput, dict[str, Any]],
        user_id: Optional[str] = None,
    ) -> Reaction:
        """Record a reaction, end the trial and append a warning or reaction brick."""
        try:
            data = ReactionInput.model_validate(reaction_data)
        except ValidationError as exc:
            raise InvalidInput("Invalid reaction", details=describe_validation_error(exc)) from exc

        with self.storage.transaction():
            trial = self.get_trial(trial_id)
            if not trial.can_transition_to(TrialStatus.REACTION):
                raise InvalidTransition(trial.id, trial.status.value, TrialStatus.REACTION.value)

            prior = self.storage.list_bricks(trial.baby_id, trial.food_id)
            brick_type = reaction_brick_type(prior)

            reaction = Reaction(trial_id=trial.id, user_id=user_id, **data.model_dump())
            self.storage.add_reaction(reaction)
            self._transition(trial, TrialStatus.REACTION)
            self.storage.append_brick(BrickLog(
                baby_id=trial.baby_id,
                food_id=trial.food_id,
                trial_id=trial.id,
                type=brick_type,
                date=self.clock(),
            ))

        logger.info(
            "Reaction logged on trial %s (%s): %s brick",
            trial_id, data.severity.value, brick_type.value,
        )
        return reaction

    # ===== Deletion =====

    def delete_trial(self, trial_id: str) -> None:
        """Remove a trial in any state, with its reactions and bricks."""
        if not self.storage.delete_trial(trial_id):
            raise EntityNotFound("trial", trial_id)
        logger.info("Deleted trial %s", trial_id)

    def delete_latest_trial_for_food(self, baby_id: str, food_id: str) -> Trial:
        """Undo the most recent entry (by trial date) for a food."""
        self._require_baby(baby_id)
        with self.storage.transaction():
            trials = self.storage.list_trials(baby_id, food_id)
            if not trials:
                raise EntityNotFound("trial", f"{baby_id}/{food_id}")
            latest = max(trials, key=lambda t: t.trial_date)
            self.storage.delete_trial(latest.id)
        logger.info("Deleted latest trial %s for food %s", latest.id, food_id)
        return latest

    def delete_all_progress_for_food(self, baby_id: str, food_id: str) -> int:
        """Reset a food for a baby; returns how many trials were removed."""
        self._require_baby(baby_id)
        with self.storage.transaction():
            trials = self.storage.list_trials(baby_id, food_id)
            for trial in trials:
                self.storage.delete_trial(trial.id)
        logger.info("Reset food %s for baby %s (%d trials)", food_id, baby_id, len(trials))
        return len(trials)
