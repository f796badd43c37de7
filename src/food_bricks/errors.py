"""Domain errors raised by the trial engine and its collaborators."""

from typing import Optional


class FoodBricksError(Exception):
    """Base class for all domain errors."""

    status_code = 500

    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        payload = {"message": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


class AdmissionLimitExceeded(FoodBricksError):
    """Starting another observation would exceed the per-baby limit."""

    status_code = 409

    def __init__(self, limit: int):
        super().__init__(
            f"Maximum {limit} active observations allowed",
            details=(
                "Testing multiple foods simultaneously can make it difficult to "
                "identify which food caused a reaction. Please complete or log "
                "reactions for current observations before starting a new one."
            ),
        )
        self.limit = limit


TooManyActiveObservations = AdmissionLimitExceeded


class EntityNotFound(FoodBricksError):
    """A trial, food, baby or other record referenced by id does not exist."""

    status_code = 404

    def __init__(self, entity: str, entity_id: str):
        super().__init__(f"{entity.capitalize()} not found: {entity_id}")
        self.entity = entity
        self.entity_id = entity_id


class InvalidInput(FoodBricksError):
    """Input failed validation; nothing was written."""

    status_code = 422


class InvalidTransition(InvalidInput):
    """A trial that already reached a terminal status was asked to move again."""

    status_code = 409

    def __init__(self, trial_id: str, current: str, target: str):
        super().__init__(
            f"Trial {trial_id} is already {current}; cannot mark it {target}",
            details="Only trials under observation can be completed or have a reaction logged.",
        )
        self.trial_id = trial_id
        self.current = current
        self.target = target


class DeletionConflict(FoodBricksError):
    """A record cannot be deleted while other records still reference it."""

    status_code = 409
