"""Food status classification from brick history.

The classifier is a pure function of the ordered brick sequence and
whether a trial of the food is currently under observation. It returns a
semantic :class:`FoodStatus`; each presentation surface turns that into its
own wording with :func:`status_label`.

Rules are evaluated in a fixed order and the first match wins:

1. three consecutive ``reaction`` bricks anywhere in history (a ``warning``
   or ``safe`` brick resets the run) -> confirmed allergy
2. three consecutive ``safe`` bricks plus at least one ``reaction`` ->
   safe with signs of sensitivity
3. otherwise pass/reaction counts decide; ``warning`` bricks are not
   counted as reactions
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Union

from ..models.trial import BrickLog, BrickType

RUN_LENGTH = 3


class FoodStatus(str, Enum):
    """Semantic status of a food for one baby."""
    CONFIRMED_ALLERGY = "confirmed_allergy"
    CONFIRMED_ALLERGY_RETESTING = "confirmed_allergy_retesting"
    SAFE_WITH_SENSITIVITY = "safe_with_sensitivity"
    SAFE = "safe"
    SAFE_RETESTING = "safe_retesting"
    NOT_TRIED = "not_tried"
    PASSED_ONCE = "passed_once"
    BUILDING_CONFIDENCE = "building_confidence"
    CAUTION = "caution"
    LIKELY_ALLERGY = "likely_allergy"
    POSSIBLE_SENSITIVITY = "possible_sensitivity"
    ALLERGY_SUSPECTED = "allergy_suspected"
    TESTING = "testing"

    @property
    def tone(self) -> str:
        """Colour family used when rendering the status."""
        return _TONES[self]


_TONES = {
    FoodStatus.CONFIRMED_ALLERGY: "danger",
    FoodStatus.CONFIRMED_ALLERGY_RETESTING: "danger",
    FoodStatus.LIKELY_ALLERGY: "danger",
    FoodStatus.ALLERGY_SUSPECTED: "danger",
    FoodStatus.SAFE_WITH_SENSITIVITY: "warning",
    FoodStatus.CAUTION: "warning",
    FoodStatus.POSSIBLE_SENSITIVITY: "warning",
    FoodStatus.SAFE: "success",
    FoodStatus.SAFE_RETESTING: "success",
    FoodStatus.PASSED_ONCE: "success",
    FoodStatus.BUILDING_CONFIDENCE: "success",
    FoodStatus.NOT_TRIED: "neutral",
    FoodStatus.TESTING: "neutral",
}


class Surface(str, Enum):
    """Places that display a food's status."""
    DASHBOARD = "dashboard"
    FOOD_DETAIL = "food_detail"
    REPORT = "report"


LABELS = {
    FoodStatus.CONFIRMED_ALLERGY: "Confirmed allergy",
    FoodStatus.CONFIRMED_ALLERGY_RETESTING: "Confirmed allergy but re-testing",
    FoodStatus.SAFE_WITH_SENSITIVITY: "Safe food, but signs of sensitivity",
    FoodStatus.SAFE: "Safe food",
    FoodStatus.SAFE_RETESTING: "Safe food but re-testing",
    FoodStatus.NOT_TRIED: "Not tried",
    FoodStatus.PASSED_ONCE: "Passed once",
    FoodStatus.BUILDING_CONFIDENCE: "Building confidence",
    FoodStatus.CAUTION: "Caution",
    FoodStatus.LIKELY_ALLERGY: "Likely allergy",
    FoodStatus.POSSIBLE_SENSITIVITY: "Possible sensitivity",
    FoodStatus.ALLERGY_SUSPECTED: "Allergy suspected",
    FoodStatus.TESTING: "Testing",
}

SURFACE_OVERRIDES = {
    Surface.FOOD_DETAIL: {FoodStatus.NOT_TRIED: "Under observation"},
}


def status_label(status: FoodStatus, surface: Surface = Surface.DASHBOARD) -> str:
    """Display string for a status on the given surface."""
    return SURFACE_OVERRIDES.get(surface, {}).get(status, LABELS[status])


@dataclass(frozen=True)
class BrickSummary:
    """Run flags and tallies extracted from a brick sequence."""
    has_confirmed_allergy_run: bool
    has_safe_run: bool
    passes: int
    reactions: int
    warnings: int

    @property
    def total(self) -> int:
        return self.passes + self.reactions + self.warnings


BrickLike = Union[BrickType, str, BrickLog]


def _brick_type(brick: BrickLike) -> BrickType:
    if isinstance(brick, BrickLog):
        return brick.type
    return BrickType(brick)


def summarize(bricks: Iterable[BrickLike]) -> BrickSummary:
    """Scan bricks once, tracking the red run and the safe run."""
    red_run = 0
    safe_run = 0
    confirmed = False
    safe_streak = False
    passes = reactions = warnings = 0

    for brick in bricks:
        kind = _brick_type(brick)
        if kind is BrickType.REACTION:
            reactions += 1
            red_run += 1
            safe_run = 0
        elif kind is BrickType.WARNING:
            warnings += 1
            red_run = 0
            safe_run = 0
        else:
            passes += 1
            red_run = 0
            safe_run += 1

        if red_run >= RUN_LENGTH:
            confirmed = True
        if safe_run >= RUN_LENGTH:
            safe_streak = True

    return BrickSummary(
        has_confirmed_allergy_run=confirmed,
        has_safe_run=safe_streak,
        passes=passes,
        reactions=reactions,
        warnings=warnings,
    )


def classify(bricks: Iterable[BrickLike], has_active_trial: bool = False) -> FoodStatus:
    """Classify a food from its chronologically ordered bricks."""
    s = summarize(bricks)
    passes, reactions = s.passes, s.reactions

    if s.has_confirmed_allergy_run:
        if has_active_trial:
            return FoodStatus.CONFIRMED_ALLERGY_RETESTING
        return FoodStatus.CONFIRMED_ALLERGY
    if s.has_safe_run and reactions > 0:
        return FoodStatus.SAFE_WITH_SENSITIVITY
    if passes >= 3 and reactions == 0:
        return FoodStatus.SAFE_RETESTING if has_active_trial else FoodStatus.SAFE
    if passes == 0 and reactions == 0:
        return FoodStatus.NOT_TRIED
    if passes == 1 and reactions == 0:
        return FoodStatus.PASSED_ONCE
    if passes == 2 and reactions == 0:
        return FoodStatus.BUILDING_CONFIDENCE
    if passes >= 3 and reactions == 1:
        return FoodStatus.CAUTION
    if passes >= 3 and reactions >= 2:
        return FoodStatus.LIKELY_ALLERGY
    if passes < 3 and reactions == 1:
        return FoodStatus.POSSIBLE_SENSITIVITY
    if passes < 3 and reactions >= 2:
        return FoodStatus.ALLERGY_SUSPECTED
    return FoodStatus.TESTING
