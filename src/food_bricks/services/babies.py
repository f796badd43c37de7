"""Baby profiles, caregiver access and steroid cream episodes."""

import logging
from datetime import datetime
from typing import Any, Callable, Optional

from pydantic import ValidationError

from ..errors import EntityNotFound, InvalidInput
from ..models import Baby, Caregiver, CaregiverRole, SteroidCream, SteroidCreamStatus
from .storage import TrackerStorage

logger = logging.getLogger(__name__)


class BabyService:
    """Manages baby profiles and who may access them."""

    def __init__(
        self,
        storage: TrackerStorage,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.storage = storage
        self.clock = clock

    def create_baby(
        self,
        user_id: str,
        name: str,
        date_of_birth: datetime,
        gender: Optional[str] = None,
    ) -> Baby:
        """Create a profile and record ``user_id`` as its creator."""
        try:
            baby = Baby(name=name, date_of_birth=date_of_birth, gender=gender)
            creator = Caregiver(
                user_id=user_id,
                baby_id=baby.id,
                role=CaregiverRole.PARENT,
                is_creator=True,
                created_at=self.clock(),
            )
        except ValidationError as exc:
            raise InvalidInput("Invalid baby profile", details=str(exc)) from exc

        with self.storage.transaction():
            self.storage.add_baby(baby)
            self.storage.add_caregiver(creator)
        logger.info("Created baby %s for user %s", baby.id, user_id)
        return baby

    def get_baby(self, baby_id: str) -> Baby:
        baby = self.storage.get_baby(baby_id)
        if baby is None:
            raise EntityNotFound("baby", baby_id)
        return baby

    def update_baby(self, baby_id: str, changes: dict[str, Any]) -> Baby:
        """Change name, gender or date of birth; other keys are rejected."""
        unknown = set(changes) - {"name", "gender", "date_of_birth"}
        if unknown:
            raise InvalidInput("Unknown baby fields", details=", ".join(sorted(unknown)))

        baby = self.get_baby(baby_id)
        data = {**baby.model_dump(), **changes, "updated_at": self.clock()}
        try:
            updated = Baby.model_validate(data)
        except ValidationError as exc:
            raise InvalidInput("Invalid baby profile", details=str(exc)) from exc
        self.storage.save_baby(updated)
        logger.info("Updated baby %s: %s", baby_id, ", ".join(sorted(changes)))
        return updated

    def add_caregiver(
        self,
        baby_id: str,
        user_id: str,
        role: CaregiverRole = CaregiverRole.CAREGIVER,
    ) -> Caregiver:
        self.get_baby(baby_id)
        caregiver = Caregiver(
            user_id=user_id,
            baby_id=baby_id,
            role=role,
            is_creator=False,
            created_at=self.clock(),
        )
        self.storage.add_caregiver(caregiver)
        logger.info("Added %s %s to baby %s", role.value, user_id, baby_id)
        return caregiver

    def list_caregivers(self, baby_id: str) -> list[Caregiver]:
        """Caregivers in the order they were added."""
        return self.storage.list_caregivers(baby_id)

    def get_creator(self, baby_id: str) -> Optional[Caregiver]:
        for caregiver in self.storage.list_caregivers(baby_id):
            if caregiver.is_creator:
                return caregiver
        return None

    def list_babies_for_user(self, user_id: str) -> list[Baby]:
        babies = []
        for link in self.storage.list_caregiver_links(user_id):
            baby = self.storage.get_baby(link.baby_id)
            if baby is not None:
                babies.append(baby)
        return babies

    # ===== Steroid cream =====

    def start_steroid_cream(
        self,
        baby_id: str,
        duration_days: int = 7,
        notes: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> SteroidCream:
        self.get_baby(baby_id)
        try:
            cream = SteroidCream(
                baby_id=baby_id,
                user_id=user_id,
                started_at=self.clock(),
                created_at=self.clock(),
                duration_days=duration_days,
                notes=notes,
            )
        except ValidationError as exc:
            raise InvalidInput("Invalid steroid cream episode", details=str(exc)) from exc
        self.storage.add_steroid_cream(cream)
        logger.info("Steroid cream started for baby %s (%d days)", baby_id, duration_days)
        return cream

    def get_active_steroid_cream(self, baby_id: str) -> Optional[SteroidCream]:
        """Most recently created active episode, if any."""
        active = [
            c for c in self.storage.list_steroid_creams(baby_id)
            if c.status == SteroidCreamStatus.ACTIVE
        ]
        return active[-1] if active else None

    def end_steroid_cream(self, cream_id: str) -> SteroidCream:
        cream = self.storage.get_steroid_cream(cream_id)
        if cream is None:
            raise EntityNotFound("steroid cream", cream_id)
        cream.status = SteroidCreamStatus.ENDED
        cream.ended_at = self.clock()
        self.storage.save_steroid_cream(cream)
        logger.info("Steroid cream %s ended", cream_id)
        return cream
