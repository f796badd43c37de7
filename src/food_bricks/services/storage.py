"""Local storage service using TinyDB."""

import logging
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional, Type, TypeVar

from pydantic import BaseModel
from tinydb import Query, TinyDB
from tinydb.queries import QueryLike
from tinydb.storages import MemoryStorage
from tinydb.table import Table

from ..models import (
    Baby,
    BrickLog,
    Caregiver,
    Food,
    Notification,
    Reaction,
    SteroidCream,
    Trial,
    TrialStatus,
    UserSettings,
)
from ..utils.config import Settings, get_settings

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

_file_locks: dict[Path, threading.RLock] = {}
_file_locks_guard = threading.Lock()


def file_lock(path: Path) -> threading.RLock:
    """The process-wide lock for one database file."""
    key = path.resolve()
    with _file_locks_guard:
        if key not in _file_locks:
            _file_locks[key] = threading.RLock()
        return _file_locks[key]


class TrackerStorage:
    """
    Local storage for foods, babies, trials and bricks using TinyDB.

    Each record kind lives in its own table of the same JSON document.
    Bricks are append-only: the only way to remove one is to delete the
    trial that produced it.
    """

    FOODS = "foods"
    BABIES = "babies"
    CAREGIVERS = "caregivers"
    TRIALS = "trials"
    REACTIONS = "reactions"
    BRICKS = "brick_logs"
    STEROID_CREAMS = "steroid_creams"
    NOTIFICATIONS = "notifications"
    USER_SETTINGS = "user_settings"

    def __init__(self, settings: Optional[Settings] = None, db: Optional[TinyDB] = None):
        self.settings = settings or get_settings()
        self._db = db
        # storages opened on the same file share a lock; an injected db gets its own
        self._lock = threading.RLock() if db is not None else file_lock(self.settings.db_path)

    @classmethod
    def in_memory(cls, settings: Optional[Settings] = None) -> "TrackerStorage":
        """Storage backed by TinyDB's MemoryStorage (nothing touches disk)."""
        return cls(settings=settings, db=TinyDB(storage=MemoryStorage))

    @property
    def db_path(self) -> Path:
        """Path to the database file."""
        self.settings.data_dir.mkdir(parents=True, exist_ok=True)
        return self.settings.db_path

    @property
    def db(self) -> TinyDB:
        """Get the TinyDB instance."""
        if self._db is None:
            self._db = TinyDB(self.db_path, ensure_ascii=False, encoding="utf-8")
        return self._db

    def table(self, name: str) -> Table:
        return self.db.table(name)

    @contextmanager
    def transaction(self) -> Iterator["TrackerStorage"]:
        """Serialize a read-then-write sequence against every storage on this file.

        The lock is per process; separate processes sharing the file are not
        coordinated.
        """
        with self._lock:
            yield self

    # ===== Generic helpers =====

    def _insert(self, table: str, record: M) -> M:
        self.table(table).insert(record.model_dump(mode="json"))
        return record

    def _save(self, table: str, record: M) -> M:
        Record = Query()
        self.table(table).upsert(record.model_dump(mode="json"), Record.id == record.id)
        return record

    def _get(self, table: str, model: Type[M], record_id: str) -> Optional[M]:
        Record = Query()
        doc = self.table(table).get(Record.id == record_id)
        if doc is None:
            return None
        return model.model_validate(doc)

    def _search(self, table: str, model: Type[M], cond: Optional[QueryLike] = None) -> list[M]:
        docs = self.table(table).all() if cond is None else self.table(table).search(cond)
        return [model.model_validate(d) for d in docs]

    # ===== Foods =====

    def add_food(self, food: Food) -> Food:
        return self._insert(self.FOODS, food)

    def get_food(self, food_id: str) -> Optional[Food]:
        return self._get(self.FOODS, Food, food_id)

    def get_food_by_name(self, name: str) -> Optional[Food]:
        F = Query()
        results = self._search(self.FOODS, Food, F.name == name)
        return results[0] if results else None

    def list_foods(self, common_only: bool = False) -> list[Food]:
        F = Query()
        cond = F.is_common == True if common_only else None  # noqa: E712
        foods = self._search(self.FOODS, Food, cond)
        foods.sort(key=lambda f: f.name.lower())
        return foods

    def delete_food(self, food_id: str) -> bool:
        F = Query()
        return len(self.table(self.FOODS).remove(F.id == food_id)) > 0

    # ===== Babies & caregivers =====

    def add_baby(self, baby: Baby) -> Baby:
        return self._insert(self.BABIES, baby)

    def save_baby(self, baby: Baby) -> Baby:
        return self._save(self.BABIES, baby)

    def get_baby(self, baby_id: str) -> Optional[Baby]:
        return self._get(self.BABIES, Baby, baby_id)

    def add_caregiver(self, caregiver: Caregiver) -> Caregiver:
        return self._insert(self.CAREGIVERS, caregiver)

    def list_caregivers(self, baby_id: str) -> list[Caregiver]:
        C = Query()
        caregivers = self._search(self.CAREGIVERS, Caregiver, C.baby_id == baby_id)
        caregivers.sort(key=lambda c: c.created_at)
        return caregivers

    def list_caregiver_links(self, user_id: str) -> list[Caregiver]:
        C = Query()
        return self._search(self.CAREGIVERS, Caregiver, C.user_id == user_id)

    # ===== Trials =====

    def add_trial(self, trial: Trial) -> Trial:
        return self._insert(self.TRIALS, trial)

    def save_trial(self, trial: Trial) -> Trial:
        return self._save(self.TRIALS, trial)

    def get_trial(self, trial_id: str) -> Optional[Trial]:
        return self._get(self.TRIALS, Trial, trial_id)

    def list_trials(
        self,
        baby_id: str,
        food_id: Optional[str] = None,
        status: Optional[TrialStatus] = None,
    ) -> list[Trial]:
        """Trials for a baby, optionally narrowed to one food and/or status."""
        T = Query()
        cond = T.baby_id == baby_id
        if food_id is not None:
            cond &= T.food_id == food_id
        if status is not None:
            cond &= T.status == status.value
        return self._search(self.TRIALS, Trial, cond)

    def count_observing(self, baby_id: str) -> int:
        T = Query()
        return self.table(self.TRIALS).count(
            (T.baby_id == baby_id) & (T.status == TrialStatus.OBSERVING.value)
        )

    def count_trials_for_food(self, food_id: str) -> int:
        T = Query()
        return self.table(self.TRIALS).count(T.food_id == food_id)

    def delete_trial(self, trial_id: str) -> bool:
        """Delete a trial together with its reactions, bricks and notifications."""
        T = Query()
        with self.transaction():
            removed = self.table(self.TRIALS).remove(T.id == trial_id)
            if not removed:
                return False
            self.table(self.REACTIONS).remove(T.trial_id == trial_id)
            bricks = self.table(self.BRICKS).remove(T.trial_id == trial_id)
            self.table(self.NOTIFICATIONS).remove(T.trial_id == trial_id)
        logger.debug("Deleted trial %s (%d bricks)", trial_id, len(bricks))
        return True

    # ===== Reactions =====

    def add_reaction(self, reaction: Reaction) -> Reaction:
        return self._insert(self.REACTIONS, reaction)

    def list_reactions(self, trial_id: str) -> list[Reaction]:
        R = Query()
        return self._search(self.REACTIONS, Reaction, R.trial_id == trial_id)

    # ===== Brick log =====

    def append_brick(self, brick: BrickLog) -> BrickLog:
        return self._insert(self.BRICKS, brick)

    def list_bricks(self, baby_id: str, food_id: Optional[str] = None) -> list[BrickLog]:
        """Bricks in ascending date order; equal dates keep insertion order."""
        B = Query()
        cond = B.baby_id == baby_id
        if food_id is not None:
            cond &= B.food_id == food_id
        bricks = self._search(self.BRICKS, BrickLog, cond)
        bricks.sort(key=lambda b: b.date)
        return bricks

    # ===== Steroid cream =====

    def add_steroid_cream(self, cream: SteroidCream) -> SteroidCream:
        return self._insert(self.STEROID_CREAMS, cream)

    def save_steroid_cream(self, cream: SteroidCream) -> SteroidCream:
        return self._save(self.STEROID_CREAMS, cream)

    def get_steroid_cream(self, cream_id: str) -> Optional[SteroidCream]:
        return self._get(self.STEROID_CREAMS, SteroidCream, cream_id)

    def list_steroid_creams(self, baby_id: str) -> list[SteroidCream]:
        S = Query()
        creams = self._search(self.STEROID_CREAMS, SteroidCream, S.baby_id == baby_id)
        creams.sort(key=lambda c: c.created_at)
        return creams

    # ===== Notifications =====

    def add_notification(self, notification: Notification) -> Notification:
        return self._insert(self.NOTIFICATIONS, notification)

    def save_notification(self, notification: Notification) -> Notification:
        return self._save(self.NOTIFICATIONS, notification)

    def get_notification(self, notification_id: str) -> Optional[Notification]:
        return self._get(self.NOTIFICATIONS, Notification, notification_id)

    def list_notifications(
        self,
        user_id: Optional[str] = None,
        trial_id: Optional[str] = None,
    ) -> list[Notification]:
        N = Query()
        cond = None
        if user_id is not None:
            cond = N.user_id == user_id
        if trial_id is not None:
            cond = N.trial_id == trial_id if cond is None else cond & (N.trial_id == trial_id)
        return self._search(self.NOTIFICATIONS, Notification, cond)

    # ===== User settings =====

    def get_user_settings(self, user_id: str) -> Optional[UserSettings]:
        U = Query()
        doc = self.table(self.USER_SETTINGS).get(U.user_id == user_id)
        return UserSettings.model_validate(doc) if doc is not None else None

    def save_user_settings(self, prefs: UserSettings) -> UserSettings:
        """Upsert keyed by user, so each user has at most one row."""
        U = Query()
        self.table(self.USER_SETTINGS).upsert(prefs.model_dump(mode="json"), U.user_id == prefs.user_id)
        return prefs

    def close(self) -> None:
        """Close the database connection."""
        if self._db is not None:
            self._db.close()
            self._db = None

    def __enter__(self) -> "TrackerStorage":
        return self

    def __exit__(self, *args) -> None:
        self.close()
