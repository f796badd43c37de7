"""Business logic services."""

from .babies import BabyService
from .catalog import FoodCatalog
from .classifier import FoodStatus, Surface, classify, status_label
from .dashboard import Dashboard, DashboardAggregator
from .preferences import PreferencesService
from .reminders import ReminderService
from .reports import ReportService
from .storage import TrackerStorage
from .trials import TrialController

__all__ = [
    "TrackerStorage",
    "TrialController",
    "FoodCatalog",
    "BabyService",
    "ReminderService",
    "PreferencesService",
    "DashboardAggregator",
    "Dashboard",
    "ReportService",
    "FoodStatus",
    "Surface",
    "classify",
    "status_label",
]
