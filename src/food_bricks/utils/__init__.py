"""Shared utilities."""

from .config import Settings, get_settings
from .dates import to_local_naive

__all__ = ["Settings", "get_settings", "to_local_naive"]
