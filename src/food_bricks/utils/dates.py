"""Datetime normalisation."""

from datetime import datetime
from typing import Optional


def to_local_naive(value: Optional[datetime]) -> Optional[datetime]:
    """Convert an aware datetime to naive local time; naive values pass through.

    Every stored timestamp is naive local time, the same as ``datetime.now()``,
    so values from any source stay comparable with each other.
    """
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)
