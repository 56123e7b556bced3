"""Domain layer definitions."""

from .schedule import ScheduleSnapshot, ScheduleState

__all__ = [
    "ScheduleSnapshot",
    "ScheduleState",
]
