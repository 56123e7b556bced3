"""Application services."""

from .schedule import ScheduleService, get_schedule_service, reset_schedule_state

__all__ = [
    "ScheduleService",
    "get_schedule_service",
    "reset_schedule_state",
]
