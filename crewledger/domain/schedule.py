"""Domain entities for the work schedule."""
from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from types import MappingProxyType
from typing import Mapping

from crewledger.core.schema import Project, WorkAssignment


@dataclass(slots=True)
class ScheduleState:
    """Mutable schedule held by the in-memory store."""

    assignments: list[WorkAssignment] = field(default_factory=list)
    rates: dict[str, Decimal] = field(default_factory=dict)
    projects: dict[str, Project] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class ScheduleSnapshot:
    """Matched, read-only view of assignments and rates taken in one read."""

    assignments: tuple[WorkAssignment, ...] = ()
    rates: Mapping[str, Decimal] = field(default_factory=lambda: MappingProxyType({}))

    @classmethod
    def capture(cls, state: ScheduleState) -> "ScheduleSnapshot":
        return cls(assignments=tuple(state.assignments), rates=MappingProxyType(dict(state.rates)))
