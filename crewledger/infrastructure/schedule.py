"""Infrastructure layer for schedule persistence."""
from __future__ import annotations

import threading
from datetime import datetime, timezone
from decimal import Decimal
from typing import Iterable, Mapping, Protocol

from crewledger.core.schema import Project, WorkAssignment
from crewledger.core.validation import AssignmentNotFoundError, DuplicateAssignmentError, DuplicateProjectError
from crewledger.domain import ScheduleSnapshot, ScheduleState


class ScheduleRepository(Protocol):
    """Persistence contract for assignments, daily rates and projects."""

    def add_assignment(self, record: dict) -> WorkAssignment: ...

    def delete_assignment(self, assignment_id: str) -> WorkAssignment: ...

    def list_assignments(self) -> list[WorkAssignment]: ...

    def replace_assignments(self, records: Iterable[WorkAssignment]) -> None: ...

    def get_rates(self) -> dict[str, Decimal]: ...

    def set_rate(self, worker_id: str, rate: Decimal) -> None: ...

    def replace_rates(self, rates: Mapping[str, Decimal]) -> None: ...

    def replace_schedule(self, records: Iterable[WorkAssignment], rates: Mapping[str, Decimal]) -> None: ...

    def next_project_id(self) -> str: ...

    def add_project(self, project: Project) -> Project: ...

    def get_project(self, project_id: str) -> Project | None: ...

    def list_projects(self) -> list[Project]: ...

    def snapshot(self) -> ScheduleSnapshot: ...

    def next_assignment_id(self, reserved: Iterable[str] = ()) -> str: ...

    def reset(self) -> None: ...


class InMemoryScheduleRepository:
    """Simple in-memory repository for fast iteration and tests.

    Every write and every snapshot runs under one lock, so the duplicate check
    and the insert cannot interleave with another writer in this process.
    """

    def __init__(self, default_rates: Mapping[str, Decimal] | None = None) -> None:
        self._default_rates = dict(default_rates or {})
        self._lock = threading.RLock()
        self._state = ScheduleState(rates=dict(self._default_rates))
        self._assignment_counter = 0
        self._project_counter = 0

    # ------------------------------------------------------------------
    # assignments
    # ------------------------------------------------------------------
    def next_assignment_id(self, reserved: Iterable[str] = ()) -> str:
        """Return an id unused by stored assignments and ``reserved``."""

        with self._lock:
            taken = {assignment.id for assignment in self._state.assignments}
            taken.update(reserved)
            while True:
                self._assignment_counter += 1
                candidate = f"asg-{self._assignment_counter:05d}"
                if candidate not in taken:
                    return candidate

    def add_assignment(self, record: dict) -> WorkAssignment:
        with self._lock:
            for existing in self._state.assignments:
                if (
                    existing.worker_id == record["worker_id"]
                    and existing.project_id == record["project_id"]
                    and existing.date == record["date"]
                ):
                    raise DuplicateAssignmentError("worker is already assigned to this project on this date")
            assignment = WorkAssignment(
                **{
                    **record,
                    "id": record.get("id") or self.next_assignment_id(),
                    "created_at": record.get("created_at") or datetime.now(timezone.utc).isoformat(),
                }
            )
            self._state.assignments.append(assignment)
            return assignment

    def delete_assignment(self, assignment_id: str) -> WorkAssignment:
        with self._lock:
            for index, assignment in enumerate(self._state.assignments):
                if assignment.id == assignment_id:
                    del self._state.assignments[index]
                    return assignment
        raise AssignmentNotFoundError(f"assignment {assignment_id} not found")

    def list_assignments(self) -> list[WorkAssignment]:
        with self._lock:
            return list(self._state.assignments)

    def replace_assignments(self, records: Iterable[WorkAssignment]) -> None:
        rows = list(records)
        with self._lock:
            self._state.assignments = rows

    # ------------------------------------------------------------------
    # daily rates
    # ------------------------------------------------------------------
    def get_rates(self) -> dict[str, Decimal]:
        with self._lock:
            return dict(self._state.rates)

    def set_rate(self, worker_id: str, rate: Decimal) -> None:
        with self._lock:
            self._state.rates[worker_id] = rate

    def replace_rates(self, rates: Mapping[str, Decimal]) -> None:
        with self._lock:
            self._state.rates = dict(rates)

    def replace_schedule(self, records: Iterable[WorkAssignment], rates: Mapping[str, Decimal]) -> None:
        rows = list(records)
        new_rates = dict(rates)
        with self._lock:
            self._state.assignments = rows
            self._state.rates = new_rates

    # ------------------------------------------------------------------
    # projects
    # ------------------------------------------------------------------
    def next_project_id(self) -> str:
        with self._lock:
            while True:
                self._project_counter += 1
                candidate = f"prj-{self._project_counter:04d}"
                if candidate not in self._state.projects:
                    return candidate

    def add_project(self, project: Project) -> Project:
        with self._lock:
            if project.id in self._state.projects:
                raise DuplicateProjectError(f"project {project.id} already exists")
            self._state.projects[project.id] = project
            return project

    def get_project(self, project_id: str) -> Project | None:
        with self._lock:
            return self._state.projects.get(project_id)

    def list_projects(self) -> list[Project]:
        with self._lock:
            return sorted(self._state.projects.values(), key=lambda item: item.name)

    # ------------------------------------------------------------------
    # reads for the allocation engine
    # ------------------------------------------------------------------
    def snapshot(self) -> ScheduleSnapshot:
        with self._lock:
            return ScheduleSnapshot.capture(self._state)

    def reset(self) -> None:
        with self._lock:
            self._state = ScheduleState(rates=dict(self._default_rates))
            self._assignment_counter = 0
            self._project_counter = 0
