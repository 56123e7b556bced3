"""Application service layer for the work schedule."""
from __future__ import annotations

import logging
from datetime import date as date_type
from decimal import Decimal
from typing import Iterable, Mapping

from pydantic import ValidationError as PydanticValidationError

from crewledger.core import allocation
from crewledger.core.calendar_view import dates_for_view, parse_iso_date
from crewledger.core.config import Roster, load_roster
from crewledger.core.schema import (
    Project,
    ProjectExpenseBreakdown,
    ProjectShare,
    WorkAssignment,
    WorkerExpenseBreakdown,
    WorkerSummary,
)
from crewledger.core.validation import (
    DuplicateAssignmentError,
    DuplicateProjectError,
    UnknownReferenceError,
    ValidationError,
    validate_date,
    validate_rate,
)
from crewledger.domain import ScheduleSnapshot
from crewledger.infrastructure import InMemoryScheduleRepository, ScheduleRepository

log = logging.getLogger(__name__)


class ScheduleService:
    """Coordinates schedule use cases.

    Writes are validated here before they reach the repository. Reads take a
    single snapshot from the repository and hand it to the allocation engine,
    so assignments and rates are always evaluated as a matched pair.
    """

    def __init__(self, repository: ScheduleRepository, roster: Roster) -> None:
        self._repository = repository
        self._roster = roster

    @property
    def roster(self) -> Roster:
        return self._roster

    # ------------------------------------------------------------------
    # projects
    # ------------------------------------------------------------------
    def add_project(self, payload: Mapping[str, object]) -> Project:
        data = dict(payload)
        if not data.get("name"):
            raise ValidationError("project name is required")
        if not data.get("id"):
            data["id"] = self._repository.next_project_id()
        try:
            project = Project(**data)
        except PydanticValidationError as exc:
            raise ValidationError(str(exc)) from exc
        try:
            return self._repository.add_project(project)
        except DuplicateProjectError:
            log.warning("Rejected project %s: id already registered", project.id)
            raise

    def list_projects(self) -> list[Project]:
        return self._repository.list_projects()

    def schedulable_projects(self) -> list[Project]:
        return [project for project in self._repository.list_projects() if project.active_in_schedule]

    # ------------------------------------------------------------------
    # assignments
    # ------------------------------------------------------------------
    def assign_worker(self, worker_id: str, project_id: str, date: str) -> WorkAssignment:
        if not self._roster.has_worker(worker_id):
            raise UnknownReferenceError(f"worker {worker_id} not found")
        project = self._repository.get_project(project_id)
        if project is None:
            raise UnknownReferenceError(f"project {project_id} not found")
        day = validate_date(date)

        try:
            assignment = self._repository.add_assignment(
                {
                    "worker_id": worker_id,
                    "project_id": project.id,
                    "project_name": project.name,
                    "client_id": project.client_id,
                    "client_name": project.client_name,
                    "date": day,
                }
            )
        except DuplicateAssignmentError:
            log.warning("Rejected duplicate assignment of worker %s to project %s on %s", worker_id, project_id, day)
            raise
        log.info("Assigned worker %s to project %s on %s (%s)", worker_id, project_id, day, assignment.id)
        return assignment

    def remove_assignment(self, assignment_id: str) -> WorkAssignment:
        removed = self._repository.delete_assignment(assignment_id)
        log.info("Removed assignment %s", assignment_id)
        return removed

    def list_assignments(
        self,
        *,
        worker_id: str | None = None,
        project_id: str | None = None,
        date: str | None = None,
    ) -> list[WorkAssignment]:
        rows = self._repository.list_assignments()
        if worker_id:
            rows = [row for row in rows if row.worker_id == worker_id]
        if project_id:
            rows = [row for row in rows if row.project_id == project_id]
        if date:
            rows = [row for row in rows if row.date == date]
        rows.sort(key=lambda row: (row.date, row.worker_id, row.project_id, row.id))
        return rows

    # ------------------------------------------------------------------
    # daily rates
    # ------------------------------------------------------------------
    def update_daily_rate(self, worker_id: str, rate: object) -> Decimal:
        if not self._roster.has_worker(worker_id):
            raise UnknownReferenceError(f"worker {worker_id} not found")
        value = validate_rate(rate)
        self._repository.set_rate(worker_id, value)
        log.info("Daily rate of worker %s set to %s", worker_id, value)
        return value

    def save_all_rates(self, rates: Mapping[str, object]) -> dict[str, Decimal]:
        validated = self._validate_rates(rates)
        self._repository.replace_rates(validated)
        log.info("Saved daily rates for %d workers", len(validated))
        return validated

    def get_rates(self) -> dict[str, Decimal]:
        return self._repository.get_rates()

    def _validate_rates(self, rates: Mapping[str, object]) -> dict[str, Decimal]:
        validated: dict[str, Decimal] = {}
        for worker_id, value in rates.items():
            if not self._roster.has_worker(worker_id):
                raise UnknownReferenceError(f"worker {worker_id} not found")
            validated[worker_id] = validate_rate(value)
        return validated

    # ------------------------------------------------------------------
    # bulk load
    # ------------------------------------------------------------------
    def load_schedule(
        self,
        assignments: Iterable[Mapping[str, object]],
        rates: Mapping[str, object] | None = None,
    ) -> int:
        """Replace the stored schedule with an externally loaded one.

        Nothing is written unless every row and rate validates; on failure the
        previous assignments and rates stay in place.
        """

        try:
            rows = self._validate_assignments(assignments)
            new_rates = self._validate_rates(rates) if rates is not None else self._repository.get_rates()
        except (ValidationError, UnknownReferenceError) as exc:
            log.warning("Rejected schedule load: %s", exc)
            raise

        self._repository.replace_schedule(rows, new_rates)
        log.info("Loaded %d assignments and %d daily rates", len(rows), len(new_rates))
        return len(rows)

    def _validate_assignments(self, records: Iterable[Mapping[str, object]]) -> list[WorkAssignment]:
        payload: list[dict] = []
        for index, record in enumerate(records):
            if not isinstance(record, Mapping):
                raise ValidationError(f"assignment #{index} must be an object")
            payload.append(dict(record))

        explicit_ids: set[str] = set()
        for index, data in enumerate(payload):
            if not data.get("id"):
                continue
            if not isinstance(data["id"], str):
                raise ValidationError(f"assignment #{index} id must be a string")
            if data["id"] in explicit_ids:
                raise DuplicateAssignmentError(f"assignment #{index} repeats id {data['id']}")
            explicit_ids.add(data["id"])

        rows: list[WorkAssignment] = []
        seen: set[tuple[str, str, str]] = set()
        for index, data in enumerate(payload):
            data["date"] = validate_date(data.get("date"))
            if not data.get("id"):
                data["id"] = self._repository.next_assignment_id(reserved=explicit_ids)
            try:
                assignment = WorkAssignment(**data)
            except PydanticValidationError as exc:
                raise ValidationError(f"assignment #{index} is invalid: {exc}") from exc
            key = (assignment.worker_id, assignment.project_id, assignment.date)
            if key in seen:
                raise DuplicateAssignmentError(
                    f"assignment #{index} repeats worker {key[0]} on project {key[1]} for {key[2]}"
                )
            seen.add(key)
            rows.append(assignment)
        return rows

    # ------------------------------------------------------------------
    # allocation & expenses
    # ------------------------------------------------------------------
    def snapshot(self) -> ScheduleSnapshot:
        return self._repository.snapshot()

    def day_allocation(self, worker_id: str, date: str) -> list[ProjectShare]:
        snap = self.snapshot()
        return allocation.allocation_for_worker_on_date(snap.assignments, worker_id, validate_date(date))

    def worker_total_days(self, worker_id: str) -> int:
        return allocation.total_days_for_worker(self.snapshot().assignments, worker_id)

    def worker_total_expense(self, worker_id: str) -> Decimal:
        snap = self.snapshot()
        return allocation.total_expense_for_worker(snap.assignments, snap.rates, worker_id)

    def worker_expense_breakdown(self, worker_id: str) -> WorkerExpenseBreakdown:
        snap = self.snapshot()
        return allocation.expense_breakdown_for_worker(snap.assignments, snap.rates, worker_id)

    def project_expense(self, project_id: str) -> Decimal:
        snap = self.snapshot()
        return allocation.expense_for_project(snap.assignments, snap.rates, project_id)

    def project_expense_breakdown(self, project_id: str) -> ProjectExpenseBreakdown:
        snap = self.snapshot()
        return allocation.expense_breakdown_for_project(
            snap.assignments, snap.rates, project_id, worker_names=self._roster.names()
        )

    def worker_summaries(self) -> list[WorkerSummary]:
        snap = self.snapshot()
        return allocation.worker_summaries(snap.assignments, snap.rates, self._roster.workers)

    def grand_total(self) -> Decimal:
        snap = self.snapshot()
        return allocation.total_worker_expenses(snap.assignments, snap.rates, self._roster.workers)

    def schedule_view(self, anchor: str | date_type | None = None, mode: str = "week") -> dict[str, object]:
        if anchor is None:
            anchor_date = date_type.today()
        elif isinstance(anchor, date_type):
            anchor_date = anchor
        else:
            anchor_date = parse_iso_date(anchor)
        dates = dates_for_view(anchor_date, mode)
        grid = allocation.schedule_grid(self.snapshot().assignments, dates, self._roster.workers)
        return {
            "anchor": anchor_date.isoformat(),
            "mode": mode,
            "dates": dates,
            "days": [day.model_dump(mode="json") for day in grid],
        }

    # ------------------------------------------------------------------
    # testing helpers
    # ------------------------------------------------------------------
    def reset(self) -> None:
        self._repository.reset()


_roster = load_roster()
_repository = InMemoryScheduleRepository(_roster.default_rates())
_service = ScheduleService(_repository, _roster)


def get_schedule_service() -> ScheduleService:
    """Return the singleton schedule service for the process."""

    return _service


def reset_schedule_state() -> None:
    """Reset the in-memory store (used in tests)."""

    _service.reset()
