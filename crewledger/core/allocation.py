"""Worker-day allocation and cost aggregation.

A worker's day is consumed once no matter how many projects it is spread
over: each project booked for the worker on that date receives an equal
``1/N`` slice. Project costs are the daily rate weighted by those slices,
worker costs are the daily rate times the number of distinct days worked.

Every function here is pure. Shares are kept as exact fractions and money is
accumulated as fractions too, only converted to ``Decimal`` on the way out,
so totals computed along different paths are always identical.
"""
from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from fractions import Fraction
from typing import Iterable, Mapping

from crewledger.core.schema import (
    DateAllocation,
    ProjectCost,
    ProjectExpenseBreakdown,
    ProjectShare,
    ScheduleDay,
    WorkAssignment,
    Worker,
    WorkerDay,
    WorkerExpenseBreakdown,
    WorkerProjectCost,
    WorkerSummary,
)

Rates = Mapping[str, object]


@dataclass(frozen=True)
class _Slice:
    worker_id: str
    project_id: str
    project_name: str | None
    date: str
    share: Fraction


def _sort_key(assignment: WorkAssignment) -> tuple[str, str, str, str]:
    return (assignment.date, assignment.worker_id, assignment.project_id, assignment.id)


def _distinct(assignments: Iterable[WorkAssignment]) -> list[WorkAssignment]:
    # one record per (worker, project, date); repeats never add a share
    seen: set[tuple[str, str, str]] = set()
    result: list[WorkAssignment] = []
    for assignment in sorted(assignments, key=_sort_key):
        key = (assignment.worker_id, assignment.project_id, assignment.date)
        if key in seen:
            continue
        seen.add(key)
        result.append(assignment)
    return result


def _projects_per_day(distinct: Iterable[WorkAssignment]) -> Counter[tuple[str, str]]:
    return Counter((assignment.worker_id, assignment.date) for assignment in distinct)


def _slices(assignments: Iterable[WorkAssignment]) -> list[_Slice]:
    distinct = _distinct(assignments)
    counts = _projects_per_day(distinct)
    return [
        _Slice(
            worker_id=item.worker_id,
            project_id=item.project_id,
            project_name=item.project_name,
            date=item.date,
            share=Fraction(1, counts[(item.worker_id, item.date)]),
        )
        for item in distinct
    ]


def _to_money(value: Fraction) -> Decimal:
    return Decimal(value.numerator) / Decimal(value.denominator)


def _percent(share: Fraction) -> int:
    scaled = Decimal(share.numerator * 100) / Decimal(share.denominator)
    return int(scaled.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def daily_rate(rates: Rates | None, worker_id: str) -> Fraction:
    """Return the worker's daily rate, ``0`` when missing or unreadable."""

    if not rates:
        return Fraction(0)
    value = rates.get(worker_id)
    if value is None:
        return Fraction(0)
    try:
        return Fraction(Decimal(str(value)))
    except (InvalidOperation, ValueError, OverflowError):
        return Fraction(0)


# ----------------------------------------------------------------------
# lookups
# ----------------------------------------------------------------------
def assignments_for_worker_on_date(
    assignments: Iterable[WorkAssignment], worker_id: str, date: str
) -> list[WorkAssignment]:
    return sorted(
        (a for a in assignments if a.worker_id == worker_id and a.date == date),
        key=_sort_key,
    )


def assignments_for_project_on_date(
    assignments: Iterable[WorkAssignment], project_id: str, date: str
) -> list[WorkAssignment]:
    return sorted(
        (a for a in assignments if a.project_id == project_id and a.date == date),
        key=_sort_key,
    )


def assignments_on_date(assignments: Iterable[WorkAssignment], date: str) -> list[WorkAssignment]:
    return sorted((a for a in assignments if a.date == date), key=_sort_key)


def share_for_project_on_date(
    assignments: Iterable[WorkAssignment], worker_id: str, project_id: str, date: str
) -> Fraction:
    """Fraction of ``worker_id``'s day on ``date`` that belongs to ``project_id``."""

    projects = {a.project_id for a in assignments if a.worker_id == worker_id and a.date == date}
    if project_id not in projects:
        return Fraction(0)
    return Fraction(1, len(projects))


def allocation_for_worker_on_date(
    assignments: Iterable[WorkAssignment], worker_id: str, date: str
) -> list[ProjectShare]:
    day = _distinct(a for a in assignments if a.worker_id == worker_id and a.date == date)
    if not day:
        return []
    share = Fraction(1, len(day))
    return [
        ProjectShare(
            project_id=item.project_id,
            project_name=item.project_name,
            share=float(share),
            share_percent=_percent(share),
        )
        for item in day
    ]


# ----------------------------------------------------------------------
# worker aggregates
# ----------------------------------------------------------------------
def total_days_for_worker(assignments: Iterable[WorkAssignment], worker_id: str) -> int:
    return len({a.date for a in assignments if a.worker_id == worker_id})


def total_expense_for_worker(assignments: Iterable[WorkAssignment], rates: Rates | None, worker_id: str) -> Decimal:
    days = total_days_for_worker(assignments, worker_id)
    return _to_money(daily_rate(rates, worker_id) * days)


def expense_breakdown_for_worker(
    assignments: Iterable[WorkAssignment], rates: Rates | None, worker_id: str
) -> WorkerExpenseBreakdown:
    """Itemise a worker's cost per project.

    The shares of every worked day sum to one, so ``total`` always equals
    :func:`total_expense_for_worker`.
    """

    rate = daily_rate(rates, worker_id)
    days_by_project: dict[str, Fraction] = {}
    names: dict[str, str | None] = {}
    worked_dates: set[str] = set()
    for item in _slices(assignments):
        if item.worker_id != worker_id:
            continue
        worked_dates.add(item.date)
        days_by_project[item.project_id] = days_by_project.get(item.project_id, Fraction(0)) + item.share
        names.setdefault(item.project_id, item.project_name)

    total = Fraction(0)
    breakdown: list[ProjectCost] = []
    for project_id in sorted(days_by_project):
        days = days_by_project[project_id]
        cost = rate * days
        total += cost
        breakdown.append(
            ProjectCost(
                project_id=project_id,
                project_name=names.get(project_id),
                days_allocated=float(days),
                cost=_to_money(cost),
            )
        )

    return WorkerExpenseBreakdown(
        worker_id=worker_id,
        daily_rate=_to_money(rate),
        total_days=len(worked_dates),
        total=_to_money(total),
        breakdown=breakdown,
    )


def worker_summaries(
    assignments: Iterable[WorkAssignment], rates: Rates | None, workers: Iterable[Worker]
) -> list[WorkerSummary]:
    """One settings-table row per roster worker, in roster order."""

    dates_by_worker: dict[str, set[str]] = {}
    for assignment in assignments:
        dates_by_worker.setdefault(assignment.worker_id, set()).add(assignment.date)

    rows: list[WorkerSummary] = []
    for worker in workers:
        rate = daily_rate(rates, worker.id)
        days = len(dates_by_worker.get(worker.id, ()))
        rows.append(
            WorkerSummary(
                worker_id=worker.id,
                worker_name=worker.name,
                daily_rate=_to_money(rate),
                total_days=days,
                total_expense=_to_money(rate * days),
            )
        )
    return rows


def total_worker_expenses(
    assignments: Iterable[WorkAssignment], rates: Rates | None, workers: Iterable[Worker]
) -> Decimal:
    assignments = list(assignments)
    total = Fraction(0)
    for worker in workers:
        total += daily_rate(rates, worker.id) * total_days_for_worker(assignments, worker.id)
    return _to_money(total)


# ----------------------------------------------------------------------
# project aggregates
# ----------------------------------------------------------------------
def _project_cost(slices: Iterable[_Slice], rates: Rates | None, project_id: str) -> Fraction:
    return sum(
        (daily_rate(rates, item.worker_id) * item.share for item in slices if item.project_id == project_id),
        Fraction(0),
    )


def expense_for_project(assignments: Iterable[WorkAssignment], rates: Rates | None, project_id: str) -> Decimal:
    return _to_money(_project_cost(_slices(assignments), rates, project_id))


def expense_breakdown_for_project(
    assignments: Iterable[WorkAssignment],
    rates: Rates | None,
    project_id: str,
    worker_names: Mapping[str, str] | None = None,
) -> ProjectExpenseBreakdown:
    by_worker: dict[str, list[_Slice]] = {}
    for item in _slices(assignments):
        if item.project_id == project_id:
            by_worker.setdefault(item.worker_id, []).append(item)

    names = worker_names or {}
    total = Fraction(0)
    breakdown: list[WorkerProjectCost] = []
    for worker_id in sorted(by_worker):
        rate = daily_rate(rates, worker_id)
        days = Fraction(0)
        cost = Fraction(0)
        per_date: list[DateAllocation] = []
        for item in by_worker[worker_id]:
            item_cost = rate * item.share
            days += item.share
            cost += item_cost
            per_date.append(
                DateAllocation(
                    date=item.date,
                    share=float(item.share),
                    share_percent=_percent(item.share),
                    cost=_to_money(item_cost),
                )
            )
        total += cost
        breakdown.append(
            WorkerProjectCost(
                worker_id=worker_id,
                worker_name=names.get(worker_id, worker_id),
                total_days_allocated=float(days),
                per_date_allocations=per_date,
                cost=_to_money(cost),
            )
        )

    return ProjectExpenseBreakdown(project_id=project_id, total=_to_money(total), breakdown=breakdown)


# ----------------------------------------------------------------------
# calendar grid
# ----------------------------------------------------------------------
def schedule_grid(
    assignments: Iterable[WorkAssignment], dates: Iterable[str], workers: Iterable[Worker]
) -> list[ScheduleDay]:
    """Day-by-day allocation of every roster worker over ``dates``."""

    roster = list(workers)
    wanted = list(dates)
    wanted_set = set(wanted)
    by_day: dict[tuple[str, str], list[WorkAssignment]] = {}
    for assignment in assignments:
        if assignment.date in wanted_set:
            by_day.setdefault((assignment.date, assignment.worker_id), []).append(assignment)

    grid: list[ScheduleDay] = []
    for day in wanted:
        grid.append(
            ScheduleDay(
                date=day,
                workers=[
                    WorkerDay(
                        worker_id=worker.id,
                        worker_name=worker.name,
                        projects=allocation_for_worker_on_date(by_day.get((day, worker.id), []), worker.id, day),
                    )
                    for worker in roster
                ],
            )
        )
    return grid
