import sys
from decimal import Decimal
from fractions import Fraction
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from crewledger.core import allocation
from crewledger.core.schema import WorkAssignment, Worker


def _assign(worker_id: str, project_id: str, date: str, ident: str | None = None) -> WorkAssignment:
    return WorkAssignment(
        id=ident or f"{worker_id}-{project_id}-{date}",
        worker_id=worker_id,
        project_id=project_id,
        date=date,
        project_name=f"Project {project_id}",
    )


RATES = {"w1": Decimal("500")}


def test_scenario_single_project_single_day():
    assignments = [_assign("w1", "p1", "2024-01-15")]

    assert allocation.total_days_for_worker(assignments, "w1") == 1
    assert allocation.total_expense_for_worker(assignments, RATES, "w1") == Decimal("500")
    assert allocation.expense_for_project(assignments, RATES, "p1") == Decimal("500")


def test_scenario_split_day():
    assignments = [
        _assign("w1", "p2", "2024-01-15"),
        _assign("w1", "p1", "2024-01-15"),
    ]

    shares = allocation.allocation_for_worker_on_date(assignments, "w1", "2024-01-15")
    assert [(s.project_id, s.share, s.share_percent) for s in shares] == [
        ("p1", 0.5, 50),
        ("p2", 0.5, 50),
    ]
    assert allocation.total_days_for_worker(assignments, "w1") == 1
    assert allocation.expense_for_project(assignments, RATES, "p1") == Decimal("250")
    assert allocation.expense_for_project(assignments, RATES, "p2") == Decimal("250")


def test_scenario_multi_day_accumulation():
    assignments = [
        _assign("w1", "p1", "2024-01-15"),
        _assign("w1", "p1", "2024-01-16"),
    ]

    assert allocation.total_days_for_worker(assignments, "w1") == 2
    assert allocation.expense_for_project(assignments, RATES, "p1") == Decimal("1000")


def test_scenario_three_way_split_plus_solo_day():
    rates = {"w1": 300}
    assignments = [
        _assign("w1", "p1", "2024-02-01"),
        _assign("w1", "p2", "2024-02-01"),
        _assign("w1", "p3", "2024-02-01"),
        _assign("w1", "p1", "2024-02-02"),
    ]

    assert allocation.expense_for_project(assignments, rates, "p1") == Decimal("400")
    assert allocation.expense_for_project(assignments, rates, "p2") == Decimal("100")
    assert allocation.total_days_for_worker(assignments, "w1") == 2
    assert allocation.total_expense_for_worker(assignments, rates, "w1") == Decimal("600")


@pytest.mark.parametrize("projects", [1, 2, 3, 4, 6, 7])
def test_shares_for_a_day_sum_to_one(projects):
    assignments = [_assign("w1", f"p{index}", "2024-03-01") for index in range(projects)]

    shares = allocation.allocation_for_worker_on_date(assignments, "w1", "2024-03-01")

    assert len(shares) == projects
    assert abs(sum(share.share for share in shares) - 1) < 1e-9


def test_day_without_assignments_is_empty():
    assignments = [_assign("w1", "p1", "2024-03-01"), _assign("w2", "p1", "2024-03-02")]

    assert allocation.allocation_for_worker_on_date(assignments, "w1", "2024-03-02") == []
    assert allocation.allocation_for_worker_on_date([], "w1", "2024-03-02") == []
    assert allocation.total_days_for_worker(assignments, "w3") == 0


def test_day_counted_once_across_projects():
    assignments = [_assign("w1", p, "2024-03-01") for p in ("p1", "p2", "p3")]

    assert allocation.total_days_for_worker(assignments, "w1") == 1


def test_missing_rate_defaults_to_zero():
    assignments = [_assign("w9", "p1", "2024-03-01")]

    assert allocation.total_expense_for_worker(assignments, {}, "w9") == 0
    assert allocation.total_expense_for_worker(assignments, None, "w9") == 0
    assert allocation.expense_for_project(assignments, {"w1": 500}, "p1") == 0


def test_unreadable_rate_defaults_to_zero():
    assert allocation.daily_rate({"w1": "abc"}, "w1") == Fraction(0)
    assert allocation.daily_rate({"w1": "125.5"}, "w1") == Fraction(251, 2)


def test_share_percent_rounds_half_up():
    assignments = [_assign("w1", f"p{index}", "2024-03-01") for index in range(8)]

    shares = allocation.allocation_for_worker_on_date(assignments, "w1", "2024-03-01")

    assert {share.share_percent for share in shares} == {13}
    assert shares[0].share == 0.125


def test_cost_uses_exact_share_not_percent():
    rates = {"w1": 500}
    assignments = [_assign("w1", p, "2024-03-01") for p in ("p1", "p2", "p3")]

    breakdown = allocation.expense_breakdown_for_project(assignments, rates, "p1")

    entry = breakdown.breakdown[0].per_date_allocations[0]
    assert entry.share_percent == 33
    assert entry.cost == Decimal(500) / Decimal(3)
    total = sum(allocation.expense_for_project(assignments, rates, p) for p in ("p1", "p2", "p3"))
    assert abs(total - Decimal(500)) < Decimal("1e-20")


def test_project_breakdown_matches_project_total():
    rates = {"w1": 300, "w2": Decimal("450.50")}
    assignments = [
        _assign("w2", "p1", "2024-02-01"),
        _assign("w1", "p1", "2024-02-01"),
        _assign("w1", "p2", "2024-02-01"),
        _assign("w1", "p3", "2024-02-01"),
        _assign("w1", "p1", "2024-02-02"),
        _assign("w2", "p2", "2024-02-03"),
        _assign("w2", "p1", "2024-02-03"),
    ]

    for project_id in ("p1", "p2", "p3", "p4"):
        detailed = allocation.expense_breakdown_for_project(assignments, rates, project_id)
        assert detailed.total == allocation.expense_for_project(assignments, rates, project_id)


def test_project_breakdown_shape():
    rates = {"w1": 300, "w2": 200}
    assignments = [
        _assign("w2", "p1", "2024-02-01"),
        _assign("w1", "p1", "2024-02-02"),
        _assign("w1", "p2", "2024-02-01"),
        _assign("w1", "p1", "2024-02-01"),
    ]

    breakdown = allocation.expense_breakdown_for_project(assignments, rates, "p1", worker_names={"w1": "Yasser"})

    assert breakdown.total == Decimal("650")
    assert [row.worker_id for row in breakdown.breakdown] == ["w1", "w2"]
    first = breakdown.breakdown[0]
    assert first.worker_name == "Yasser"
    assert first.total_days_allocated == 1.5
    assert [(d.date, d.share, d.share_percent, d.cost) for d in first.per_date_allocations] == [
        ("2024-02-01", 0.5, 50, Decimal("150")),
        ("2024-02-02", 1.0, 100, Decimal("300")),
    ]
    assert first.cost == Decimal("450")
    assert breakdown.breakdown[1].worker_name == "w2"
    assert breakdown.breakdown[1].cost == Decimal("200")


def test_breakdown_is_stable_under_input_order():
    rates = {"w1": 300, "w2": 200}
    assignments = [
        _assign("w2", "p1", "2024-02-01"),
        _assign("w1", "p1", "2024-02-02"),
        _assign("w1", "p2", "2024-02-01"),
        _assign("w1", "p1", "2024-02-01"),
    ]

    forward = allocation.expense_breakdown_for_project(assignments, rates, "p1")
    backward = allocation.expense_breakdown_for_project(list(reversed(assignments)), rates, "p1")

    assert forward == backward


def test_duplicate_assignment_does_not_dilute_shares():
    assignments = [
        _assign("w1", "p1", "2024-01-15", ident="a1"),
        _assign("w1", "p1", "2024-01-15", ident="a2"),
        _assign("w1", "p2", "2024-01-15", ident="a3"),
    ]

    shares = allocation.allocation_for_worker_on_date(assignments, "w1", "2024-01-15")

    assert [(s.project_id, s.share) for s in shares] == [("p1", 0.5), ("p2", 0.5)]
    assert allocation.expense_for_project(assignments, RATES, "p1") == Decimal("250")
    assert allocation.share_for_project_on_date(assignments, "w1", "p1", "2024-01-15") == Fraction(1, 2)


def test_share_for_project_not_booked_that_day():
    assignments = [_assign("w1", "p1", "2024-01-15")]

    assert allocation.share_for_project_on_date(assignments, "w1", "p2", "2024-01-15") == 0
    assert allocation.share_for_project_on_date(assignments, "w1", "p1", "2024-01-15") == 1


def test_worker_breakdown_matches_worker_total():
    rates = {"w1": 300}
    assignments = [
        _assign("w1", "p1", "2024-02-01"),
        _assign("w1", "p2", "2024-02-01"),
        _assign("w1", "p3", "2024-02-01"),
        _assign("w1", "p1", "2024-02-02"),
    ]

    breakdown = allocation.expense_breakdown_for_worker(assignments, rates, "w1")

    assert breakdown.total == allocation.total_expense_for_worker(assignments, rates, "w1")
    assert breakdown.total_days == 2
    assert [(row.project_id, row.cost) for row in breakdown.breakdown] == [
        ("p1", Decimal("400")),
        ("p2", Decimal("100")),
        ("p3", Decimal("100")),
    ]
    assert breakdown.breakdown[0].project_name == "Project p1"


def test_worker_summaries_and_grand_total():
    workers = [Worker(id="w1", name="Yasser"), Worker(id="w2", name="Farid"), Worker(id="w3", name="Michel")]
    rates = {"w1": 300, "w2": 200}
    assignments = [
        _assign("w1", "p1", "2024-02-01"),
        _assign("w1", "p2", "2024-02-01"),
        _assign("w2", "p1", "2024-02-01"),
        _assign("w2", "p1", "2024-02-02"),
    ]

    rows = allocation.worker_summaries(assignments, rates, workers)

    assert [(r.worker_id, r.total_days, r.total_expense) for r in rows] == [
        ("w1", 1, Decimal("300")),
        ("w2", 2, Decimal("400")),
        ("w3", 0, Decimal("0")),
    ]
    assert allocation.total_worker_expenses(assignments, rates, workers) == sum(r.total_expense for r in rows)


def test_lookups_filter_and_sort():
    assignments = [
        _assign("w2", "p1", "2024-02-01"),
        _assign("w1", "p2", "2024-02-01"),
        _assign("w1", "p1", "2024-02-01"),
        _assign("w1", "p1", "2024-02-02"),
    ]

    assert [a.project_id for a in allocation.assignments_for_worker_on_date(assignments, "w1", "2024-02-01")] == ["p1", "p2"]
    assert [a.worker_id for a in allocation.assignments_for_project_on_date(assignments, "p1", "2024-02-01")] == ["w1", "w2"]
    assert len(allocation.assignments_on_date(assignments, "2024-02-01")) == 3


def test_schedule_grid_covers_every_worker_and_date():
    workers = [Worker(id="w1", name="Yasser"), Worker(id="w2", name="Farid")]
    assignments = [
        _assign("w1", "p1", "2024-02-01"),
        _assign("w1", "p2", "2024-02-01"),
        _assign("w2", "p1", "2024-02-05"),
    ]

    grid = allocation.schedule_grid(assignments, ["2024-02-01", "2024-02-02"], workers)

    assert [day.date for day in grid] == ["2024-02-01", "2024-02-02"]
    first = grid[0]
    assert [w.worker_id for w in first.workers] == ["w1", "w2"]
    assert [p.share_percent for p in first.workers[0].projects] == [50, 50]
    assert first.workers[1].projects == []
    assert all(not w.projects for w in grid[1].workers)


def test_engine_is_pure_and_idempotent():
    rates = {"w1": 300}
    assignments = [
        _assign("w1", "p1", "2024-02-01"),
        _assign("w1", "p2", "2024-02-01"),
        _assign("w1", "p1", "2024-02-01", ident="dup"),
    ]
    before = list(assignments)
    rates_before = dict(rates)

    first = allocation.expense_breakdown_for_project(assignments, rates, "p1")
    second = allocation.expense_breakdown_for_project(assignments, rates, "p1")

    assert first == second
    assert allocation.expense_for_project(assignments, rates, "p1") == allocation.expense_for_project(
        assignments, rates, "p1"
    )
    assert assignments == before
    assert rates == rates_before
