from __future__ import annotations

from decimal import Decimal
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer, constr

IsoDate = constr(pattern=r"^\d{4}-\d{2}-\d{2}$")


def money_json(value: Decimal) -> int | float:
    """JSON form of an amount: whole amounts as ints, the rest as floats."""

    if value == value.to_integral_value():
        return int(value)
    return float(value)


Money = Annotated[Decimal, PlainSerializer(money_json, return_type=int | float, when_used="json")]


class WorkAssignment(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    worker_id: str
    project_id: str
    date: IsoDate
    project_name: str | None = None
    client_id: str | None = None
    client_name: str | None = None
    created_at: str | None = None


class Project(BaseModel):
    id: str
    name: str
    client_id: str | None = None
    client_name: str | None = None
    active_in_schedule: bool = True


class Worker(BaseModel):
    id: str
    name: str


class ProjectShare(BaseModel):
    project_id: str
    project_name: str | None = None
    share: float
    share_percent: int


class DateAllocation(BaseModel):
    date: str
    share: float
    share_percent: int
    cost: Money = Decimal("0")


class WorkerProjectCost(BaseModel):
    worker_id: str
    worker_name: str
    total_days_allocated: float = 0.0
    per_date_allocations: list[DateAllocation] = Field(default_factory=list)
    cost: Money = Decimal("0")


class ProjectExpenseBreakdown(BaseModel):
    project_id: str
    total: Money = Decimal("0")
    breakdown: list[WorkerProjectCost] = Field(default_factory=list)


class ProjectCost(BaseModel):
    project_id: str
    project_name: str | None = None
    days_allocated: float = 0.0
    cost: Money = Decimal("0")


class WorkerExpenseBreakdown(BaseModel):
    worker_id: str
    daily_rate: Money = Decimal("0")
    total_days: int = 0
    total: Money = Decimal("0")
    breakdown: list[ProjectCost] = Field(default_factory=list)


class WorkerSummary(BaseModel):
    worker_id: str
    worker_name: str
    daily_rate: Money = Decimal("0")
    total_days: int = 0
    total_expense: Money = Decimal("0")


class WorkerDay(BaseModel):
    worker_id: str
    worker_name: str
    projects: list[ProjectShare] = Field(default_factory=list)


class ScheduleDay(BaseModel):
    date: str
    workers: list[WorkerDay] = Field(default_factory=list)
