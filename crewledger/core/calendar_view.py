from __future__ import annotations

import calendar
from datetime import date, timedelta

from crewledger.core.validation import ValidationError, validate_date


def parse_iso_date(value: object) -> date:
    return date.fromisoformat(validate_date(value))


def week_dates(anchor: date) -> list[str]:
    """ISO dates of the Sunday-first week containing ``anchor``."""

    start = anchor - timedelta(days=(anchor.weekday() + 1) % 7)
    return [(start + timedelta(days=offset)).isoformat() for offset in range(7)]


def month_dates(anchor: date) -> list[str]:
    days_in_month = calendar.monthrange(anchor.year, anchor.month)[1]
    return [date(anchor.year, anchor.month, day).isoformat() for day in range(1, days_in_month + 1)]


def dates_for_view(anchor: date, mode: str) -> list[str]:
    if mode == "week":
        return week_dates(anchor)
    if mode == "month":
        return month_dates(anchor)
    raise ValidationError("mode must be week or month")
