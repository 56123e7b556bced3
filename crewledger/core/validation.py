from __future__ import annotations

from datetime import date
from decimal import Decimal, InvalidOperation
import re

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


class ValidationError(Exception):
    """Raised when domain validation fails."""


class DuplicateAssignmentError(ValidationError):
    """Raised when a worker is already booked on the same project and date."""


class DuplicateProjectError(ValidationError):
    """Raised when a project id is already registered."""


class UnknownReferenceError(LookupError):
    """Raised when a write references a worker or project that does not exist."""


class AssignmentNotFoundError(UnknownReferenceError):
    pass


def validate_date(value: object) -> str:
    raw = str(value or "").strip()
    if not _ISO_DATE.fullmatch(raw):
        raise ValidationError(f"date must be YYYY-MM-DD, got {value!r}")
    try:
        date.fromisoformat(raw)
    except ValueError as exc:
        raise ValidationError(f"not a calendar date: {raw}") from exc
    return raw


def validate_rate(value: object) -> Decimal:
    try:
        rate = Decimal(str(value))
    except (InvalidOperation, TypeError) as exc:
        raise ValidationError(f"daily rate is not a number: {value!r}") from exc
    if not rate.is_finite():
        raise ValidationError("daily rate must be finite")
    if rate < 0:
        raise ValidationError("daily rate cannot be negative")
    return rate
