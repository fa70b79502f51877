from decimal import Decimal
from typing import Iterable

from app.errors import ValidationError


def normalize_text(value: str | None) -> str:
    return (value or "").strip()


def trim_to_none(value: str | None) -> str | None:
    trimmed = normalize_text(value)
    return trimmed or None


def normalize_ymd(value: str | None) -> str:
    """Accepts YYYYMMDD or YYYY-MM-DD; blank input becomes ''."""
    return normalize_text(value).replace("-", "")


def normalize_optional_ymd(value: str | None) -> str | None:
    return normalize_ymd(value) or None


def format_ymd(value: str) -> str:
    if len(value) != 8:
        return value
    return f"{value[0:4]}-{value[4:6]}-{value[6:8]}"


def months_between(period_start: str, period_end: str) -> int:
    parts = [period_start[0:4], period_start[4:6], period_end[0:4], period_end[4:6]]
    if not all(part.isdigit() for part in parts):
        return 1
    start_year, start_month, end_year, end_month = (int(part) for part in parts)
    diff = (end_year * 12 + end_month) - (start_year * 12 + start_month)
    return max(diff, 0)


def periods_conflict(
    candidate: tuple[str, str], existing: tuple[str, str], strict: bool = False
) -> bool:
    """Overlap test used by the duplicate-period check.

    The default only asks whether either candidate boundary falls inside the
    existing span, so a candidate that wraps an existing period is not a
    conflict. ``strict`` uses full interval overlap instead.
    """
    start, end = candidate
    existing_start, existing_end = existing
    if strict:
        return start <= existing_end and end >= existing_start
    return (
        existing_start <= start <= existing_end
        or existing_start <= end <= existing_end
    )


def to_decimal(value: object, default: str = "0") -> Decimal:
    if value is None:
        return Decimal(default)
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def require_fields(values: Iterable[tuple[str, str | None]]) -> None:
    for field, value in values:
        if not normalize_text(value):
            raise ValidationError(field)
