"""Persian calendar date values and cost-period matching.

Dates in the ledgers are ``YYYY/MM/DD`` strings (months as ``YYYY/MM``) in
the Persian calendar, possibly written with Persian or Arabic-Indic digits.
Comparisons go through :class:`PersianDate` / :class:`PersianMonth` so that
``1404/9`` and ``۱۴۰۴/۰۹`` order the same way as ``1404/09``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from .digits import normalize_digits
from .records import CostRecord, PeriodType

logger = logging.getLogger(__name__)

DATE_SEPARATOR = "/"
LONG_MONTHS = range(1, 7)


@dataclass(frozen=True, order=True)
class PersianMonth:
    year: int
    month: int

    def __str__(self) -> str:
        return f"{self.year:04d}/{self.month:02d}"


@dataclass(frozen=True, order=True)
class PersianDate:
    year: int
    month: int
    day: int

    @property
    def month_key(self) -> PersianMonth:
        return PersianMonth(self.year, self.month)

    def __str__(self) -> str:
        return f"{self.year:04d}/{self.month:02d}/{self.day:02d}"


def _split(value: str | None) -> list[str]:
    text = normalize_digits(value).strip()
    if not text:
        return []
    return [part.strip() for part in text.replace("-", DATE_SEPARATOR).split(DATE_SEPARATOR)]


def _to_ints(parts: list[str]) -> Optional[list[int]]:
    try:
        return [int(part) for part in parts]
    except ValueError:
        return None


def parse_date(value: str | None) -> Optional[PersianDate]:
    """Parse ``YYYY/MM/DD``; ``None`` when the text has another shape."""

    parts = _split(value)
    if len(parts) != 3:
        return None
    numbers = _to_ints(parts)
    if numbers is None:
        return None
    year, month, day = numbers
    if year <= 0 or not 1 <= month <= 12 or not 1 <= day <= 31:
        return None
    return PersianDate(year, month, day)


def parse_month(value: str | None) -> Optional[PersianMonth]:
    """Parse ``YYYY/MM`` (a trailing day segment is truncated)."""

    parts = _split(value)
    if len(parts) not in (2, 3):
        return None
    numbers = _to_ints(parts[:2])
    if numbers is None:
        return None
    year, month = numbers
    if year <= 0 or not 1 <= month <= 12:
        return None
    return PersianMonth(year, month)


def days_in_month(month: int) -> int:
    # Esfand is bounded at 30; the 30th simply never occurs in common years.
    return 31 if month in LONG_MONTHS else 30


def month_window(year: int | str, month: int | str) -> tuple[PersianDate, PersianDate]:
    """Return the first and last day of a Persian month."""

    year_value = int(normalize_digits(str(year)))
    month_value = int(normalize_digits(str(month)))
    return (
        PersianDate(year_value, month_value, 1),
        PersianDate(year_value, month_value, days_in_month(month_value)),
    )


def _fallback_key(value: str | None, segments: int) -> str:
    parts = _split(value)[:segments]
    return DATE_SEPARATOR.join(part.zfill(2) if part.isdigit() else part for part in parts)


def date_in_range(value: str | None, start: str | None, end: str | None) -> bool:
    """Inclusive day-level window test with a best-effort string fallback."""

    parsed, lower, upper = parse_date(value), parse_date(start), parse_date(end)
    if parsed is not None and lower is not None and upper is not None:
        return lower <= parsed <= upper

    logger.warning(
        "Falling back to string comparison for date %r in window %r..%r", value, start, end
    )
    key = _fallback_key(value, 3)
    return bool(key) and _fallback_key(start, 3) <= key <= _fallback_key(end, 3)


def month_in_range(value: str | None, start: str | None, end: str | None) -> bool:
    """Inclusive month-level test; ``start``/``end`` may be day-level dates."""

    parsed, lower, upper = parse_month(value), parse_month(start), parse_month(end)
    if parsed is not None and lower is not None and upper is not None:
        return lower <= parsed <= upper

    logger.warning(
        "Falling back to string comparison for month %r in window %r..%r", value, start, end
    )
    key = _fallback_key(value, 2)
    return bool(key) and _fallback_key(start, 2) <= key <= _fallback_key(end, 2)


def date_in_month(value: str | None, year: int | str, month: int | str) -> bool:
    """Match on the ``YYYY/MM`` part of ``value``, whatever its day.

    Day 31 is accepted at entry in every month, so the month window is not
    used here.
    """

    target = PersianMonth(int(normalize_digits(str(year))), int(normalize_digits(str(month))))
    parsed = parse_date(value)
    if parsed is not None:
        return parsed.month_key == target

    logger.warning("Falling back to string comparison for date %r in month %s", value, target)
    return _fallback_key(value, 2) == str(target)


def cost_matches_period(cost: CostRecord, start_date: str, end_date: str) -> bool:
    """Return ``True`` when ``cost`` applies to the inclusive window.

    Costs without a period type or value never match. Yearly costs are not
    matched until their allocation rule is defined.
    """

    if not cost.period_type or not cost.period_value:
        logger.warning("Skipping cost %s without period type/value", cost.id)
        return False

    if cost.period_type == PeriodType.daily.value:
        return date_in_range(cost.period_value, start_date, end_date)

    if cost.period_type == PeriodType.monthly.value:
        return month_in_range(cost.period_value, start_date, end_date)

    if cost.period_type == PeriodType.yearly.value:
        logger.warning("Yearly cost %s is not allocated to report windows", cost.id)
        return False

    logger.warning("Skipping cost %s with unknown period type %r", cost.id, cost.period_type)
    return False
