"""Utility functions for the pawn calculator.

This module provides helpers for turning loosely typed record values into
``Decimal`` amounts and ``datetime.date`` objects, and the calendar-month
arithmetic shared by the accrual engine and the savings calculator. Every
whole-month difference in the package goes through :func:`months_between`.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP, getcontext
import calendar
from typing import Any

from .exceptions import InvalidInputError

getcontext().prec = 28  # increase decimal precision to avoid rounding errors

CENT = Decimal("0.01")


def parse_date(value: Any, field: str = "date") -> date:
    """Resolve ``value`` to a calendar date.

    Parameters
    ----------
    value: Any
        A ``date``, a ``datetime`` (its date part is used), an ISO
        ``"YYYY-MM-DD"`` string or an ISO timestamp such as
        ``"2024-01-01T10:30:00.000Z"`` as returned by the records API.
    field: str
        Name of the field being parsed, used in the error message.

    Returns
    -------
    date
        The resolved calendar date.

    Raises
    ------
    InvalidInputError
        If the value cannot be resolved to a valid calendar date.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            if "T" in text or " " in text:
                if text.endswith("Z"):
                    text = text[:-1] + "+00:00"
                return datetime.fromisoformat(text).date()
            return date.fromisoformat(text)
        except ValueError as exc:
            raise InvalidInputError(f"Invalid {field}: {value!r}") from exc
    raise InvalidInputError(f"Invalid {field}: {value!r}")


def months_between(start: date, end: date) -> int:
    """Return the whole calendar months elapsed from ``start`` to ``end``.

    A month only counts once the day of month in ``end`` has reached the day
    of month in ``start``, so 2024-01-15 -> 2024-02-14 is 0 months and
    2024-01-15 -> 2024-02-15 is 1 month. Partial months are dropped. An
    ``end`` before ``start`` yields 0, never a negative count.
    """
    months = (end.year - start.year) * 12 + (end.month - start.month)
    if end.day < start.day:
        months -= 1
    return max(0, months)


def add_months(dt: date, months: int) -> date:
    """Return a new date a number of months after ``dt``.

    The day of the month is clamped to the last valid day if needed (e.g.,
    adding one month to Jan 31 yields Feb 28 or 29).
    """
    year = dt.year + (dt.month - 1 + months) // 12
    month = (dt.month - 1 + months) % 12 + 1
    day = min(dt.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def to_decimal(value: Any, field: str = "amount") -> Decimal:
    """Convert a record value into a ``Decimal``.

    Integers, floats, ``Decimal`` and numeric strings (commas allowed) are
    accepted. Floats go through ``str`` so ``0.1`` stays ``Decimal("0.1")``.
    """
    if isinstance(value, bool) or value is None:
        raise InvalidInputError(f"Invalid {field}: {value!r}")
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value).replace(",", "").strip())
        except InvalidOperation as exc:
            raise InvalidInputError(f"Invalid {field}: {value!r}") from exc
    if not result.is_finite():
        raise InvalidInputError(f"Invalid {field}: {value!r}")
    return result


def round_money(value: Decimal) -> Decimal:
    """Round a monetary value to two decimals, halves away from zero."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)
