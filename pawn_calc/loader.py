"""Build calculator inputs from plain records.

Loan and savings records arrive from the records API (or a JSON file) as
plain mappings. The API spells fields in camelCase (``totalLoanAmount``,
``interestRate``, ``startDate``); files written by hand usually use the
snake_case names of the dataclasses. Both are accepted. The record passed in
is never modified.
"""

from __future__ import annotations

from typing import Any, Iterable, List, Mapping, Optional

from .data_models import Loan, Payment, SavingsScheme
from .exceptions import InvalidInputError
from .utils import parse_date, to_decimal

_MISSING = object()


def _pick(record: Mapping[str, Any], *keys: str, default: Any = _MISSING) -> Any:
    """Return the first present, non-empty value among ``keys``."""
    for key in keys:
        value = record.get(key)
        if value is not None and value != "":
            return value
    if default is _MISSING:
        raise InvalidInputError(f"Missing required field: {keys[0]}")
    return default


def _optional_id(record: Mapping[str, Any]) -> Optional[str]:
    value = _pick(record, "id", "_id", default=None)
    return str(value) if value is not None else None


def payment_from_record(record: Mapping[str, Any], index: int = 0) -> Payment:
    amount = to_decimal(_pick(record, "amount"), f"payment[{index}].amount")
    if amount <= 0:
        raise InvalidInputError(f"Payment amount must be positive; got {amount} at payment[{index}]")
    return Payment(
        amount=amount,
        date=parse_date(_pick(record, "date", "paymentDate", "payment_date"), f"payment[{index}].date"),
        payment_type=str(_pick(record, "paymentType", "payment_type", default="Cash")),
        notes=str(_pick(record, "notes", default="")),
    )


def payments_from_records(records: Iterable[Mapping[str, Any]]) -> List[Payment]:
    return [payment_from_record(r, i) for i, r in enumerate(records or [])]


def loan_from_record(record: Mapping[str, Any]) -> Loan:
    """Build a ``Loan`` from an API or file record.

    Raises
    ------
    InvalidInputError
        If a required field is missing or holds an invalid value.
    """
    principal = to_decimal(
        _pick(record, "totalLoanAmount", "principal", "loanAmount"), "principal"
    )
    if principal < 0:
        raise InvalidInputError(f"Principal must not be negative; got {principal}")
    rate = to_decimal(
        _pick(record, "interestRate", "monthlyRatePercent", "monthly_rate_percent", "rate"),
        "monthly_rate_percent",
    )
    if rate < 0:
        raise InvalidInputError(f"Monthly rate must not be negative; got {rate}")
    return Loan(
        principal=principal,
        monthly_rate_percent=rate,
        start_date=parse_date(_pick(record, "startDate", "start_date"), "start_date"),
        payments=payments_from_records(_pick(record, "payments", default=[])),
        loan_id=_optional_id(record),
    )


def scheme_from_record(record: Mapping[str, Any]) -> SavingsScheme:
    """Build a ``SavingsScheme`` from an API or file record.

    Negative amounts and a non-positive duration are rejected here so the
    maturity calculator itself can stay free of validation.
    """
    installment = to_decimal(
        _pick(record, "installmentAmount", "installment_amount"), "installment_amount"
    )
    duration_value = _pick(record, "duration")
    duration_decimal = to_decimal(duration_value, "duration")
    if duration_decimal != duration_decimal.to_integral_value():
        raise InvalidInputError(f"Duration must be a whole number of months; got {duration_value!r}")
    duration = int(duration_decimal)
    bonus_amount = to_decimal(_pick(record, "bonusAmount", "bonus_amount", default=0), "bonus_amount")
    bonus_percentage = to_decimal(
        _pick(record, "bonusPercentage", "bonus_percentage", default=0), "bonus_percentage"
    )

    if installment < 0:
        raise InvalidInputError(f"Installment amount must not be negative; got {installment}")
    if duration <= 0:
        raise InvalidInputError(f"Duration must be a positive number of months; got {duration}")
    if bonus_amount < 0 or bonus_percentage < 0:
        raise InvalidInputError("Bonus amount and percentage must not be negative")

    start_value = _pick(record, "startDate", "start_date", default=None)
    return SavingsScheme(
        installment_amount=installment,
        duration=duration,
        bonus_amount=bonus_amount,
        bonus_percentage=bonus_percentage,
        start_date=parse_date(start_value, "start_date") if start_value is not None else None,
        scheme_id=_optional_id(record),
    )
