"""Savings scheme maturity calculations.

A scheme collects a fixed installment every month for ``duration`` months and
pays out the contributions plus a bonus at maturity.
"""

from __future__ import annotations

from decimal import Decimal
from typing import List

from .data_models import InstallmentDue, MaturityResult, SavingsScheme
from .exceptions import InvalidInputError
from .utils import add_months, parse_date, to_decimal

HUNDRED = Decimal("100")


def compute_maturity(scheme: SavingsScheme) -> MaturityResult:
    """Compute total contribution, bonus and maturity amount for a scheme.

    The bonus is the fixed ``bonus_amount`` when positive, otherwise
    ``bonus_percentage`` percent of the total contribution when positive,
    otherwise one installment. Inputs are assumed to have been validated by
    the caller (see :mod:`pawn_calc.loader`).
    """
    installment = to_decimal(scheme.installment_amount, "installment_amount")
    total_contribution = installment * int(scheme.duration)

    bonus_amount = to_decimal(scheme.bonus_amount or 0, "bonus_amount")
    bonus_percentage = to_decimal(scheme.bonus_percentage or 0, "bonus_percentage")
    if bonus_amount > 0:
        bonus = bonus_amount
    elif bonus_percentage > 0:
        bonus = total_contribution * bonus_percentage / HUNDRED
    else:
        # one free installment
        bonus = installment

    maturity_date = None
    if scheme.start_date is not None:
        maturity_date = add_months(parse_date(scheme.start_date, "start_date"), int(scheme.duration))

    return MaturityResult(
        total_contribution=total_contribution,
        bonus_amount=bonus,
        maturity_amount=total_contribution + bonus,
        maturity_date=maturity_date,
    )


def installment_schedule(scheme: SavingsScheme) -> List[InstallmentDue]:
    """Return the scheme's installments, the first due on the start date.

    Maturity falls one month after the last installment.
    """
    if scheme.start_date is None:
        raise InvalidInputError("A start date is required to build the installment schedule")
    start = parse_date(scheme.start_date, "start_date")
    installment = to_decimal(scheme.installment_amount, "installment_amount")
    return [
        InstallmentDue(index=i + 1, due_date=add_months(start, i), amount=installment)
        for i in range(int(scheme.duration))
    ]


def savings_progress(paid_installments: int, total_installments: int) -> Decimal:
    """Return the percentage of installments paid (0 when there are none)."""
    if total_installments <= 0:
        return Decimal("0")
    return Decimal(paid_installments) * HUNDRED / Decimal(total_installments)
