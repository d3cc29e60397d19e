"""Core calculation engine for pawn-loan interest accrual.

This module replays a loan's payments in date order against a simple-interest
schedule. Interest accrues in whole-month steps on the principal outstanding
during each segment between payments; every payment clears outstanding
interest first and only the rest reduces principal. Interest never compounds
and neither balance can go negative. Results are returned as an
``AccrualResult``.

The functions here are pure: the loan snapshot is never mutated and the only
clock read is the ``date.today()`` default for ``as_of_date``.
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterable, List, Optional, Tuple

from .data_models import AccrualResult, Loan, Payment, PaymentAllocation
from .exceptions import InvalidInputError
from .utils import months_between, parse_date, round_money, to_decimal

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
HUNDRED = Decimal("100")

DEFAULT_QUICK_PAY_PERCENTAGES = (25, 50, 75, 100)


def _normalize_payments(payments: Iterable[Payment]) -> List[Tuple[int, date, Decimal]]:
    """Validate payments and return ``(index, date, amount)`` sorted by date.

    ``sorted`` is stable, so payments sharing a date keep their list order.
    """
    normalized = []
    for index, payment in enumerate(payments):
        amount = to_decimal(payment.amount, f"payment[{index}].amount")
        if amount <= 0:
            raise InvalidInputError(f"Payment amount must be positive; got {amount} at payment[{index}]")
        paid_on = parse_date(payment.date, f"payment[{index}].date")
        normalized.append((index, paid_on, amount))
    return sorted(normalized, key=lambda p: p[1])


def _segment_interest(principal: Decimal, rate: Decimal, months: int) -> Decimal:
    if months <= 0 or principal <= 0:
        return ZERO
    return principal * rate * months


def compute_accrual(loan: Loan, as_of_date: Optional[date] = None) -> AccrualResult:
    """Compute outstanding principal, accrued interest and total due for a loan.

    Parameters
    ----------
    loan: Loan
        The loan snapshot. Payments may be in any order; they are replayed by
        date, ties in the order given.
    as_of_date: date, optional
        Date the figures are computed for. Defaults to today.

    Returns
    -------
    AccrualResult
        The derived figures together with the per-payment allocations.

    Raises
    ------
    InvalidInputError
        If the principal or rate is negative, a payment amount is not
        positive, or any date cannot be resolved.
    """
    principal = to_decimal(loan.principal, "principal")
    if principal < 0:
        raise InvalidInputError(f"Principal must not be negative; got {principal}")
    rate_percent = to_decimal(loan.monthly_rate_percent, "monthly_rate_percent")
    if rate_percent < 0:
        raise InvalidInputError(f"Monthly rate must not be negative; got {rate_percent}")
    start_date = parse_date(loan.start_date, "start_date")
    as_of = parse_date(as_of_date, "as_of_date") if as_of_date is not None else date.today()
    payments = _normalize_payments(loan.payments)

    rate = rate_percent / HUNDRED
    remaining_principal = principal
    accrued_interest = ZERO
    total_paid = ZERO
    cursor = start_date
    allocations: List[PaymentAllocation] = []

    for index, paid_on, amount in payments:
        months = months_between(cursor, paid_on)
        interest_for_period = _segment_interest(remaining_principal, rate, months)
        accrued_interest += interest_for_period
        total_paid += amount

        # Interest first, then principal
        if amount <= accrued_interest:
            to_interest = amount
            to_principal = ZERO
            excess = ZERO
            accrued_interest -= amount
        else:
            to_interest = accrued_interest
            rest = amount - accrued_interest
            accrued_interest = ZERO
            to_principal = min(rest, remaining_principal)
            excess = rest - to_principal
            remaining_principal -= to_principal

        logger.debug(
            "payment %d on %s: %d month(s) accrued %s, %s to interest, %s to principal",
            index, paid_on, months, interest_for_period, to_interest, to_principal,
        )
        allocations.append(
            PaymentAllocation(
                index=index,
                date=paid_on,
                amount=amount,
                months=months,
                interest_accrued=interest_for_period,
                applied_to_interest=to_interest,
                applied_to_principal=to_principal,
                excess=excess,
                remaining_principal=remaining_principal,
                remaining_interest=accrued_interest,
            )
        )
        cursor = paid_on

    final_months = months_between(cursor, as_of)
    if remaining_principal > 0 and final_months > 0:
        final_interest = _segment_interest(remaining_principal, rate, final_months)
        accrued_interest += final_interest
        logger.debug("final segment %s -> %s: %d month(s) accrued %s", cursor, as_of, final_months, final_interest)

    total_due = remaining_principal + accrued_interest
    return AccrualResult(
        original_principal=principal,
        remaining_principal=remaining_principal,
        interest_accrued=accrued_interest,
        total_due=total_due,
        total_paid=total_paid,
        months_elapsed=months_between(start_date, as_of),
        paid_in_full=total_due <= 0,
        as_of_date=as_of,
        monthly_interest=remaining_principal * rate,
        allocations=allocations,
    )


def percentage_of(total_due: Decimal, pct) -> Decimal:
    """Return ``pct`` percent of ``total_due`` rounded to two decimals.

    Used to prefill partial payment amounts (25/50/75/100 % of the total due).
    """
    return round_money(to_decimal(total_due, "total_due") * to_decimal(pct, "percentage") / HUNDRED)


def quick_payment_amounts(
    total_due: Decimal, percentages: Iterable = DEFAULT_QUICK_PAY_PERCENTAGES
) -> Dict[int, Decimal]:
    """Return an ordered mapping of percentage to prefilled payment amount."""
    amounts: Dict[int, Decimal] = {}
    for pct in percentages:
        amounts[pct] = percentage_of(total_due, pct)
    return amounts


def payment_percentage_label(amount: Decimal, total_due: Decimal) -> Optional[str]:
    """Return the share of ``total_due`` a payment covers as e.g. ``"50%"``.

    Returns ``None`` when nothing is due, since no share can be expressed.
    """
    due = to_decimal(total_due, "total_due")
    if due <= 0:
        return None
    share = to_decimal(amount, "amount") / due * HUNDRED
    return f"{share.quantize(Decimal('1'), rounding=ROUND_HALF_UP)}%"
