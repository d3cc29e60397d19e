"""Data models for the pawn calculator.

This module defines dataclasses for the records the calculator reads (a pawn
loan with its payments, a savings scheme) and the figures it derives from
them. Derived results are recomputed from the authoritative record every time
they are needed and are never persisted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import List, Optional


@dataclass
class Payment:
    """A payment received against a loan.

    Attributes
    ----------
    amount: Decimal
        Amount paid; always positive.
    date: date
        Date the payment was received. May fall before the loan start date.
    payment_type: str
        Free-form tender label (``"Cash"``, ``"Partial"``, ...). Not used in
        the calculation.
    notes: str
        Free-form notes. Not used in the calculation.
    """

    amount: Decimal
    date: date
    payment_type: str = "Cash"
    notes: str = ""


@dataclass
class Loan:
    """Snapshot of a pawn loan as handed over by the records API.

    ``payments`` keeps insertion order; it is not guaranteed to be sorted by
    date.
    """

    principal: Decimal  # total amount disbursed against the collateral
    monthly_rate_percent: Decimal  # simple interest per elapsed month, in percent
    start_date: date
    payments: List[Payment] = field(default_factory=list)
    loan_id: Optional[str] = None


@dataclass
class PaymentAllocation:
    """How one payment was split between interest and principal.

    ``index`` is the payment's position in the loan's original payment list;
    allocations themselves are listed in processing (date) order.
    """

    index: int
    date: date
    amount: Decimal
    months: int  # whole months accrued since the previous cursor
    interest_accrued: Decimal  # interest added for that segment
    applied_to_interest: Decimal
    applied_to_principal: Decimal
    excess: Decimal  # left over once principal reached zero
    remaining_principal: Decimal
    remaining_interest: Decimal


@dataclass
class AccrualResult:
    """Figures derived for a loan as of a given date."""

    original_principal: Decimal
    remaining_principal: Decimal
    interest_accrued: Decimal
    total_due: Decimal
    total_paid: Decimal
    months_elapsed: int  # since the loan start date, for display only
    paid_in_full: bool
    as_of_date: date
    monthly_interest: Decimal  # one month of interest on the remaining principal
    allocations: List[PaymentAllocation] = field(default_factory=list)

    @property
    def remaining_balance(self) -> Decimal:
        return self.total_due

    @property
    def excess_paid(self) -> Decimal:
        """Total paid beyond what the loan required (the "change due")."""
        return sum((a.excess for a in self.allocations), Decimal("0"))


@dataclass
class SavingsScheme:
    """A fixed-installment savings scheme.

    At most one of ``bonus_amount``/``bonus_percentage`` is meaningfully
    nonzero. When both are zero the bonus defaults to one installment.
    """

    installment_amount: Decimal
    duration: int  # number of monthly installments
    bonus_amount: Decimal = Decimal("0")
    bonus_percentage: Decimal = Decimal("0")
    start_date: Optional[date] = None
    scheme_id: Optional[str] = None


@dataclass
class InstallmentDue:
    """One installment of a savings scheme."""

    index: int  # 1-based
    due_date: date
    amount: Decimal


@dataclass
class MaturityResult:
    """Payout of a savings scheme at term completion."""

    total_contribution: Decimal
    bonus_amount: Decimal
    maturity_amount: Decimal
    maturity_date: Optional[date] = None
