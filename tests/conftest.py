"""Pytest configuration and fixtures."""

from datetime import date
from decimal import Decimal

import pytest

from pawn_calc.data_models import Loan, Payment, SavingsScheme


@pytest.fixture
def make_loan():
    """Factory for the reference loan: 100000 at 2% a month from 2024-01-01."""

    def _make(*payments, principal="100000", rate="2", start=date(2024, 1, 1)):
        return Loan(
            principal=Decimal(principal),
            monthly_rate_percent=Decimal(rate),
            start_date=start,
            payments=[Payment(amount=Decimal(str(amount)), date=paid_on) for paid_on, amount in payments],
        )

    return _make


@pytest.fixture
def scheme() -> SavingsScheme:
    return SavingsScheme(
        installment_amount=Decimal("1000"),
        duration=12,
        bonus_percentage=Decimal("10"),
        start_date=date(2024, 1, 15),
    )
