"""Tests for the savings maturity calculator."""

from datetime import date
from decimal import Decimal

import pytest

from pawn_calc.data_models import SavingsScheme
from pawn_calc.exceptions import InvalidInputError
from pawn_calc.maturity import compute_maturity, installment_schedule, savings_progress


class TestComputeMaturity:
    def test_percentage_bonus(self, scheme) -> None:
        result = compute_maturity(scheme)

        assert result.total_contribution == Decimal("12000")
        assert result.bonus_amount == Decimal("1200")
        assert result.maturity_amount == Decimal("13200")

    def test_fixed_bonus_wins(self) -> None:
        result = compute_maturity(
            SavingsScheme(Decimal("500"), 10, bonus_amount=Decimal("750"), bonus_percentage=Decimal("10"))
        )

        assert result.bonus_amount == Decimal("750")
        assert result.maturity_amount == Decimal("5750")

    def test_default_bonus_is_one_installment(self) -> None:
        result = compute_maturity(SavingsScheme(Decimal("2500"), 11))

        assert result.total_contribution == Decimal("27500")
        assert result.bonus_amount == Decimal("2500")
        assert result.maturity_amount == Decimal("30000")

    def test_maturity_date_one_month_after_last_installment(self, scheme) -> None:
        assert compute_maturity(scheme).maturity_date == date(2025, 1, 15)

    def test_no_start_date_no_maturity_date(self) -> None:
        assert compute_maturity(SavingsScheme(Decimal("100"), 3)).maturity_date is None

    def test_input_untouched(self, scheme) -> None:
        before = SavingsScheme(**vars(scheme))
        compute_maturity(scheme)
        assert scheme == before


class TestInstallmentSchedule:
    def test_monthly_due_dates(self, scheme) -> None:
        installments = installment_schedule(scheme)

        assert len(installments) == 12
        assert installments[0].index == 1
        assert installments[0].due_date == date(2024, 1, 15)
        assert installments[-1].due_date == date(2024, 12, 15)
        assert all(i.amount == Decimal("1000") for i in installments)

    def test_requires_start_date(self) -> None:
        with pytest.raises(InvalidInputError):
            installment_schedule(SavingsScheme(Decimal("100"), 3))


def test_savings_progress() -> None:
    assert savings_progress(3, 12) == Decimal("25")
    assert savings_progress(0, 0) == 0
