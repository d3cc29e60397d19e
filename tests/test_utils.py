"""Tests for date and amount helpers."""

from datetime import date, datetime
from decimal import Decimal

import pytest

from pawn_calc.exceptions import InvalidInputError
from pawn_calc.utils import add_months, months_between, parse_date, round_money, to_decimal


class TestMonthsBetween:
    @pytest.mark.parametrize(
        "start, end, expected",
        [
            (date(2024, 1, 1), date(2024, 4, 1), 3),
            (date(2024, 1, 15), date(2024, 2, 14), 0),
            (date(2024, 1, 15), date(2024, 2, 15), 1),
            (date(2024, 1, 31), date(2024, 2, 29), 0),
            (date(2023, 11, 10), date(2024, 2, 9), 2),
            (date(2023, 11, 10), date(2024, 2, 10), 3),
            (date(2024, 5, 1), date(2024, 5, 1), 0),
        ],
    )
    def test_whole_months(self, start, end, expected) -> None:
        assert months_between(start, end) == expected

    def test_end_before_start_is_zero(self) -> None:
        assert months_between(date(2024, 6, 1), date(2024, 1, 1)) == 0


class TestAddMonths:
    def test_clamps_to_month_end(self) -> None:
        assert add_months(date(2024, 1, 31), 1) == date(2024, 2, 29)
        assert add_months(date(2023, 1, 31), 1) == date(2023, 2, 28)

    def test_crosses_year(self) -> None:
        assert add_months(date(2024, 11, 15), 3) == date(2025, 2, 15)


class TestParseDate:
    def test_date_passthrough(self) -> None:
        assert parse_date(date(2024, 1, 1)) == date(2024, 1, 1)

    def test_datetime_uses_date_part(self) -> None:
        assert parse_date(datetime(2024, 1, 1, 23, 59)) == date(2024, 1, 1)

    def test_iso_string(self) -> None:
        assert parse_date(" 2024-03-05 ") == date(2024, 3, 5)

    def test_api_timestamp(self) -> None:
        assert parse_date("2024-03-05T00:00:00.000Z") == date(2024, 3, 5)

    @pytest.mark.parametrize("value", ["2024-13-01", "05/03/2024", "", None, 20240305])
    def test_invalid(self, value) -> None:
        with pytest.raises(InvalidInputError):
            parse_date(value, "start_date")


class TestToDecimal:
    def test_float_keeps_written_value(self) -> None:
        assert to_decimal(0.1) == Decimal("0.1")

    def test_commas_stripped(self) -> None:
        assert to_decimal("1,00,000") == Decimal("100000")

    @pytest.mark.parametrize("value", ["abc", None, True, "NaN", float("inf")])
    def test_invalid(self, value) -> None:
        with pytest.raises(InvalidInputError):
            to_decimal(value, "amount")


def test_round_money_half_up() -> None:
    assert round_money(Decimal("2.345")) == Decimal("2.35")
    assert round_money(Decimal("2.344")) == Decimal("2.34")
