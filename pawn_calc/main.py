"""Command-line interface for the pawn calculator.

This module uses the ``click`` library to implement a multi-command
interface. Users can compute a loan's outstanding position, prefill partial
payment amounts or compute a savings scheme's maturity. Loans and schemes are
given either as options or as a JSON record exported from the records API.
Results can be printed to the terminal or exported to JSON/CSV files.
"""

from __future__ import annotations

import json
import logging
from datetime import date
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import click

from .config import Settings
from .data_models import Loan, Payment, SavingsScheme
from .engine import compute_accrual, quick_payment_amounts
from .exceptions import ConfigurationError, InvalidInputError
from .formatter import (
    accrual_to_dict,
    export_allocations_to_csv,
    export_to_json,
    maturity_to_dict,
    print_accrual,
    print_allocations,
    print_installments,
    print_maturity,
    print_quick_payments,
)
from .loader import loan_from_record, scheme_from_record
from .log_config import setup_logging
from .maturity import compute_maturity, installment_schedule
from .utils import parse_date, to_decimal

logger = logging.getLogger(__name__)


def parse_amount(value: str) -> float:
    """Parse a numeric string with optional suffixes.

    Accepts plain numbers ("100000"), commas ("1,00,000") and shorthand with
    ``k``/``m`` suffixes (e.g., "50k" meaning 50_000). Returns a float.
    """
    value = value.strip().lower()
    value = value.replace(",", "")
    factor = 1.0
    if value.endswith("k"):
        factor = 1_000.0
        value = value[:-1]
    elif value.endswith("m"):
        factor = 1_000_000.0
        value = value[:-1]
    try:
        return float(value) * factor
    except ValueError:
        raise click.BadParameter(f"Invalid amount: {value}")


def parse_payment_strings(values: Tuple[str, ...]) -> List[Payment]:
    payments: List[Payment] = []
    for item in values:
        parts = item.rsplit(":", 1)
        if len(parts) != 2:
            raise click.BadParameter(f"Payment must be in YYYY-MM-DD:AMOUNT format; got {item}")
        date_str, amt_str = parts
        try:
            paid_on = parse_date(date_str, "payment date")
        except InvalidInputError as exc:
            raise click.BadParameter(str(exc))
        payments.append(Payment(amount=to_decimal(parse_amount(amt_str)), date=paid_on))
    return payments


def _load_record(path: str) -> Dict[str, Any]:
    try:
        with Path(path).open("r", encoding="utf-8") as f:
            record = json.load(f)
    except (OSError, json.JSONDecodeError) as exc:
        raise click.BadParameter(f"Cannot read {path}: {exc}")
    # The records API wraps payloads as {"success": ..., "data": {...}}
    if isinstance(record, dict) and isinstance(record.get("data"), dict):
        record = record["data"]
    if not isinstance(record, dict):
        raise click.BadParameter(f"{path} does not contain a JSON object")
    return record


def build_loan_from_options(
    principal: Optional[str],
    rate: Optional[float],
    start_date: Optional[str],
    payment: Tuple[str, ...],
    loan_file: Optional[str],
) -> Loan:
    if loan_file:
        try:
            return loan_from_record(_load_record(loan_file))
        except InvalidInputError as exc:
            raise click.BadParameter(str(exc))
    missing = [
        name
        for name, value in (("--principal", principal), ("--rate", rate), ("--start-date", start_date))
        if value is None
    ]
    if missing:
        raise click.UsageError(f"Missing option(s) {', '.join(missing)} (or pass --loan-file)")
    try:
        start_dt = parse_date(start_date, "start date")
    except InvalidInputError as exc:
        raise click.BadParameter(str(exc))
    return Loan(
        principal=to_decimal(parse_amount(principal)),
        monthly_rate_percent=to_decimal(rate),
        start_date=start_dt,
        payments=parse_payment_strings(payment),
    )


def build_scheme_from_options(
    installment: Optional[str],
    duration: Optional[int],
    bonus_amount: Optional[str],
    bonus_percent: Optional[float],
    start_date: Optional[str],
    scheme_file: Optional[str],
) -> SavingsScheme:
    if scheme_file:
        record = _load_record(scheme_file)
    else:
        if installment is None or duration is None:
            raise click.UsageError("Missing option(s) --installment/--duration (or pass --scheme-file)")
        record = {
            "installment_amount": parse_amount(installment),
            "duration": duration,
            "bonus_amount": parse_amount(bonus_amount) if bonus_amount else 0,
            "bonus_percentage": bonus_percent or 0,
            "start_date": start_date,
        }
    try:
        return scheme_from_record(record)
    except InvalidInputError as exc:
        raise click.BadParameter(str(exc))


def _parse_as_of(as_of: Optional[str]) -> Optional[date]:
    if not as_of:
        return None
    try:
        return parse_date(as_of, "as-of date")
    except InvalidInputError as exc:
        raise click.BadParameter(str(exc))


def loan_options(func):
    """Attach the options describing a loan to a command."""
    options = [
        click.option("--principal", "-p", "principal", help="Amount disbursed against the collateral"),
        click.option("--rate", "-r", "rate", type=float, help="Simple interest rate per month (percent)"),
        click.option("--start-date", "-s", "start_date", help="Date interest starts accruing (YYYY-MM-DD)"),
        click.option("--payment", "payment", multiple=True, help="Payment in YYYY-MM-DD:AMOUNT format"),
        click.option("--loan-file", "loan_file", type=click.Path(exists=True, dir_okay=False), help="Loan record as JSON"),
        click.option("--as-of", "as_of", help="Compute figures as of this date (default: today)"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


@click.group()
@click.option("--log-level", "log_level", type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False), help="Override PAWN_CALC_LOG_LEVEL")
@click.pass_context
def cli(ctx: click.Context, log_level: Optional[str]) -> None:
    """Pawn-loan interest and savings maturity calculator."""
    try:
        settings = Settings.from_env()
    except ConfigurationError as exc:
        raise click.ClickException(str(exc))
    if log_level:
        settings.log_level = log_level.upper()
    setup_logging(settings.log_level)
    ctx.obj = settings


@cli.command()
@loan_options
@click.option("--show-payments", "show_payments", is_flag=True, help="Show how each payment was allocated")
@click.option("--output", "output", type=str, help="Output file path (.json or .csv)")
@click.pass_obj
def accrual(
    settings: Settings,
    principal: Optional[str],
    rate: Optional[float],
    start_date: Optional[str],
    payment: Tuple[str, ...],
    loan_file: Optional[str],
    as_of: Optional[str],
    show_payments: bool,
    output: Optional[str],
) -> None:
    """Compute outstanding principal, accrued interest and total due."""
    loan = build_loan_from_options(principal, rate, start_date, payment, loan_file)
    try:
        result = compute_accrual(loan, _parse_as_of(as_of))
    except InvalidInputError as exc:
        raise click.BadParameter(str(exc))
    logger.info("Computed accrual for loan %s as of %s", loan.loan_id or "<options>", result.as_of_date)
    if output:
        path = Path(output)
        if path.suffix.lower() == ".json":
            export_to_json(path, accrual_to_dict(result))
        elif path.suffix.lower() == ".csv":
            export_allocations_to_csv(path, result)
        else:
            raise click.BadParameter("Unsupported output format; use .json or .csv")
        click.echo(f"Accrual exported to {path}")
        return
    print_accrual(result, settings.currency)
    if show_payments and result.allocations:
        print_allocations(result)


@cli.command(name="quick-pay")
@loan_options
@click.option("--percent", "percent", type=click.IntRange(1, 100), multiple=True, help="Percentage of the total due (repeatable)")
@click.pass_obj
def quick_pay(
    settings: Settings,
    principal: Optional[str],
    rate: Optional[float],
    start_date: Optional[str],
    payment: Tuple[str, ...],
    loan_file: Optional[str],
    as_of: Optional[str],
    percent: Tuple[int, ...],
) -> None:
    """Print prefilled partial payment amounts for a loan."""
    loan = build_loan_from_options(principal, rate, start_date, payment, loan_file)
    try:
        result = compute_accrual(loan, _parse_as_of(as_of))
    except InvalidInputError as exc:
        raise click.BadParameter(str(exc))
    amounts = quick_payment_amounts(result.total_due, percent or settings.quick_pay_percentages)
    print_quick_payments(amounts, settings.currency)


@cli.command()
@click.option("--installment", "-i", "installment", help="Monthly installment amount")
@click.option("--duration", "-n", "duration", type=int, help="Number of monthly installments")
@click.option("--bonus-amount", "bonus_amount", help="Fixed bonus paid at maturity")
@click.option("--bonus-percent", "bonus_percent", type=float, help="Bonus as a percentage of the total contribution")
@click.option("--start-date", "-s", "start_date", help="Date the first installment is due (YYYY-MM-DD)")
@click.option("--scheme-file", "scheme_file", type=click.Path(exists=True, dir_okay=False), help="Savings scheme record as JSON")
@click.option("--show-schedule", "show_schedule", is_flag=True, help="List the installment due dates")
@click.option("--output", "output", type=str, help="Output file path (.json)")
@click.pass_obj
def maturity(
    settings: Settings,
    installment: Optional[str],
    duration: Optional[int],
    bonus_amount: Optional[str],
    bonus_percent: Optional[float],
    start_date: Optional[str],
    scheme_file: Optional[str],
    show_schedule: bool,
    output: Optional[str],
) -> None:
    """Compute total contribution, bonus and maturity amount of a savings scheme."""
    scheme = build_scheme_from_options(installment, duration, bonus_amount, bonus_percent, start_date, scheme_file)
    result = compute_maturity(scheme)
    if output:
        path = Path(output)
        if path.suffix.lower() != ".json":
            raise click.BadParameter("Maturity export must use .json extension")
        export_to_json(path, maturity_to_dict(result))
        click.echo(f"Maturity exported to {path}")
        return
    print_maturity(result, settings.currency)
    if show_schedule:
        try:
            print_installments(installment_schedule(scheme), settings.currency)
        except InvalidInputError as exc:
            raise click.BadParameter(str(exc))


if __name__ == "__main__":
    cli()
