"""Output helpers for the pawn calculator.

This module renders accrual and maturity results as plain-text tables for
the terminal, converts them into JSON-ready dictionaries (camelCase keys, the
shape the back-office screens consume) and exports them to JSON/CSV files.
"""

from __future__ import annotations

import csv
import json
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping

from .data_models import AccrualResult, InstallmentDue, MaturityResult


def format_currency(value: Decimal, symbol: str = "₹") -> str:
    """Format an amount as currency text, e.g. ``₹106,000.00``."""
    sign = "-" if value < 0 else ""
    return f"{sign}{symbol}{abs(value):,.2f}"


def accrual_to_dict(result: AccrualResult) -> Dict[str, Any]:
    """Convert an accrual result into a JSON-serialisable dictionary."""
    return {
        "originalPrincipal": float(result.original_principal),
        "remainingPrincipal": float(result.remaining_principal),
        "interestAccrued": float(result.interest_accrued),
        "totalDue": float(result.total_due),
        "totalPaid": float(result.total_paid),
        "remainingBalance": float(result.remaining_balance),
        "monthsElapsed": result.months_elapsed,
        "paidInFull": result.paid_in_full,
        "monthlyInterest": float(result.monthly_interest),
        "excessPaid": float(result.excess_paid),
        "asOfDate": result.as_of_date.isoformat(),
        "payments": [
            {
                "index": a.index,
                "date": a.date.isoformat(),
                "amount": float(a.amount),
                "months": a.months,
                "interestAccrued": float(a.interest_accrued),
                "appliedToInterest": float(a.applied_to_interest),
                "appliedToPrincipal": float(a.applied_to_principal),
                "excess": float(a.excess),
                "remainingPrincipal": float(a.remaining_principal),
                "remainingInterest": float(a.remaining_interest),
            }
            for a in result.allocations
        ],
    }


def maturity_to_dict(result: MaturityResult) -> Dict[str, Any]:
    """Convert a maturity result into a JSON-serialisable dictionary."""
    return {
        "totalContribution": float(result.total_contribution),
        "bonusAmount": float(result.bonus_amount),
        "maturityAmount": float(result.maturity_amount),
        "maturityDate": result.maturity_date.isoformat() if result.maturity_date else None,
    }


def print_accrual(result: AccrualResult, currency: str = "₹") -> None:
    """Print the loan figures in a human-readable format."""
    print(f"Loan position as of {result.as_of_date.isoformat()}")
    print("-" * 72)
    print(f"Original principal  : {format_currency(result.original_principal, currency)}")
    print(f"Remaining principal : {format_currency(result.remaining_principal, currency)}")
    print(f"Monthly interest    : {format_currency(result.monthly_interest, currency)}")
    print(f"Accrued interest    : {format_currency(result.interest_accrued, currency)} ({result.months_elapsed} months)")
    print(f"Total paid          : {format_currency(result.total_paid, currency)}")
    print(f"Total due           : {format_currency(result.total_due, currency)}")
    if result.excess_paid > 0:
        print(f"Change due          : {format_currency(result.excess_paid, currency)}")
    print(f"Status              : {'Paid in full' if result.paid_in_full else 'Outstanding'}")
    print("-" * 72)


def print_allocations(result: AccrualResult) -> None:
    """Print how each payment was split, in processing order."""
    headers = ["Date", "Amount", "Months", "Accrued", "ToInterest", "ToPrincipal", "Principal", "Interest"]
    print("\t".join(headers))
    for a in result.allocations:
        row = [
            a.date.isoformat(),
            f"{a.amount:.2f}",
            str(a.months),
            f"{a.interest_accrued:.2f}",
            f"{a.applied_to_interest:.2f}",
            f"{a.applied_to_principal:.2f}",
            f"{a.remaining_principal:.2f}",
            f"{a.remaining_interest:.2f}",
        ]
        print("\t".join(row))


def print_quick_payments(amounts: Mapping[int, Decimal], currency: str = "₹") -> None:
    print("Quick payments")
    print("-" * 72)
    for pct, amount in amounts.items():
        print(f"{pct:>3d}%  {format_currency(amount, currency)}")
    print("-" * 72)


def print_maturity(result: MaturityResult, currency: str = "₹") -> None:
    """Print the maturity summary of a savings scheme."""
    print("Maturity Summary")
    print("-" * 72)
    print(f"Total contribution : {format_currency(result.total_contribution, currency)}")
    print(f"Bonus              : {format_currency(result.bonus_amount, currency)}")
    print(f"Maturity amount    : {format_currency(result.maturity_amount, currency)}")
    if result.maturity_date:
        print(f"Maturity date      : {result.maturity_date.strftime('%d/%m/%Y')}")
    print("-" * 72)


def print_installments(installments: Iterable[InstallmentDue], currency: str = "₹") -> None:
    print("\t".join(["#", "Due", "Amount"]))
    for inst in installments:
        print("\t".join([str(inst.index), inst.due_date.strftime("%d/%m/%Y"), format_currency(inst.amount, currency)]))


def export_to_json(path: Path, data: Mapping[str, Any]) -> None:
    """Write an already serialisable mapping to a JSON file."""
    with path.open("w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)


def export_allocations_to_csv(path: Path, result: AccrualResult) -> None:
    """Export the per-payment allocations to a CSV file."""
    header = [
        "Index",
        "Date",
        "Amount",
        "Months",
        "Interest_Accrued",
        "Applied_To_Interest",
        "Applied_To_Principal",
        "Excess",
        "Remaining_Principal",
        "Remaining_Interest",
    ]
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(header)
        for a in result.allocations:
            writer.writerow(
                [
                    a.index,
                    a.date.isoformat(),
                    float(a.amount),
                    a.months,
                    float(a.interest_accrued),
                    float(a.applied_to_interest),
                    float(a.applied_to_principal),
                    float(a.excess),
                    float(a.remaining_principal),
                    float(a.remaining_interest),
                ]
            )
