"""Pawn-loan interest accrual and savings maturity calculations."""
