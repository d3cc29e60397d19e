"""Configuration for the pawn calculator.

Settings are read from environment variables so the CLI and the web API can
be configured the same way on a workstation or in a container.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Mapping, Optional, Tuple

from .exceptions import ConfigurationError

DEFAULT_DATABASE_URL = "sqlite:///pawn_calc.sqlite3"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _parse_percentages(raw: str) -> Tuple[int, ...]:
    try:
        values = tuple(int(p.strip()) for p in raw.split(",") if p.strip())
    except ValueError as exc:
        raise ConfigurationError(f"Invalid quick-pay percentages: {raw!r}") from exc
    if not values or any(v <= 0 or v > 100 for v in values):
        raise ConfigurationError(f"Quick-pay percentages must be between 1 and 100: {raw!r}")
    return values


@dataclass
class Settings:
    """Runtime settings."""

    currency: str = "₹"
    log_level: str = "INFO"
    database_url: str = DEFAULT_DATABASE_URL
    quick_pay_percentages: Tuple[int, ...] = field(default_factory=lambda: (25, 50, 75, 100))

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """Create settings from ``PAWN_CALC_*`` environment variables."""
        env = os.environ if environ is None else environ

        log_level = env.get("PAWN_CALC_LOG_LEVEL", "INFO").upper()
        if log_level not in LOG_LEVELS:
            raise ConfigurationError(f"Unknown log level: {log_level}")

        return cls(
            currency=env.get("PAWN_CALC_CURRENCY", "₹"),
            log_level=log_level,
            database_url=env.get("PAWN_CALC_DATABASE_URL", DEFAULT_DATABASE_URL),
            quick_pay_percentages=_parse_percentages(env.get("PAWN_CALC_QUICK_PAY", "25,50,75,100")),
        )
