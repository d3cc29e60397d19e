"""Exception hierarchy for the pawn calculator."""


class PawnCalcError(Exception):
    """Base exception for all pawn calculator errors."""


class InvalidInputError(PawnCalcError, ValueError):
    """Raised when a loan or scheme record holds malformed values.

    Covers negative monetary fields, non-positive payment amounts and dates
    that cannot be resolved to a calendar date. Subclasses ``ValueError`` so
    callers that already catch parsing errors keep working.
    """


class ConfigurationError(PawnCalcError):
    """Raised when configuration read from the environment is invalid."""


class RecordNotFoundError(PawnCalcError):
    """Raised when a loan or savings scheme id is unknown to the store."""

    def __init__(self, kind: str, record_id: object) -> None:
        super().__init__(f"{kind} {record_id} not found")
        self.kind = kind
        self.record_id = record_id
