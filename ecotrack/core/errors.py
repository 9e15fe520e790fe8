"""Core errors.

Bad numeric input is never an error (it is clamped to zero), so only two
fault classes exist.
"""


class StateInvariantViolation(ValueError):
    """Raised when a ledger or weekly window would break its invariants.

    This signals a programming error or corrupted persisted state; it is never
    recovered from inside the core.
    """


class ExportError(RuntimeError):
    """Raised by an export sink that cannot deliver a report."""
