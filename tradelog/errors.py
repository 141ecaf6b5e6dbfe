"""
errors.py
---------

Exception types raised by the journal core. Every failure in the core is
either recovered locally (falling back to an empty journal) or surfaced to
the caller as one of these, so the presentation layer can map them to
messages or HTTP status codes without inspecting strings.
"""

from typing import Optional


class JournalError(Exception):
    """Base class for all journal errors."""


class ValidationError(JournalError):
    """Trade input failed validation; nothing was changed."""

    def __init__(self, message: str, field: Optional[str] = None) -> None:
        super().__init__(message)
        self.field = field


class NotFoundError(JournalError):
    """Edit or delete referenced an id that is not in the journal."""

    def __init__(self, trade_id: int) -> None:
        super().__init__(f"Trade #{trade_id} not found")
        self.trade_id = trade_id


class HeaderMismatchError(JournalError):
    """Import document does not start with the expected header line."""

    def __init__(self, expected: str, found: Optional[str] = None) -> None:
        super().__init__(f"Invalid CSV header. Expected: {expected}")
        self.expected = expected
        self.found = found


class EmptyCollectionError(JournalError):
    """Export was requested on an empty journal."""

    def __init__(self) -> None:
        super().__init__("No trades to export")


class PersistenceError(JournalError):
    """The key-value store rejected a read or write."""
