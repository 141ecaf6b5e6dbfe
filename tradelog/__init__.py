"""Personal trading log: trade records, CSV import/export and statistics."""

from .config import JournalConfig
from .errors import (
    EmptyCollectionError,
    HeaderMismatchError,
    JournalError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from .journal import ImportResult, TradeJournal
from .models import Trade

__all__ = [
    "EmptyCollectionError",
    "HeaderMismatchError",
    "ImportResult",
    "JournalConfig",
    "JournalError",
    "NotFoundError",
    "PersistenceError",
    "Trade",
    "TradeJournal",
    "ValidationError",
]
