"""
journal.py
----------

The journal service. A single ``TradeJournal`` owns the trade collection
and the id counter, exposes the command surface used by the presentation
layer (add/edit/delete/clear/export/import/stats) and writes state back to
the key-value store after every mutation.

Destructive commands assume the caller already obtained confirmation.
"""

from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, Dict, List, Mapping, Optional

from .analytics import compute_stats
from .config import JournalConfig
from .csv_codec import CsvSchema, decode, encode, get_schema
from .database import load_state, save_state
from .errors import EmptyCollectionError, NotFoundError, PersistenceError
from .logger import log
from .models import Trade, TradeFields, validate_fields
from .reconcile import merge


@dataclass
class ImportResult:
    imported: int
    skipped: int

    def to_dict(self) -> Dict[str, int]:
        return {"imported": self.imported, "skipped": self.skipped}


class TradeJournal:
    """Owns the trades and the id counter for one user."""

    def __init__(
        self,
        store,
        config: Optional[JournalConfig] = None,
        today: Callable[[], date] = date.today,
    ) -> None:
        self.store = store
        self.config = config or JournalConfig()
        self.schema: CsvSchema = get_schema(self.config.schema_version)
        self._today = today
        self.last_save_error: Optional[str] = None
        self.trades: List[Trade] = []
        self.next_id = 1
        self.load()

    # ---------- persistence ----------
    def load(self) -> None:
        self.trades, self.next_id = load_state(
            self.store, self.config.trades_key, self.config.next_id_key
        )

    def save(self) -> bool:
        """Persist state. A failed write is reported, not raised."""
        try:
            save_state(
                self.store,
                self.trades,
                self.next_id,
                self.config.trades_key,
                self.config.next_id_key,
            )
        except PersistenceError as e:
            log.warning("Error saving data to storage: %s", e)
            self.last_save_error = str(e)
            return False
        self.last_save_error = None
        return True

    # ---------- queries ----------
    def get(self, trade_id: int) -> Trade:
        for trade in self.trades:
            if trade.id == trade_id:
                return trade
        raise NotFoundError(trade_id)

    def list_trades(self) -> List[Trade]:
        """Trades in insertion order."""
        return list(self.trades)

    def list_trades_newest_first(self) -> List[Trade]:
        return sorted(self.trades, key=lambda t: t.id, reverse=True)

    def stats(self) -> Dict[str, Dict[str, Any]]:
        return compute_stats(self.trades, self.config.scalp_prefix, self.config.swing_prefix)

    # ---------- commands ----------
    def validate(self, fields: Mapping[str, Any]) -> TradeFields:
        return validate_fields(
            fields,
            require_ticker=self.schema.has_ticker,
            strict_rr=self.config.strict_rr,
        )

    def add(self, fields: Mapping[str, Any]) -> Trade:
        values = self.validate(fields)
        trade = Trade(
            id=self.next_id,
            date=self._today(),
            setup=values.setup,
            rr=values.rr,
            pnl=values.pnl,
            active_mgmt=values.active_mgmt,
            execution=values.execution,
            note=values.note,
            ticker=values.ticker,
        )
        self.trades.append(trade)
        self.next_id += 1
        self.save()
        log.info("Trade #%d added", trade.id)
        return trade

    def update(self, trade_id: int, fields: Mapping[str, Any]) -> Trade:
        trade = self.get(trade_id)
        values = self.validate(fields)
        trade.setup = values.setup
        trade.rr = values.rr
        trade.pnl = values.pnl
        trade.active_mgmt = values.active_mgmt
        trade.execution = values.execution
        trade.note = values.note
        trade.ticker = values.ticker
        self.save()
        log.info("Trade #%d updated", trade.id)
        return trade

    def add_or_update(self, fields: Mapping[str, Any], trade_id: Optional[int] = None) -> Trade:
        """Create a trade, or replace the editable fields of ``trade_id``."""
        if trade_id is None:
            return self.add(fields)
        return self.update(trade_id, fields)

    def delete(self, trade_id: int) -> Trade:
        trade = self.get(trade_id)
        self.trades.remove(trade)
        self.save()
        log.info("Trade #%d deleted", trade_id)
        return trade

    def clear_all(self) -> None:
        self.trades = []
        self.next_id = 1
        self.save()
        log.info("All data cleared")

    def export_text(self) -> str:
        if not self.trades:
            raise EmptyCollectionError()
        text = encode(self.trades, self.schema)
        log.info("Exported %d trades to CSV", len(self.trades))
        return text

    def import_text(self, text: str) -> ImportResult:
        """Decode ``text`` and merge its rows into the journal.

        Raises HeaderMismatchError (journal unchanged) when the document
        does not start with the expected header.
        """
        decoded = decode(text, self.schema)
        self.next_id = merge(self.trades, decoded.trades, self.next_id)
        self.save()
        result = ImportResult(imported=len(decoded.trades), skipped=decoded.skipped)
        log.info("Import completed: %d imported, %d skipped", result.imported, result.skipped)
        return result
