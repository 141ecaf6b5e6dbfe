"""
database.py
-----------

This module encapsulates all interactions with the underlying SQLite
database used to persist the journal. The journal only needs a simple
get/set-by-string-key blob store, so the database holds a single
key-value table; keeping it here makes it easy to swap the backend (a
JSON file, browser storage bridge, ...) without touching the journal.

Two keys are used: one holding the JSON array of trades and one holding
the id counter as decimal text. Loading never raises: a cold or corrupt
store falls back to an empty journal.
"""

import json
import sqlite3
from typing import List, Optional, Tuple

from .errors import PersistenceError
from .logger import log
from .models import Trade


class KeyValueStore:
    """SQLite-backed string key -> text value store."""

    def __init__(self, db_path: str = "tradelog.db") -> None:
        self.db_path = db_path
        self.conn = sqlite3.connect(self.db_path, check_same_thread=False)
        self._create_tables()

    # ---------- schema ----------
    def _create_tables(self) -> None:
        with self.conn:
            self.conn.execute(
                """
                CREATE TABLE IF NOT EXISTS kv (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                )
                """
            )

    # ---------- access ----------
    def get(self, key: str) -> Optional[str]:
        """Return the stored text for ``key`` or None when absent."""
        try:
            row = self.conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
        except sqlite3.Error as e:
            raise PersistenceError(f"Error reading {key!r}: {e}") from e
        return row[0] if row else None

    def set(self, key: str, value: str) -> None:
        """Insert or replace ``key``."""
        try:
            with self.conn:
                self.conn.execute(
                    """
                    INSERT INTO kv(key, value) VALUES (?, ?)
                    ON CONFLICT(key) DO UPDATE SET value=excluded.value
                    """,
                    (key, value),
                )
        except sqlite3.Error as e:
            raise PersistenceError(f"Error writing {key!r}: {e}") from e

    # ---------- housekeeping ----------
    def close(self) -> None:
        self.conn.close()


def _decode_trades(raw: str) -> List[Trade]:
    data = json.loads(raw)
    if not isinstance(data, list):
        raise ValueError("stored trades are not a list")
    trades = [Trade.from_dict(item) for item in data]
    if len({t.id for t in trades}) != len(trades):
        raise ValueError("stored trades contain duplicate ids")
    return trades


def load_state(store, trades_key: str, next_id_key: str) -> Tuple[List[Trade], int]:
    """Load (trades, next_id) from ``store``.

    Falls back to an empty journal with counter 1 on any read failure or
    corrupt value. A missing counter is derived from the stored trades.
    """
    try:
        raw_trades = store.get(trades_key)
        raw_next_id = store.get(next_id_key)
        trades = _decode_trades(raw_trades) if raw_trades else []
        max_id = max((t.id for t in trades), default=0)
        if raw_next_id is None or raw_next_id.strip() == "":
            next_id = max_id + 1
        else:
            next_id = int(raw_next_id.strip())
    except (PersistenceError, ValueError, KeyError, TypeError) as e:
        log.warning("Error loading data from storage, starting fresh: %s", e)
        return [], 1

    if next_id <= max_id:
        log.warning("Stored next id %d is not above max id %d, repairing", next_id, max_id)
        next_id = max_id + 1

    log.info("Loaded %d trades from storage, next trade ID will be %d", len(trades), next_id)
    return trades, next_id


def save_state(store, trades: List[Trade], next_id: int, trades_key: str, next_id_key: str) -> None:
    """Write both keys. Raises PersistenceError if the store rejects a write."""
    store.set(trades_key, json.dumps([t.to_dict() for t in trades]))
    store.set(next_id_key, str(next_id))
    log.debug("Saved %d trades to storage", len(trades))
