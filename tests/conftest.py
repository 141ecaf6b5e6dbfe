from __future__ import annotations

from datetime import date

import pytest

from tradelog.config import JournalConfig
from tradelog.errors import PersistenceError
from tradelog.journal import TradeJournal
from tradelog.models import Trade


class DictStore:
    """In-memory stand-in for the key-value store."""

    def __init__(self, data=None):
        self.data = dict(data or {})

    def get(self, key):
        return self.data.get(key)

    def set(self, key, value):
        self.data[key] = value


class FailingStore(DictStore):
    def set(self, key, value):
        raise PersistenceError("quota exceeded")


TODAY = date(2026, 3, 14)


def make_trade(trade_id: int = 1, pnl: float = 100.0, setup: str = "Scalp: W", **kwargs) -> Trade:
    values = dict(
        id=trade_id,
        date=date(2026, 1, 2),
        setup=setup,
        rr="1.5:1",
        pnl=pnl,
        active_mgmt="+EV",
        execution="A",
        note="",
    )
    values.update(kwargs)
    return Trade(**values)


def trade_input(**overrides) -> dict:
    fields = {
        "setup": "Scalp: W",
        "rr": "2:1",
        "pnl": "125.5",
        "active_mgmt": "+EV",
        "execution": "A",
        "note": "clean breakout",
    }
    fields.update(overrides)
    return fields


@pytest.fixture
def store() -> DictStore:
    return DictStore()


@pytest.fixture
def config() -> JournalConfig:
    return JournalConfig()


@pytest.fixture
def journal(store: DictStore, config: JournalConfig) -> TradeJournal:
    return TradeJournal(store, config, today=lambda: TODAY)
