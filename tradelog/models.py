"""
models.py
---------

Defines the core data model for a trade. A trade is one logged position
outcome in the user's journal. Keeping this in a separate module lets the
codec, the storage layer and the analytics share one definition, and keeps
input validation next to the fields it validates.
"""

import math
import re
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, Mapping, Optional

from .errors import ValidationError
from .logger import log

# R:R pattern: one or more digits, optional decimal part, colon, then 1
RR_PATTERN = re.compile(r"^\d+(\.\d+)?:1$")

# Human readable names used in validation messages
FIELD_LABELS = {
    "setup": "trade setup",
    "ticker": "ticker",
    "rr": "risk reward",
    "pnl": "pnl",
    "active_mgmt": "active management",
    "execution": "execution",
}


@dataclass
class Trade:
    """Represents a single journal entry.

    Attributes
    ----------
    id: int
        Positive identifier, unique within the journal.
    date: date
        Calendar day the trade was logged. Only the create path sets it.
    setup: str
        Free-text category label, by convention ``Scalp: ...`` or
        ``Swing: ...`` followed by a strategy code.
    rr: str
        Risk:reward text in the form ``X:1``. Stored verbatim.
    pnl: float
        Signed profit or loss in currency units. Always finite.
    active_mgmt: str
        Grade of discretionary in-trade management (opaque text).
    execution: str
        Execution grade, conventionally A/B/C.
    note: str
        Optional free text; may contain commas, quotes and newlines.
    ticker: str
        Traded instrument. Only required by the ticker schema.
    """

    id: int
    date: date
    setup: str
    rr: str
    pnl: float
    active_mgmt: str
    execution: str
    note: str = ""
    ticker: str = ""

    @property
    def is_win(self) -> bool:
        return self.pnl > 0

    @property
    def is_loss(self) -> bool:
        return self.pnl < 0

    def to_dict(self) -> Dict[str, Any]:
        """Convert trade to the stored array-of-records form."""
        return {
            "id": self.id,
            "date": self.date.isoformat(),
            "tradeSetup": self.setup,
            "rr": self.rr,
            "pnl": self.pnl,
            "activeMgmt": self.active_mgmt,
            "execution": self.execution,
            "note": self.note,
            "ticker": self.ticker,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Trade":
        """Create Trade from its stored form.

        Raises KeyError, TypeError or ValueError on malformed input so the
        caller can decide how to recover.
        """
        trade_id = data["id"]
        if isinstance(trade_id, bool) or not isinstance(trade_id, int) or trade_id < 1:
            raise ValueError(f"invalid trade id: {trade_id!r}")
        pnl = float(data["pnl"])
        if not math.isfinite(pnl):
            raise ValueError(f"non-finite pnl for trade #{trade_id}")
        return cls(
            id=trade_id,
            date=date.fromisoformat(data["date"]),
            setup=str(data["tradeSetup"]),
            rr=str(data["rr"]),
            pnl=pnl,
            active_mgmt=str(data["activeMgmt"]),
            execution=str(data["execution"]),
            note=str(data.get("note") or ""),
            ticker=str(data.get("ticker") or ""),
        )


@dataclass(frozen=True)
class TradeFields:
    """Validated, user-editable trade fields (everything except id and date)."""

    setup: str
    rr: str
    pnl: float
    active_mgmt: str
    execution: str
    note: str = ""
    ticker: str = ""


def is_valid_rr(text: str) -> bool:
    """Return True if ``text`` looks like ``<positive decimal>:1``."""
    value = text.strip()
    if not RR_PATTERN.match(value):
        return False
    return float(value.split(":", 1)[0]) > 0


def parse_pnl(value: Any) -> Optional[float]:
    """Parse a PnL value, returning None unless it is a finite number."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).strip()
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    return number if math.isfinite(number) else None


def _text(fields: Mapping[str, Any], name: str) -> str:
    value = fields.get(name)
    if value is None:
        return ""
    return str(value).strip()


def validate_fields(
    fields: Mapping[str, Any],
    require_ticker: bool = False,
    strict_rr: bool = True,
) -> TradeFields:
    """Validate raw form input and return cleaned trade fields.

    Parameters
    ----------
    fields: Mapping[str, Any]
        Raw input keyed by ``setup``, ``ticker``, ``rr``, ``pnl``,
        ``active_mgmt``, ``execution`` and ``note``.
    require_ticker: bool
        Whether the active schema makes ticker a required field.
    strict_rr: bool
        Reject a malformed R:R value instead of only logging it.

    Raises
    ------
    ValidationError
        On the first missing required field, an unparseable PnL or (with
        ``strict_rr``) a malformed R:R value.
    """
    required = ["setup", "rr", "pnl", "active_mgmt", "execution"]
    if require_ticker:
        required.insert(1, "ticker")

    for name in required:
        if not _text(fields, name):
            raise ValidationError(f"Please fill in the {FIELD_LABELS[name]} field", field=name)

    pnl = parse_pnl(fields.get("pnl"))
    if pnl is None:
        raise ValidationError("PnL must be a valid number", field="pnl")

    rr = _text(fields, "rr")
    if not is_valid_rr(rr):
        if strict_rr:
            raise ValidationError("Format must be X:1 (e.g., 1:1, 1.5:1, 2.3:1)", field="rr")
        log.warning("Accepting R:R value %r that does not match X:1", rr)

    return TradeFields(
        setup=_text(fields, "setup"),
        rr=rr,
        pnl=pnl,
        active_mgmt=_text(fields, "active_mgmt"),
        execution=_text(fields, "execution"),
        note=_text(fields, "note"),
        ticker=_text(fields, "ticker"),
    )
