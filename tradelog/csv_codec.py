"""
csv_codec.py
------------

Encodes journal trades to delimited text and decodes text back into
trades. The parser is a small hand-written scanner rather than the
``csv`` module so the accepted dialect stays exactly the one the export
produces: fields are quote-wrapped only when they contain a comma, a
double quote or a line break, and internal quotes are doubled.

Decoding is lenient per row and strict per document: a header that does
not match the schema rejects the whole document, while a malformed row is
only counted as skipped.
"""

import math
from dataclasses import dataclass, field
from datetime import date
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

from .errors import HeaderMismatchError
from .logger import log
from .models import Trade


@dataclass(frozen=True)
class CsvSchema:
    """Ordered column layout of one deployed export format."""

    version: str
    columns: Sequence[str]

    @property
    def header(self) -> str:
        return ",".join(self.columns)

    @property
    def has_ticker(self) -> bool:
        return "Ticker" in self.columns


SCHEMA_V1 = CsvSchema("v1", ("ID", "Date", "TradeSetup", "RR", "PnL", "ActiveMgmt", "Execution", "Note"))
SCHEMA_V2 = CsvSchema("v2", ("ID", "Date", "Ticker", "TradeSetup", "RR", "PnL", "ActiveMgmt", "Execution", "Note"))

SCHEMAS: Dict[str, CsvSchema] = {s.version: s for s in (SCHEMA_V1, SCHEMA_V2)}

# The only column allowed to be empty in an imported row
OPTIONAL_COLUMNS = {"Note"}

# Characters that force a field to be quoted
_SPECIAL = (",", '"', "\n", "\r")


def get_schema(version: str) -> CsvSchema:
    try:
        return SCHEMAS[version]
    except KeyError:
        raise ValueError(f"Unknown CSV schema version: {version!r}") from None


@dataclass
class DecodeResult:
    trades: List[Trade] = field(default_factory=list)
    skipped: int = 0


# ---------- encoding ----------

def format_number(value: float) -> str:
    """Render a number in its natural decimal form (100, -50, 1.25)."""
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


def escape_field(value) -> str:
    """Quote a field if it contains a delimiter-significant character."""
    if value is None:
        return ""
    text = str(value)
    if any(ch in text for ch in _SPECIAL):
        return '"' + text.replace('"', '""') + '"'
    return text


_COLUMN_GETTERS: Dict[str, Callable[[Trade], str]] = {
    "ID": lambda t: str(t.id),
    "Date": lambda t: t.date.isoformat(),
    "Ticker": lambda t: t.ticker,
    "TradeSetup": lambda t: t.setup,
    "RR": lambda t: t.rr,
    "PnL": lambda t: format_number(t.pnl),
    "ActiveMgmt": lambda t: t.active_mgmt,
    "Execution": lambda t: t.execution,
    "Note": lambda t: t.note,
}


def encode_trade(trade: Trade, schema: CsvSchema = SCHEMA_V1) -> str:
    return ",".join(escape_field(_COLUMN_GETTERS[col](trade)) for col in schema.columns)


def encode(trades: Iterable[Trade], schema: CsvSchema = SCHEMA_V1) -> str:
    """Encode trades in the given order: header line, then one line per trade."""
    lines = [schema.header]
    lines.extend(encode_trade(t, schema) for t in trades)
    return "\n".join(lines) + "\n"


# ---------- decoding ----------

def _scan(line: str) -> Tuple[List[str], bool]:
    """Split one record into raw field strings, honouring quoted fields.

    A quote at the start of the line or right after a separating comma opens
    quoted mode. Inside quoted mode a doubled quote is one literal quote and
    a quote followed by a comma (or the end of the line) closes the field.
    Outside quoted mode a comma ends the current field.
    """
    fields: List[str] = []
    current: List[str] = []
    in_quotes = False
    n = len(line)
    i = 0
    while i < n:
        ch = line[i]
        nxt = line[i + 1] if i + 1 < n else None
        if in_quotes:
            if ch == '"' and nxt == '"':
                current.append('"')
                i += 1
            elif ch == '"' and (nxt is None or nxt == ","):
                in_quotes = False
            else:
                current.append(ch)
        elif ch == '"' and (i == 0 or line[i - 1] == ","):
            in_quotes = True
        elif ch == ",":
            fields.append("".join(current))
            current = []
        else:
            current.append(ch)
        i += 1
    fields.append("".join(current))
    return fields, in_quotes


def split_line(line: str) -> List[str]:
    return _scan(line)[0]


def _ends_in_quotes(record: str) -> bool:
    return _scan(record)[1]


def _parse_id(text: str) -> Optional[int]:
    if not (text.isascii() and text.isdigit()):
        return None
    value = int(text)
    return value if value >= 1 else None


def _parse_pnl(text: str) -> Optional[float]:
    try:
        value = float(text)
    except ValueError:
        return None
    return value if math.isfinite(value) else None


def _parse_date(text: str) -> Optional[date]:
    try:
        return date.fromisoformat(text)
    except ValueError:
        return None


def decode_line(line: str, schema: CsvSchema = SCHEMA_V1) -> Optional[Trade]:
    """Decode a single record. Returns None when the row must be skipped."""
    raw = split_line(line)
    if len(raw) != len(schema.columns):
        log.debug("Skipping row with %d fields (expected %d)", len(raw), len(schema.columns))
        return None

    row = {}
    for col, value in zip(schema.columns, raw):
        value = value if col == "Note" else value.strip()
        if col not in OPTIONAL_COLUMNS and not value:
            log.debug("Skipping row with empty %s", col)
            return None
        row[col] = value

    trade_id = _parse_id(row["ID"])
    pnl = _parse_pnl(row["PnL"])
    day = _parse_date(row["Date"])
    if trade_id is None or pnl is None or day is None:
        log.debug("Skipping row with unparseable ID/PnL/Date: %r", line)
        return None

    return Trade(
        id=trade_id,
        date=day,
        setup=row["TradeSetup"],
        rr=row["RR"],
        pnl=pnl,
        active_mgmt=row["ActiveMgmt"],
        execution=row["Execution"],
        note=row["Note"],
        ticker=row.get("Ticker", ""),
    )


def iter_records(text: str) -> Iterator[str]:
    """Yield logical records, joining physical lines inside an open quote.

    A record continues onto the next line only when the scanner ends in
    quoted mode; a stray quote inside an unquoted field stays on its line.
    """
    pending: Optional[str] = None
    for physical in text.split("\n"):
        record = physical if pending is None else pending + "\n" + physical
        stripped = record[:-1] if record.endswith("\r") else record
        if _ends_in_quotes(stripped):
            pending = record
            continue
        pending = None
        yield stripped
    if pending is not None:
        yield pending


def decode(text: str, schema: CsvSchema = SCHEMA_V1) -> DecodeResult:
    """Decode a whole document.

    Raises
    ------
    HeaderMismatchError
        If the first non-empty line is not exactly the schema header. No
        rows are decoded in that case.
    """
    records = iter_records(text.lstrip("\ufeff"))
    header = next((r for r in records if r.strip()), None)
    if header is None or header.strip() != schema.header:
        raise HeaderMismatchError(schema.header, found=header)

    result = DecodeResult()
    for record in records:
        if not record.strip():
            continue
        trade = decode_line(record, schema)
        if trade is None:
            result.skipped += 1
        else:
            result.trades.append(trade)
    return result
