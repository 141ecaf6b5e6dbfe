import logging
import os
from dataclasses import dataclass


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class JournalConfig:
    """All tuneable knobs in one place."""

    # --- persistence ---
    db_path: str = "tradelog.db"
    trades_key: str = "tradingJournalData"       # JSON array of trades
    next_id_key: str = "tradingJournalNextId"    # decimal counter text

    # --- csv schema ---
    schema_version: str = "v1"                   # v1 = 8 fields, v2 adds Ticker
    export_filename: str = "trading_journal.csv"

    # --- validation ---
    strict_rr: bool = True                       # reject malformed R:R instead of flagging it

    # --- statistics segments ---
    scalp_prefix: str = "Scalp:"
    swing_prefix: str = "Swing:"

    # --- web / logging ---
    secret_key: str = "dev-secret"
    log_level: int = logging.INFO

    @classmethod
    def from_env(cls) -> "JournalConfig":
        defaults = cls()
        level = logging.getLevelName(os.getenv("TJ_LOG_LEVEL", "").strip().upper())
        return cls(
            db_path=os.getenv("TJ_DB", defaults.db_path),
            schema_version=os.getenv("TJ_SCHEMA", defaults.schema_version).strip().lower(),
            strict_rr=_env_flag("TJ_STRICT_RR", defaults.strict_rr),
            secret_key=os.getenv("SECRET_KEY", defaults.secret_key),
            log_level=level if isinstance(level, int) else defaults.log_level,
        )
