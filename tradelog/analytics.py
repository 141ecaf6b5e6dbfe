"""
analytics.py
-------------

Win-rate and average statistics for the journal. The same five figures
(total PnL, trade count, win rate, average win, average loss) are reported
for every trade and for the scalp and swing segments, chosen by the prefix
of each trade's setup label. Break-even trades count toward the total but
are neither wins nor losses. Everything here is a pure function of the
trade list, so the figures can be recomputed after any command.
"""

import math
from typing import Any, Dict, List

from .models import Trade


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves rounding up (50.5 -> 51)."""
    return int(math.floor(value + 0.5))


def compute_metrics(trades: List[Trade]) -> Dict[str, Any]:
    """Compute performance statistics for the given trades.

    Parameters
    ----------
    trades: List[Trade]
        List of Trade instances for which to compute metrics.

    Returns
    -------
    Dict[str, Any]
        Dictionary of computed metrics. Keys include:
        - total_pnl: float
        - total_trades: int
        - win_rate: int (percentage of trades with pnl > 0)
        - average_win: float
        - average_loss: float (mean absolute loss, reported as positive)
    """
    metrics = {
        "total_pnl": 0.0,
        "total_trades": 0,
        "win_rate": 0,
        "average_win": 0.0,
        "average_loss": 0.0,
    }
    if not trades:
        return metrics

    pnls = [trade.pnl for trade in trades]
    wins = [trade.pnl for trade in trades if trade.is_win]
    losses = [trade.pnl for trade in trades if trade.is_loss]
    total_trades = len(trades)

    metrics.update(
        {
            "total_pnl": sum(pnls),
            "total_trades": total_trades,
            "win_rate": round_half_up(len(wins) / total_trades * 100),
            "average_win": sum(wins) / len(wins) if wins else 0.0,
            "average_loss": abs(sum(losses) / len(losses)) if losses else 0.0,
        }
    )
    return metrics


def compute_stats(
    trades: List[Trade],
    scalp_prefix: str = "Scalp:",
    swing_prefix: str = "Swing:",
) -> Dict[str, Dict[str, Any]]:
    """Metrics for the whole journal and for the scalp and swing segments.

    A trade belongs to a segment when its setup label starts with the
    segment prefix; trades matching neither only count toward ``overall``.
    """
    scalp = [t for t in trades if t.setup.startswith(scalp_prefix)]
    swing = [t for t in trades if t.setup.startswith(swing_prefix)]
    return {
        "overall": compute_metrics(trades),
        "scalp": compute_metrics(scalp),
        "swing": compute_metrics(swing),
    }
