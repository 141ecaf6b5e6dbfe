from __future__ import annotations

import pytest

from conftest import make_trade
from tradelog.analytics import compute_metrics, compute_stats, round_half_up


def test_compute_metrics_empty() -> None:
    assert compute_metrics([]) == {
        "total_pnl": 0.0,
        "total_trades": 0,
        "win_rate": 0,
        "average_win": 0.0,
        "average_loss": 0.0,
    }


def test_compute_stats_segments() -> None:
    trades = [
        make_trade(1, pnl=100, setup="Scalp: W"),
        make_trade(2, pnl=-50, setup="Scalp: T"),
        make_trade(3, pnl=200, setup="Swing: PB"),
    ]
    stats = compute_stats(trades)

    overall = stats["overall"]
    assert overall["total_pnl"] == 250
    assert overall["total_trades"] == 3
    assert overall["win_rate"] == 67
    assert overall["average_win"] == 150
    assert overall["average_loss"] == 50

    scalp = stats["scalp"]
    assert scalp["total_pnl"] == 50
    assert scalp["total_trades"] == 2
    assert scalp["win_rate"] == 50

    swing = stats["swing"]
    assert swing["total_trades"] == 1
    assert swing["win_rate"] == 100
    assert swing["average_loss"] == 0


def test_breakeven_trades_count_but_are_neither_wins_nor_losses() -> None:
    metrics = compute_metrics([make_trade(1, pnl=0), make_trade(2, pnl=30), make_trade(3, pnl=-10)])
    assert metrics["total_trades"] == 3
    assert metrics["win_rate"] == 33
    assert metrics["average_win"] == 30
    assert metrics["average_loss"] == 10


def test_unsegmented_setups_only_count_overall() -> None:
    stats = compute_stats([make_trade(1, setup="Other: X"), make_trade(2, setup="scalp: lower")])
    assert stats["overall"]["total_trades"] == 2
    assert stats["scalp"]["total_trades"] == 0
    assert stats["swing"]["total_trades"] == 0


def test_custom_prefixes() -> None:
    stats = compute_stats([make_trade(1, setup="S/ A")], scalp_prefix="S/", swing_prefix="W/")
    assert stats["scalp"]["total_trades"] == 1


@pytest.mark.parametrize("value, expected", [(12.5, 13), (50.0, 50), (66.666, 67), (0.4, 0)])
def test_round_half_up(value: float, expected: int) -> None:
    assert round_half_up(value) == expected


def test_win_rate_rounds_half_up() -> None:
    trades = [make_trade(1, pnl=1)] + [make_trade(i, pnl=-1) for i in range(2, 9)]
    assert compute_metrics(trades)["win_rate"] == 13


def test_metrics_follow_trade_win_loss_flags() -> None:
    trades = [make_trade(1, pnl=0.0), make_trade(2, pnl=0.01), make_trade(3, pnl=-0.01)]
    flags = [(t.is_win, t.is_loss) for t in trades]
    assert flags == [(False, False), (True, False), (False, True)]
    metrics = compute_metrics(trades)
    assert metrics["average_win"] == 0.01
    assert metrics["average_loss"] == 0.01
    assert metrics["win_rate"] == 33
