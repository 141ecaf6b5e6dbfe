"""
reconcile.py
------------

Merges imported trades into the live journal without id collisions.
"""

from typing import Iterable, List

from .logger import log
from .models import Trade


def merge(trades: List[Trade], incoming: Iterable[Trade], next_id: int) -> int:
    """Append ``incoming`` to ``trades`` in encounter order.

    A record whose id is already taken (by an existing trade or by one
    merged earlier in the same batch) is renumbered to the current counter.
    Otherwise it keeps its id and the counter is moved past it. Existing
    trades are never modified.

    Returns the advanced ``next_id``; afterwards it is strictly greater than
    every id in ``trades``.
    """
    taken = {t.id for t in trades}
    for trade in incoming:
        if trade.id in taken:
            log.info("Imported trade #%d collides, renumbered to #%d", trade.id, next_id)
            trade.id = next_id
            next_id += 1
        elif trade.id >= next_id:
            next_id = trade.id + 1
        taken.add(trade.id)
        trades.append(trade)
    return next_id
