from __future__ import annotations

"""
Voting weight and weighted-average aggregation.

A voter's weight is the integer square root of how many "lowest stakes" their
stake covers:

    weight = isqrt(stake // lowest_stake)

so sixteen times the lowest stake buys four votes, not sixteen. Weights are
whole numbers of equivalent unit votes; a stake smaller than the lowest stake
cannot occur once commits close, so every revealed voter carries weight ≥ 1.
"""

from math import isqrt

from .errors import ArithmeticFault
from .model.session import SessionCore


def vote_weight(stake: int, lowest_stake: int) -> int:
    if lowest_stake <= 0:
        raise ArithmeticFault("lowest stake must be positive", details={"lowest_stake": lowest_stake})
    return isqrt(stake // lowest_stake)


def accumulate(core: SessionCore, weight: int, appraisal: int) -> None:
    """Fold one revealed appraisal into the running weighted totals."""
    core.total_appraisal_value += weight * appraisal
    core.total_votes += weight


def weighted_average(total_appraisal_value: int, total_votes: int) -> int:
    """Truncating weighted average; no revealed weight is an arithmetic fault."""
    if total_votes == 0:
        raise ArithmeticFault("no revealed votes to average", details={"total_votes": 0})
    return total_appraisal_value // total_votes


__all__ = ["vote_weight", "accumulate", "weighted_average"]
