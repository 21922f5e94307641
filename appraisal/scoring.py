from __future__ import annotations

"""
Reference scoring model: accuracy score, harvested loss, commission rate.

Design goals
------------
- Pure & deterministic: No IO, all integer math.
- Thresholds are inclusive and computed by cross-multiplication, so there is
  no rounding at the band edges (1% off is still a 5).

Score bands (margin of the appraisal relative to consensus)
-----------------------------------------------------------
    exact      → 6
    ≤ 1%       → 5
    ≤ 2%       → 4
    ≤ 3%       → 3
    ≤ 4%       → 2
    ≤ 5%       → 1
    beyond 5%  → 0  (incorrect; stake is harvested)

Harvested loss
--------------
    loss = (margin_bps − 500) * stake // 10_000, clamped to [0, stake]

Commission (basis points of harvested amounts, by treasury balance in whole
currency units)
---------------------------------------------------------------------------
    < 25 → 500, < 50 → 400, < 100 → 300, < 500 → 200, < 1000 → 100, else 50
"""


from dataclasses import dataclass
from typing import Tuple

from .exchange import UNIT

BPS_DEN = 10_000  # basis points denominator (100.00%)

WINDOW_PCT = 5  # beyond this margin a vote is incorrect

DEFAULT_COMMISSION_TIERS: Tuple[Tuple[int, int], ...] = (
    (25 * UNIT, 500),
    (50 * UNIT, 400),
    (100 * UNIT, 300),
    (500 * UNIT, 200),
    (1000 * UNIT, 100),
)
DEFAULT_COMMISSION_FLOOR_BPS = 50


def within_pct(final_appraisal: int, appraisal: int, pct: int) -> bool:
    """True when `appraisal` lies within ±pct% of `final_appraisal` (inclusive)."""
    return (
        appraisal * 100 <= final_appraisal * (100 + pct)
        and appraisal * 100 >= final_appraisal * (100 - pct)
    )


def margin_bps(final_appraisal: int, appraisal: int) -> int:
    """Absolute distance from consensus in basis points of consensus (truncated)."""
    if final_appraisal == 0:
        return 0 if appraisal == 0 else BPS_DEN * BPS_DEN
    return abs(appraisal - final_appraisal) * BPS_DEN // final_appraisal


@dataclass(frozen=True)
class DefaultScoring:
    commission_tiers: Tuple[Tuple[int, int], ...] = DEFAULT_COMMISSION_TIERS
    commission_floor_bps: int = DEFAULT_COMMISSION_FLOOR_BPS

    def score_base(self, final_appraisal: int, appraisal: int) -> int:
        if appraisal == final_appraisal:
            return 6
        for pct in range(1, WINDOW_PCT + 1):
            if within_pct(final_appraisal, appraisal, pct):
                return 6 - pct
        return 0

    def harvest_loss(self, stake: int, appraisal: int, final_appraisal: int) -> int:
        if within_pct(final_appraisal, appraisal, WINDOW_PCT):
            return 0
        excess = margin_bps(final_appraisal, appraisal) - WINDOW_PCT * 100
        if excess <= 0:
            return 0
        return min(stake, excess * stake // BPS_DEN)

    def commission_rate(self, treasury_balance: int) -> int:
        for upper, bps in self.commission_tiers:
            if treasury_balance < upper:
                return bps
        return self.commission_floor_bps


__all__ = [
    "BPS_DEN",
    "WINDOW_PCT",
    "DEFAULT_COMMISSION_TIERS",
    "DEFAULT_COMMISSION_FLOOR_BPS",
    "within_pct",
    "margin_bps",
    "DefaultScoring",
]
