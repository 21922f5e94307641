from __future__ import annotations

"""
Exchange-rate helper: price the reward unit in base currency.

The price of one reward unit rises linearly with the number of units the
treasury has already issued:

    price(issued) = base_price + issued * increment // UNIT

Everything here is pure integer math with truncating division, so quotes are
reproducible across nodes.

Example
-------
>>> curve = ExchangeCurve(base_price=10**15, increment=10**12)
>>> reward_unit_price(0, curve)
1000000000000000
>>> listing_cost(5 * UNIT, 0, curve)
5000000000000000
"""

from .config import ExchangeCurve

UNIT = 10**18  # base units per currency unit (and per reward unit)


def reward_unit_price(issued: int, curve: ExchangeCurve) -> int:
    """Price of one reward unit (base currency units) after `issued` units were issued."""
    if issued < 0:
        raise ValueError("issued must be non-negative")
    return curve.base_price + issued * curve.increment // UNIT


def listing_cost(notional: int, issued: int, curve: ExchangeCurve) -> int:
    """Base-currency cost of a notional amount of reward units (truncated)."""
    if notional < 0:
        raise ValueError("notional must be non-negative")
    return notional * reward_unit_price(issued, curve) // UNIT


def reward_units_for(amount: int, issued: int, curve: ExchangeCurve) -> int:
    """Reward units bought by `amount` base currency at the current price (truncated)."""
    if amount < 0:
        raise ValueError("amount must be non-negative")
    return amount * UNIT // reward_unit_price(issued, curve)


__all__ = ["UNIT", "reward_unit_price", "listing_cost", "reward_units_for"]
