import pytest

from appraisal.config import ExchangeCurve
from appraisal.exchange import UNIT, listing_cost, reward_unit_price, reward_units_for

CURVE = ExchangeCurve(base_price=10**15, increment=10**12)


def test_price_rises_with_issuance():
    assert reward_unit_price(0, CURVE) == 10**15
    assert reward_unit_price(1000 * UNIT, CURVE) == 10**15 + 1000 * 10**12


def test_listing_cost_truncates():
    assert listing_cost(5 * UNIT, 0, CURVE) == 5 * 10**15
    assert listing_cost(1, 0, CURVE) == 0


def test_reward_units_for_amount():
    assert reward_units_for(10**15, 0, CURVE) == UNIT
    assert reward_units_for(0, 0, CURVE) == 0


def test_negative_inputs_rejected():
    with pytest.raises(ValueError):
        reward_unit_price(-1, CURVE)
    with pytest.raises(ValueError):
        listing_cost(-1, 0, CURVE)
    with pytest.raises(ValueError):
        reward_units_for(-1, 0, CURVE)
