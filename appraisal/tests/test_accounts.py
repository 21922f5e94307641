import pytest

from appraisal.errors import InsufficientBalance
from appraisal.exchange import UNIT
from appraisal.tests.conftest import ASSET, INST, MIN


def test_deposit_and_withdraw(h):
    h.fund("alice", 10 * MIN)
    assert h.engine.principal_of("alice") == 10 * MIN
    assert h.engine.withdraw_principal("alice", 4 * MIN) == 6 * MIN
    assert h.wallet.balance_of("alice") == 4 * MIN
    with pytest.raises(InsufficientBalance):
        h.engine.withdraw_principal("alice", 7 * MIN)
    assert h.engine.custody == 6 * MIN
    assert h.conserved()


def test_deposit_needs_funds(h):
    with pytest.raises(InsufficientBalance):
        h.engine.deposit_principal("alice", 0)
    h.wallet.fund("alice", 5)
    with pytest.raises(InsufficientBalance):
        h.engine.deposit_principal("alice", 6)
    assert h.wallet.balance_of("alice") == 5
    assert h.engine.principal_of("alice") == 0


def test_claim_profit_issues_reward_units(h):
    h.open(bounty=UNIT)
    h.settle({"alice": (500, MIN)})
    h.engine.harvest("alice", ASSET, INST)
    h.engine.claim("alice", ASSET, INST)

    assert h.engine.claim_profit("alice") == UNIT
    assert h.wallet.balance_of("alice") == UNIT
    assert h.engine.profit_of("alice") == 0
    # 1 currency unit buys 1000 reward units at the opening price of 0.001
    assert h.treasury.reward_balance("alice") == 1000 * UNIT
    assert h.treasury.reward_units_issued() == 1000 * UNIT
    # issuance moved the price to 0.002, doubling the listing cost
    assert h.engine.listing_cost() == 10**16
    with pytest.raises(InsufficientBalance):
        h.engine.claim_profit("alice")
    assert h.conserved()


def test_claimed_principal_can_be_restaked_or_withdrawn(h):
    h.open()
    h.settle({"alice": (500, MIN)})
    h.engine.harvest("alice", ASSET, INST)
    h.engine.claim("alice", ASSET, INST)
    assert h.engine.withdraw_principal("alice", MIN) == 0
    assert h.wallet.balance_of("alice") == MIN
    ops = [e.op for e in h.engine.ledger.journal("alice")]
    assert ops == ["deposit", "stake", "return_principal", "withdraw"]
