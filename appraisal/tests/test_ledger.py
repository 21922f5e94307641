import pytest

from appraisal.errors import AppraisalError, InsufficientBalance
from appraisal.ledger import Ledger


def test_deposit_stake_and_return():
    led = Ledger()
    e = led.credit_principal("alice", 100, ts=1)
    assert e.principal_after == 100 and e.op == "deposit"
    led.debit_principal("alice", 60, ts=2, op="stake", session="x/1#1")
    assert led.balances("alice") == (40, 0)
    led.credit_principal("alice", 60, ts=3, op="return_principal")
    assert led.balances("alice") == (100, 0)
    assert [j.op for j in led.journal("alice")] == ["deposit", "stake", "return_principal"]
    assert led.journal("alice")[1].meta == {"session": "x/1#1"}


def test_overdraw_rejected():
    led = Ledger()
    led.credit_principal("alice", 10, ts=1)
    with pytest.raises(InsufficientBalance) as ei:
        led.debit_principal("alice", 11, ts=2)
    assert ei.value.to_dict()["details"]["available"] == 10
    assert led.balances("alice") == (10, 0)


def test_negative_amounts_rejected():
    led = Ledger()
    with pytest.raises(AppraisalError):
        led.credit_principal("alice", -1, ts=1)


def test_profit_take_zeroes_balance():
    led = Ledger()
    led.credit_profit("bob", 7, ts=1)
    led.credit_profit("bob", 3, ts=2)
    assert led.take_profit("bob", ts=3) == 10
    assert led.balances("bob") == (0, 0)
    with pytest.raises(InsufficientBalance):
        led.take_profit("bob", ts=4)


def test_dump_load_round_trip():
    led = Ledger()
    led.credit_principal("a", 5, ts=1)
    led.credit_profit("b", 9, ts=1)
    restored = Ledger.load(led.dump())
    assert restored.balances("a") == (5, 0)
    assert restored.balances("b") == (0, 9)
    assert restored.total_principal() == 5
    assert restored.total_profit() == 9
    assert len(restored.journal()) == 2


def test_rollback_restores_touched_accounts_and_journal():
    led = Ledger()
    led.credit_principal("a", 5, ts=1)
    led.credit_principal("c", 1, ts=1)
    led.begin()
    led.debit_principal("a", 5, ts=2, op="stake")
    led.credit_profit("b", 3, ts=2)
    led.rollback()
    assert led.balances("a") == (5, 0)
    assert led.balances("b") == (0, 0)
    assert led.balances("c") == (1, 0)
    assert [j.op for j in led.journal()] == ["deposit", "deposit"]
    assert led.account("a").journal_seq == 1
    assert led.total_principal() == 6


def test_commit_closes_undo_window():
    led = Ledger()
    led.begin()
    led.credit_principal("a", 5, ts=1)
    led.commit()
    led.rollback()
    assert led.balances("a") == (5, 0)
    assert len(led.journal()) == 1
