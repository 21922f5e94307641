import pytest

from appraisal.errors import (ArithmeticFault, DeadlineViolation,
                              PhaseViolation)
from appraisal.model.events import SessionClosed
from appraisal.model.vote import VoterStage
from appraisal.tests.conftest import ASSET, INST, MIN, WINDOW


def _harvest(h, *voters):
    return [h.engine.harvest(v, ASSET, INST) for v in voters]


def _claim(h, who):
    return h.engine.claim(who, ASSET, INST)


def test_exact_appraisal_scores_six(h):
    h.open(bounty=10**18)
    h.settle({"alice": (500, MIN)})
    assert _harvest(h, "alice") == [0]
    v = h.vote("alice")
    assert (v.base, v.winner_points, v.amount_harvested) == (6, 6, 0)
    assert h.session()["checks"]["progression"] == "HARVEST_COMPLETE"

    assert _claim(h, "alice") == 0
    assert h.engine.principal_of("alice") == MIN
    assert h.engine.profit_of("alice") == 10**18
    s = h.session()
    assert s["checks"]["progression"] == "CLOSED"
    assert s["core"]["total_session_stake"] == 0
    assert h.vote("alice").stage == VoterStage.CLAIMED
    assert h.conserved()


def test_six_percent_off_loses_one_percent(h):
    h.open()
    assert h.settle({"alice": (493, 16 * MIN), "bob": (530, MIN)}) == 500
    _harvest(h, "alice", "bob")

    alice, bob = h.vote("alice"), h.vote("bob")
    assert (alice.base, alice.winner_points) == (4, 16)
    assert (bob.base, bob.winner_points) == (0, 0)
    assert bob.amount_harvested == MIN // 100

    commission = (MIN // 100) * 500 // 10_000
    assert h.treasury.received("commission") == commission
    assert h.treasury.profit_generated == MIN // 100
    core = h.session()["core"]
    assert core["total_profit"] == MIN // 100 - commission
    assert core["total_session_stake"] == 17 * MIN - commission

    assert _claim(h, "alice") == 1
    assert h.engine.principal_of("alice") == 16 * MIN
    assert h.engine.profit_of("alice") == MIN // 100 - commission
    assert _claim(h, "bob") == 0
    assert h.engine.principal_of("bob") == MIN - MIN // 100
    assert h.engine.profit_of("bob") == 0

    s = h.session()
    assert s["checks"]["progression"] == "CLOSED"
    assert s["core"]["total_session_stake"] == 0
    assert h.events[-1].reason == "complete"
    assert h.conserved()


def test_harvest_phase_checks(h):
    h.open()
    h.commit("alice", 500)
    h.close_voting()
    h.reveal("alice", 500)
    with pytest.raises(PhaseViolation):
        h.engine.harvest("alice", ASSET, INST)
    h.engine.set_final_appraisal("gallery", ASSET, INST)
    with pytest.raises(PhaseViolation):
        h.engine.harvest("stranger", ASSET, INST)
    h.engine.harvest("alice", ASSET, INST)
    with pytest.raises(PhaseViolation):
        h.engine.harvest("alice", ASSET, INST)


def test_claims_wait_for_harvest(h):
    h.open()
    h.settle({"alice": (500, MIN), "bob": (500, MIN)})
    _harvest(h, "alice")
    with pytest.raises(DeadlineViolation):
        _claim(h, "alice")
    with pytest.raises(DeadlineViolation):
        _claim(h, "bob")
    assert h.vote("alice").stage == VoterStage.HARVESTED


def test_claim_after_deadline_forces_close(h):
    h.open()
    h.settle({"alice": (500, MIN), "bob": (500, MIN)})
    _harvest(h, "alice")
    h.clock.advance(2 * WINDOW + 1)
    with pytest.raises(PhaseViolation):
        _claim(h, "bob")  # revealed but never harvested
    assert _claim(h, "alice") == 0
    s = h.session()
    assert s["checks"]["progression"] == "CLOSED"
    closed = h.events[-1]
    assert isinstance(closed, SessionClosed) and closed.reason == "expired"
    # bob's stake was never harvested or claimed; it is swept
    assert closed.treasury_share + closed.caller_fee == MIN
    with pytest.raises(PhaseViolation):
        _claim(h, "bob")
    assert h.conserved()


def test_sybil_threshold_returns_full_stake(h):
    # weight 10 accurate vs weight 1 inaccurate: 10 * 100 // 11 == 90
    h.open()
    assert h.settle({"alice": (497, 100 * MIN), "bob": (530, MIN)}) == 500
    _harvest(h, "alice", "bob")
    assert h.vote("bob").amount_harvested == MIN // 100

    assert _claim(h, "bob") == 1
    assert h.engine.principal_of("bob") == MIN

    # the refunded forfeit is no longer in the pool for the last claimant
    with pytest.raises(ArithmeticFault):
        _claim(h, "alice")
    assert h.vote("alice").stage == VoterStage.HARVESTED
    assert h.engine.principal_of("alice") == 0

    h.clock.advance(2 * WINDOW + 1)
    h.engine.end_session("keeper", ASSET, INST)
    assert h.session()["checks"]["progression"] == "CLOSED"
    assert h.conserved()


def test_forced_close_splits_97_3(h):
    h.open()
    h.settle({"alice": (100, MIN), "bob": (200, 16 * MIN)})
    with pytest.raises(DeadlineViolation):
        h.engine.end_session("keeper", ASSET, INST)
    h.clock.advance(2 * WINDOW + 1)
    h.engine.end_session("keeper", ASSET, INST)

    pool = 17 * MIN
    assert h.treasury.received("sweep") == pool * 97 // 100
    assert h.wallet.balance_of("keeper") == pool - pool * 97 // 100
    assert h.treasury.received("sweep") + h.wallet.balance_of("keeper") == pool
    s = h.session()
    assert s["checks"]["progression"] == "CLOSED"
    assert s["core"]["total_session_stake"] == 0
    assert h.events[-1].reason == "explicit"
    with pytest.raises(PhaseViolation):
        _claim(h, "alice")
    assert h.conserved()


def test_end_session_after_harvest_complete(h):
    h.open()
    h.settle({"alice": (500, MIN)})
    _harvest(h, "alice")
    h.engine.end_session("keeper", ASSET, INST)
    assert h.session()["checks"]["progression"] == "CLOSED"


def test_end_session_requires_settlement(h):
    h.open()
    h.commit("alice", 500)
    h.clock.advance(3 * WINDOW)
    with pytest.raises(PhaseViolation):
        h.engine.end_session("keeper", ASSET, INST)


def test_end_session_on_closed_session_sweeps_nothing(h):
    h.open()
    h.settle({"alice": (500, MIN)})
    _harvest(h, "alice")
    assert _claim(h, "alice") == 0
    received = h.treasury.received()
    h.engine.end_session("keeper", ASSET, INST)
    closed = h.events[-1]
    assert isinstance(closed, SessionClosed)
    assert (closed.reason, closed.treasury_share, closed.caller_fee) == ("explicit", 0, 0)
    assert h.treasury.received() == received
    assert h.wallet.balance_of("keeper") == 0
    assert h.session()["checks"]["progression"] == "CLOSED"
    assert h.conserved()


def test_unsettled_claim_returns_stake(h):
    h.open()
    h.commit("alice", 500)
    h.commit("bob", 500)
    h.clock.advance(2 * WINDOW)
    with pytest.raises(DeadlineViolation):
        _claim(h, "alice")
    h.clock.advance(WINDOW + 1)
    assert _claim(h, "alice") == 0
    assert h.engine.principal_of("alice") == MIN
    assert h.vote("alice").stage == VoterStage.CLAIMED
    closed = h.events[-1]
    assert closed.reason == "expired"
    assert closed.treasury_share == MIN * 97 // 100
    assert h.wallet.balance_of("alice") == MIN - MIN * 97 // 100
    assert h.conserved()
