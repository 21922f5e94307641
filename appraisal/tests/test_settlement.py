import pytest

from appraisal.errors import ArithmeticFault, DeadlineViolation, PhaseViolation
from appraisal.model.events import FinalAppraisalSet
from appraisal.tests.conftest import ASSET, INST, MIN, ORIGINATOR, WINDOW


def test_weights_one_and_four_settle_at_180(h):
    h.open(hint=1000)
    final = h.settle({"alice": (100, MIN), "bob": (200, 16 * MIN)})
    assert final == 180
    assert h.engine.final_appraisal(ASSET, INST) == 180
    s = h.session()
    assert s["checks"]["progression"] == "CONSENSUS_SET"
    assert s["checks"]["time_final_appraisal_set"] == h.clock()
    assert h.treasury.assets_priced == 1
    ev = h.events[-1]
    assert isinstance(ev, FinalAppraisalSet)
    assert (ev.final_appraisal, ev.participants, ev.total_stake) == (180, 2, 17 * MIN)


def test_second_settlement_rejected(h):
    h.open()
    h.settle({"alice": (500, MIN)})
    with pytest.raises(PhaseViolation):
        h.engine.set_final_appraisal(ORIGINATOR, ASSET, INST)
    assert h.treasury.assets_priced == 1


def test_settlement_waits_for_reveals(h):
    h.open()
    h.commit("alice", 300)
    h.commit("bob", 300)
    h.close_voting()
    h.reveal("alice", 300)
    with pytest.raises(DeadlineViolation):
        h.engine.set_final_appraisal(ORIGINATOR, ASSET, INST)
    h.clock.advance(WINDOW + 1)
    assert h.engine.set_final_appraisal(ORIGINATOR, ASSET, INST) == 300
    assert h.session()["core"]["unique_voters"] == 1


def test_nobody_revealed(h):
    h.open()
    h.commit("alice", 300)
    h.clock.advance(2 * WINDOW + 1)
    with pytest.raises(ArithmeticFault):
        h.engine.set_final_appraisal(ORIGINATOR, ASSET, INST)
    s = h.session()
    assert s["checks"]["progression"] == "COMMITTING"
    assert s["checks"]["time_final_appraisal_set"] == 0
    assert h.treasury.assets_priced == 0
    with pytest.raises(PhaseViolation):
        h.engine.final_appraisal(ASSET, INST)
