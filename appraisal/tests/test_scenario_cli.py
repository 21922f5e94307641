import json

import pytest
import yaml
from typer.testing import CliRunner

from appraisal.cli.simulate import app
from appraisal.scenario import Scenario, load_scenario, run_scenario
from appraisal.tests.conftest import MIN

runner = CliRunner()

BASE = {
    "asset": "0xart",
    "instance": 3,
    "opener": "gallery",
    "appraisal_hint": 1000,
    "voting_window": 600,
    "voters": [
        {"name": "alice", "stake": 16 * MIN, "appraisal": 493, "secret": "a"},
        {"name": "bob", "stake": MIN, "appraisal": 530, "secret": "b"},
    ],
}


def _scenario(**over):
    d = json.loads(json.dumps(BASE))
    d.update(over)
    return Scenario.from_dict(d)


def test_full_session_outcome():
    res = run_scenario(_scenario())
    assert res.final_appraisal == 500
    assert res.listing_fee == 0
    alice, bob = res.voters
    assert (alice.base, alice.principal_returned) == (4, 16 * MIN)
    commission = (MIN // 100) * 500 // 10_000
    assert alice.profit == MIN // 100 - commission
    assert (bob.base, bob.harvested) == (0, MIN // 100)
    assert bob.principal_returned == MIN - MIN // 100
    assert res.treasury_received == {"listing": 0, "commission": commission, "sweep": 0}
    assert (res.close_reason, res.closed_by, res.caller_fee) == ("complete", "bob", 0)


def test_listing_fee_for_non_originator():
    res = run_scenario(_scenario(originator=False))
    assert res.listing_fee == 5 * 10**15
    assert res.treasury_received["listing"] == 5 * 10**15


def test_unrevealed_stake_is_swept():
    d = json.loads(json.dumps(BASE))
    d["voters"][1]["reveal"] = False
    res = run_scenario(Scenario.from_dict(d))
    assert res.final_appraisal == 493
    assert res.voters[1].revealed is False
    assert res.voters[1].principal_returned == 0
    assert res.treasury_received["sweep"] == MIN * 97 // 100
    assert res.caller_fee == MIN - MIN * 97 // 100


def test_nobody_reveals():
    d = json.loads(json.dumps(BASE))
    for v in d["voters"]:
        v["reveal"] = False
    res = run_scenario(Scenario.from_dict(d))
    assert res.final_appraisal is None
    assert res.voters[0].principal_returned == 16 * MIN
    assert res.close_reason == "expired"


def test_scenario_validation():
    with pytest.raises(ValueError):
        Scenario.from_dict({"appraisal_hint": 1, "voters": []})
    dup = json.loads(json.dumps(BASE))
    dup["voters"][1]["name"] = "alice"
    with pytest.raises(ValueError):
        Scenario.from_dict(dup)


def test_load_yaml_scenario(tmp_path):
    p = tmp_path / "s.yaml"
    p.write_text(yaml.safe_dump(BASE), encoding="utf-8")
    s = load_scenario(p)
    assert s.instance == 3
    assert [v.name for v in s.voters] == ["alice", "bob"]


def test_cli_run_json(tmp_path):
    p = tmp_path / "s.json"
    p.write_text(json.dumps(BASE), encoding="utf-8")
    result = runner.invoke(app, ["run", str(p), "--json"])
    assert result.exit_code == 0, result.output
    data = json.loads(result.stdout)
    assert data["final_appraisal"] == 500
    assert data["close_reason"] == "complete"


def test_cli_run_table(tmp_path):
    p = tmp_path / "s.yaml"
    p.write_text(yaml.safe_dump(BASE), encoding="utf-8")
    result = runner.invoke(app, ["run", str(p)])
    assert result.exit_code == 0, result.output
    assert "final appraisal: 500" in result.stdout
    assert "alice" in result.stdout


def test_cli_run_engine_error(tmp_path):
    d = json.loads(json.dumps(BASE))
    d["voters"][0]["stake"] = 1
    p = tmp_path / "bad.json"
    p.write_text(json.dumps(d), encoding="utf-8")
    result = runner.invoke(app, ["run", str(p)])
    assert result.exit_code == 1


def test_cli_config(monkeypatch):
    monkeypatch.delenv("APPRAISAL_CONFIG_FILE", raising=False)
    monkeypatch.setenv("APPRAISAL_ADMIN", "ops")
    result = runner.invoke(app, ["config"])
    assert result.exit_code == 0
    assert json.loads(result.stdout)["admin"] == "ops"
