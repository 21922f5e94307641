from __future__ import annotations

"""
Scripted end-to-end sessions.

A scenario describes one appraisal session from opening to close-out: who opens
it, with what hint and window, and each voter's stake, appraisal and secret.
`run_scenario()` drives a fresh `SessionEngine` through every phase on a
`ManualClock` with the bundled `Wallet` and `InMemoryTreasury`, and reports
what each participant ended up with.

Scenario files are JSON or YAML:

    asset: "0xart"
    instance: 7
    opener: gallery
    originator: true          # opener is the privileged originator (no listing cost)
    appraisal_hint: 2000
    voting_window: 3600
    bounty: 1000000000000000000
    voters:
      - {name: alice, stake: 5000000000000000, appraisal: 1000, secret: a}
      - {name: bob,   stake: 80000000000000000, appraisal: 1050, secret: b}
      - {name: carol, stake: 5000000000000000, appraisal: 1200, secret: c, reveal: false}

Voters that do not reveal keep their stake in the pool; it is swept at close.
When nobody reveals, the session cannot settle and the first committed voter
claims their stake back after the claim cutoff, force-closing the attempt.
"""

import json
import logging
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import yaml

from .clock import ManualClock
from .commitment import conceal
from .config import EngineConfig
from .engine import SessionEngine
from .model.events import SessionClosed, SessionEvent, VoteClaimed
from .model.session import InstanceId, Progression
from .payments import Wallet
from .treasury import InMemoryTreasury

log = logging.getLogger(__name__)


def _amount(v: Any) -> int:
    if isinstance(v, bool):
        raise ValueError(f"invalid amount: {v!r}")
    if isinstance(v, int):
        return v
    return int(str(v).replace("_", ""))


@dataclass
class VoterSpec:
    name: str
    stake: int
    appraisal: int
    secret: str
    reveal: bool = True

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "VoterSpec":
        return cls(
            name=str(d["name"]),
            stake=_amount(d["stake"]),
            appraisal=_amount(d["appraisal"]),
            secret=str(d.get("secret", d["name"])),
            reveal=bool(d.get("reveal", True)),
        )


@dataclass
class Scenario:
    asset: str
    instance: InstanceId
    opener: str
    appraisal_hint: int
    voting_window: int
    voters: List[VoterSpec]
    bounty: int = 0
    originator: bool = True

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "Scenario":
        voters = [VoterSpec.from_dict(v) for v in d.get("voters", [])]
        if not voters:
            raise ValueError("scenario needs at least one voter")
        names = [v.name for v in voters]
        if len(set(names)) != len(names):
            raise ValueError("voter names must be unique")
        return cls(
            asset=str(d.get("asset", "asset")),
            instance=d.get("instance", 0),
            opener=str(d.get("opener", "opener")),
            appraisal_hint=_amount(d["appraisal_hint"]),
            voting_window=int(d.get("voting_window", 3600)),
            voters=voters,
            bounty=_amount(d.get("bounty", 0)),
            originator=bool(d.get("originator", True)),
        )


def load_scenario(path: str | os.PathLike[str]) -> Scenario:
    p = Path(path)
    text = p.read_text(encoding="utf-8")
    if p.suffix.lower() in (".yaml", ".yml"):
        data = yaml.safe_load(text) or {}
    else:
        data = json.loads(text or "{}")
    return Scenario.from_dict(data)


@dataclass
class VoterOutcome:
    name: str
    stake: int
    appraisal: int
    revealed: bool
    base: int = 0
    harvested: int = 0
    principal_returned: int = 0
    profit: int = 0


@dataclass
class ScenarioResult:
    key: Dict[str, Any]
    final_appraisal: Optional[int]
    listing_fee: int
    voters: List[VoterOutcome] = field(default_factory=list)
    treasury_received: Dict[str, int] = field(default_factory=dict)
    closed_by: Optional[str] = None
    close_reason: Optional[str] = None
    caller_fee: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def run_scenario(scenario: Scenario, cfg: Optional[EngineConfig] = None) -> ScenarioResult:
    """Run one scripted session to completion and summarize the outcome."""
    cfg = cfg or EngineConfig()
    clock = ManualClock()
    wallet = Wallet()
    treasury = InMemoryTreasury()
    engine = SessionEngine(config=cfg, treasury=treasury, payments=wallet, clock=clock)

    events: List[SessionEvent] = []
    engine.subscribe(events.append)

    s = scenario
    if s.originator:
        engine.set_originator(cfg.admin, s.opener)
    fee = 0 if s.originator else engine.listing_cost()
    wallet.fund(s.opener, s.bounty + fee)

    for v in s.voters:
        wallet.fund(v.name, v.stake)
        engine.deposit_principal(v.name, v.stake)

    key = engine.open_session(s.opener, s.asset, s.instance, s.appraisal_hint, s.voting_window, value=s.bounty + fee)
    log.info("scenario: opened %s with %d voters", key, len(s.voters))

    for v in s.voters:
        engine.commit(v.name, s.asset, s.instance, v.stake, conceal(v.appraisal, v.name, v.secret))

    clock.advance(s.voting_window)
    revealers = [v for v in s.voters if v.reveal]
    for v in revealers:
        engine.reveal(v.name, s.asset, s.instance, v.appraisal, v.secret)

    final: Optional[int] = None
    if revealers:
        rec = engine.record(s.asset, s.instance)
        if rec.checks.progression != Progression.REVEAL_COMPLETE:
            clock.advance(s.voting_window + 1)
        final = engine.set_final_appraisal(s.opener, s.asset, s.instance)
        for v in revealers:
            engine.harvest(v.name, s.asset, s.instance)
        for v in revealers:
            if engine.claim(v.name, s.asset, s.instance) == 0:
                break
    else:
        clock.advance(2 * s.voting_window + 1)
        engine.claim(s.voters[0].name, s.asset, s.instance)

    claimed = {ev.voter: ev for ev in events if isinstance(ev, VoteClaimed)}
    closed = next((ev for ev in events if isinstance(ev, SessionClosed)), None)

    result = ScenarioResult(
        key={"asset": key.asset, "instance": key.instance, "nonce": key.nonce},
        final_appraisal=final,
        listing_fee=fee,
        treasury_received={
            memo: treasury.received(memo) for memo in ("listing", "commission", "sweep")
        },
    )
    for v in s.voters:
        vote = engine.vote_of(s.asset, s.instance, v.name)
        c = claimed.get(v.name)
        result.voters.append(
            VoterOutcome(
                name=v.name,
                stake=v.stake,
                appraisal=v.appraisal,
                revealed=v.reveal,
                base=vote.base,
                harvested=vote.amount_harvested,
                principal_returned=c.principal if c else 0,
                profit=c.profit if c else 0,
            )
        )
    if closed is not None:
        result.closed_by = closed.closer
        result.close_reason = closed.reason
        result.caller_fee = closed.caller_fee
    return result


__all__ = [
    "VoterSpec",
    "Scenario",
    "load_scenario",
    "VoterOutcome",
    "ScenarioResult",
    "run_scenario",
]
