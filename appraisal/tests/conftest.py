from __future__ import annotations

from typing import Dict, List, Optional

import pytest

from appraisal.clock import ManualClock
from appraisal.commitment import conceal
from appraisal.config import EngineConfig
from appraisal.engine import SessionEngine
from appraisal.model.events import SessionEvent
from appraisal.model.session import SessionKey
from appraisal.payments import Wallet
from appraisal.treasury import InMemoryTreasury

MIN = EngineConfig().stake.min_stake
ASSET = "0xart"
INST = 7
WINDOW = 3600
ORIGINATOR = "gallery"


class Harness:
    """Thin driver around one engine with the bundled wallet/treasury."""

    def __init__(self, engine: SessionEngine, clock: ManualClock, wallet: Wallet, treasury: InMemoryTreasury) -> None:
        self.engine = engine
        self.clock = clock
        self.wallet = wallet
        self.treasury = treasury
        self.funded = 0
        self.events: List[SessionEvent] = []
        engine.subscribe(self.events.append)

    def fund(self, who: str, amount: int, *, deposit: bool = True) -> None:
        self.wallet.fund(who, amount)
        self.funded += amount
        if deposit:
            self.engine.deposit_principal(who, amount)

    def open(self, *, hint: int = 1000, window: int = WINDOW, bounty: int = 0,
             opener: str = ORIGINATOR) -> SessionKey:
        if bounty:
            self.fund(opener, bounty, deposit=False)
        return self.engine.open_session(opener, ASSET, INST, hint, window, value=bounty)

    def commit(self, who: str, appraisal: int, stake: int = MIN, secret: Optional[str] = None) -> None:
        self.fund(who, stake)
        self.engine.commit(who, ASSET, INST, stake, conceal(appraisal, who, secret or who))

    def reveal(self, who: str, appraisal: int, secret: Optional[str] = None) -> int:
        return self.engine.reveal(who, ASSET, INST, appraisal, secret or who)

    def close_voting(self) -> None:
        self.clock.advance(WINDOW)

    def vote(self, who: str):
        return self.engine.vote_of(ASSET, INST, who)

    def session(self) -> Dict:
        return self.engine.session(ASSET, INST)

    def settle(self, votes: Dict[str, tuple]) -> int:
        """Commit {who: (appraisal, stake)}, reveal all, set the final appraisal."""
        for who, (appraisal, stake) in votes.items():
            self.commit(who, appraisal, stake)
        self.close_voting()
        for who, (appraisal, _) in votes.items():
            self.reveal(who, appraisal)
        return self.engine.set_final_appraisal(ORIGINATOR, ASSET, INST)

    def conserved(self) -> bool:
        return self.wallet.total() + self.engine.custody + self.treasury.balance() == self.funded


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def wallet() -> Wallet:
    return Wallet()


@pytest.fixture
def treasury() -> InMemoryTreasury:
    return InMemoryTreasury()


@pytest.fixture
def engine(clock, wallet, treasury) -> SessionEngine:
    return SessionEngine(treasury=treasury, payments=wallet, clock=clock, originator=ORIGINATOR)


@pytest.fixture
def h(engine, clock, wallet, treasury) -> Harness:
    return Harness(engine, clock, wallet, treasury)
