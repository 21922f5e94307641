from __future__ import annotations

"""
Appraisal session engine
------------------------

Runs the recurring price-discovery protocol for any number of
(asset, instance) pairs:

    open_session → commit / update_commit → reveal → set_final_appraisal
                 → harvest → claim → (close-out)

Every mutating entry point takes the calling identity first and is:
  • mutually exclusive with every other call (one engine-wide RLock)
  • non-reentrant: a mutating call issued while another one is running, e.g.
    from a payment hook, fails with ReentrancyViolation
  • atomic: engine state and checkpointable collaborators are restored when
    the call raises, and nothing it queued is published

Outgoing transfers are queued while bookkeeping runs and executed only once
the call's bookkeeping is complete. Events, logs and metrics are emitted after
the call commits.

Timeline of one attempt (T = voting window, E = end_time)
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~

    [open, E)        commit / update_commit / add_to_bounty
    [E, ...)         reveal (first reveal after E + T locks the reveal count)
    > E + T          set_final_appraisal even if not everybody revealed
    > S + 2T         claims/end_session may force-close (S = settlement time)
    > E + 3T         a new attempt may replace a stale, unclosed one
"""

import copy
import functools
import logging
from dataclasses import dataclass, field
from threading import RLock
from typing import Any, Callable, List, Optional, Tuple

from . import metrics
from .clock import Clock, system_clock
from .commitment import Secret, verify
from .config import EngineConfig
from .control import ReentrancyGuard
from .errors import (AppraisalError, ArithmeticFault, AuthorizationViolation,
                     DeadlineViolation, InsufficientBalance, PhaseViolation)
from .exchange import listing_cost, reward_units_for
from .interfaces import Checkpointable, PaymentChannel, ScoringModel, Treasury
from .ledger import Ledger
from .model.events import (FinalAppraisalSet, SessionClosed, SessionCreated,
                           SessionEvent, VoteClaimed, VoteCommitted,
                           VoteHarvested, VoteRevealed)
from .model.session import (InstanceId, Progression, SessionCore, SessionKey,
                            SessionRecord)
from .model.vote import Vote, VoterStage
from .registry import SessionRegistry
from .scoring import DefaultScoring
from .weighting import accumulate, vote_weight, weighted_average

log = logging.getLogger(__name__)

BPS_DEN = 10_000
# Fixed cap on accepted appraisals: 69.42% of the opener's hint.
MAX_APPRAISAL_BPS = 6_942
# Close-out sweep: 97% to the treasury, the rest to whoever triggers it.
SWEEP_TREASURY_PCT = 97
# At or above this share of correct weight, losers get their full stake back.
SYBIL_THRESHOLD_PCT = 90

_SCOPE = "engine"


def _checked_sub(a: int, b: int, what: str) -> int:
    c = a - b
    if c < 0:
        raise ArithmeticFault(f"{what} underflow", details={"have": a, "take": b})
    return c


@dataclass
class _Frame:
    """Per-call scratch: time of the call plus everything deferred until commit."""
    caller: str
    now: int
    effects: List[Tuple[str, Callable[[], None]]] = field(default_factory=list)
    events: List[SessionEvent] = field(default_factory=list)


def _mutating(fn: Callable[..., Any]) -> Callable[..., Any]:
    @functools.wraps(fn)
    def wrapper(self: "SessionEngine", caller: str, *args: Any, **kwargs: Any) -> Any:
        with self._lock:
            try:
                self._guard.enter(_SCOPE)
            except AppraisalError as e:
                metrics.record_rejected(e.code)
                log.warning("engine: %s by %s rejected: %s", fn.__name__, caller, e)
                raise
            try:
                return self._run(fn, caller, args, kwargs)
            finally:
                self._guard.exit(_SCOPE)

    return wrapper


class SessionEngine:
    """
    Session state machine plus the participant ledger it settles into.

    Collaborators are injected: a `Treasury`, a `PaymentChannel` used to
    collect attached value and pay participants, and a `ScoringModel`
    (defaults to `DefaultScoring`).
    """

    def __init__(
        self,
        *,
        treasury: Treasury,
        payments: PaymentChannel,
        scoring: Optional[ScoringModel] = None,
        config: Optional[EngineConfig] = None,
        clock: Clock = system_clock,
        originator: Optional[str] = None,
    ) -> None:
        self._cfg = config or EngineConfig()
        self._cfg.validate()
        self._treasury = treasury
        self._payments = payments
        self._scoring = scoring or DefaultScoring()
        self._clock = clock
        self._originator = originator

        self._registry = SessionRegistry()
        self._ledger = Ledger()
        self._custody = 0

        self._lock = RLock()
        self._guard = ReentrancyGuard()
        self._frame: Optional[_Frame] = None
        self._subscribers: List[Callable[[SessionEvent], None]] = []
        self.events: List[SessionEvent] = []

    # ------------------------------------------------------------------ #
    # Call machinery
    # ------------------------------------------------------------------ #

    def _collaborators(self) -> List[Checkpointable]:
        return [c for c in (self._treasury, self._payments) if isinstance(c, Checkpointable)]

    def _checkpoint(self) -> Tuple[Any, ...]:
        # Registry and ledger keep their own undo logs of what the call touches.
        self._registry.begin()
        self._ledger.begin()
        return (
            self._custody,
            self._originator,
            [(c, c.checkpoint()) for c in self._collaborators()],
        )

    def _rollback(self, token: Tuple[Any, ...]) -> None:
        custody, originator, collaborators = token
        self._registry.rollback()
        self._ledger.rollback()
        self._custody = custody
        self._originator = originator
        for collaborator, state in collaborators:
            collaborator.rollback(state)

    def _run(self, fn: Callable[..., Any], caller: str, args: Tuple[Any, ...], kwargs: Any) -> Any:
        frame = _Frame(caller=caller, now=int(self._clock()))
        token = self._checkpoint()
        self._frame = frame
        try:
            result = fn(self, caller, *args, **kwargs)
            for _, effect in frame.effects:
                effect()
            self._registry.commit()
            self._ledger.commit()
        except Exception as e:
            self._rollback(token)
            if isinstance(e, AppraisalError):
                metrics.record_rejected(e.code)
                log.warning("engine: %s by %s rejected: %s", fn.__name__, caller, e)
            raise
        finally:
            self._frame = None
        self._publish(frame.events)
        return result

    def _now(self) -> int:
        assert self._frame is not None
        return self._frame.now

    def _emit(self, event: SessionEvent) -> None:
        assert self._frame is not None
        self._frame.events.append(event)

    def _collect(self, sender: str, amount: int) -> None:
        """Take value attached to the current call into custody."""
        if amount > 0:
            self._payments.charge(sender, amount)
            self._custody += amount

    def _pay(self, recipient: str, amount: int) -> None:
        if amount <= 0:
            return
        assert self._frame is not None
        self._custody = _checked_sub(self._custody, amount, "custody")

        def effect() -> None:
            self._payments.transfer(recipient, amount)

        self._frame.effects.append(("pay", effect))

    def _pay_treasury(self, amount: int, memo: str) -> None:
        if amount <= 0:
            return
        assert self._frame is not None
        self._custody = _checked_sub(self._custody, amount, "custody")

        def effect() -> None:
            self._treasury.receive(amount, memo=memo)

        self._frame.effects.append(("treasury", effect))

    def _notify(self, name: str, effect: Callable[[], None]) -> None:
        """Queue a treasury notification behind the call's bookkeeping."""
        assert self._frame is not None
        self._frame.effects.append((name, effect))

    def _publish(self, events: List[SessionEvent]) -> None:
        for ev in events:
            self.events.append(ev)
            _observe(ev)
            for cb in list(self._subscribers):
                cb(ev)

    def subscribe(self, callback: Callable[[SessionEvent], None]) -> None:
        """Receive every event published after a call commits."""
        self._subscribers.append(callback)

    # ------------------------------------------------------------------ #
    # Read-only views
    # ------------------------------------------------------------------ #

    @property
    def config(self) -> EngineConfig:
        return self._cfg

    @property
    def originator(self) -> Optional[str]:
        return self._originator

    @property
    def custody(self) -> int:
        """Base currency currently held by the engine."""
        return self._custody

    def current_nonce(self, asset: str, instance: InstanceId) -> int:
        return self._registry.current_nonce(asset, instance)

    def _record(self, asset: str, instance: InstanceId, nonce: Optional[int]) -> SessionRecord:
        if nonce is None:
            return self._registry.require_current(asset, instance)
        return self._registry.get(SessionKey(asset, instance, nonce))

    def record(self, asset: str, instance: InstanceId, nonce: Optional[int] = None) -> SessionRecord:
        """Detached copy of a session record (current attempt by default)."""
        with self._lock:
            return copy.deepcopy(self._record(asset, instance, nonce))

    def session(self, asset: str, instance: InstanceId, nonce: Optional[int] = None) -> dict:
        with self._lock:
            return self._record(asset, instance, nonce).snapshot()

    def vote_of(self, asset: str, instance: InstanceId, voter: str, nonce: Optional[int] = None) -> Vote:
        with self._lock:
            v = self._record(asset, instance, nonce).votes.get(voter)
            return copy.deepcopy(v) if v is not None else Vote()

    def voter_stage(self, asset: str, instance: InstanceId, voter: str, nonce: Optional[int] = None) -> VoterStage:
        return self.vote_of(asset, instance, voter, nonce).stage

    def final_appraisal(self, asset: str, instance: InstanceId, nonce: Optional[int] = None) -> int:
        with self._lock:
            rec = self._record(asset, instance, nonce)
            if not rec.checks.settled:
                raise PhaseViolation("final appraisal not set", actual=rec.checks.progression.name)
            return rec.final_appraisal

    def principal_of(self, owner: str) -> int:
        return self._ledger.balances(owner)[0]

    def profit_of(self, owner: str) -> int:
        return self._ledger.balances(owner)[1]

    @property
    def ledger(self) -> Ledger:
        return self._ledger

    def listing_cost(self) -> int:
        """Quote: base currency a non-originator must attach to open a session."""
        return listing_cost(
            self._cfg.listing.notional,
            self._treasury.reward_units_issued(),
            self._cfg.exchange,
        )

    # ------------------------------------------------------------------ #
    # Administration & participant accounts
    # ------------------------------------------------------------------ #

    @_mutating
    def set_originator(self, caller: str, originator: Optional[str]) -> None:
        """Designate the privileged originator (exempt from the listing cost)."""
        if caller != self._cfg.admin:
            raise AuthorizationViolation("only the admin may set the originator", caller=caller)
        self._originator = originator

    @_mutating
    def deposit_principal(self, caller: str, value: int) -> int:
        if value <= 0:
            raise InsufficientBalance("deposit must be positive", required=1, available=value, account=caller)
        self._collect(caller, value)
        return self._ledger.credit_principal(caller, value, ts=self._now()).principal_after

    @_mutating
    def withdraw_principal(self, caller: str, amount: int) -> int:
        if amount <= 0:
            raise InsufficientBalance("withdrawal must be positive", required=1, available=amount, account=caller)
        entry = self._ledger.debit_principal(caller, amount, ts=self._now())
        self._pay(caller, amount)
        return entry.principal_after

    @_mutating
    def claim_profit(self, caller: str) -> int:
        """Pay out accrued profit and issue reward units for it at the current price."""
        amount = self._ledger.take_profit(caller, ts=self._now())
        units = reward_units_for(amount, self._treasury.reward_units_issued(), self._cfg.exchange)
        self._pay(caller, amount)
        if units > 0:
            self._notify("reward", lambda: self._treasury.send_reward(caller, units))
        return amount

    # ------------------------------------------------------------------ #
    # Session registry
    # ------------------------------------------------------------------ #

    @_mutating
    def open_session(
        self,
        caller: str,
        asset: str,
        instance: InstanceId,
        appraisal_hint: int,
        voting_window: int,
        value: int = 0,
    ) -> SessionKey:
        now = self._now()
        max_window = self._cfg.window.max_voting_window_s
        if not (0 < voting_window <= max_window):
            raise DeadlineViolation(
                "voting window must be positive and at most one day",
                details={"voting_window": voting_window, "max": max_window},
            )
        if appraisal_hint < 0 or value < 0:
            raise ValueError("appraisal hint and attached value must be non-negative")

        prior = self._registry.current(asset, instance)
        stale = False
        if prior is not None and prior.checks.progression != Progression.CLOSED:
            if now <= prior.core.stale_after():
                raise PhaseViolation(
                    "previous session is still live",
                    actual=prior.checks.progression.name,
                    details={"key": str(prior.key)},
                )
            stale = True

        fee = 0 if caller == self._originator else self.listing_cost()
        if value < fee:
            raise InsufficientBalance("listing cost not covered", required=fee, available=value, account=caller)

        self._collect(caller, value)
        if stale:
            assert prior is not None
            self._close(prior, reason="reopened")
        self._pay_treasury(fee, memo="listing")

        core = SessionCore(
            end_time=now + voting_window,
            bounty=value - fee,
            max_appraisal=appraisal_hint * MAX_APPRAISAL_BPS // BPS_DEN,
            voting_time=voting_window,
        )
        rec = self._registry.open(asset, instance, core)
        self._emit(
            SessionCreated(
                asset=asset,
                instance=instance,
                nonce=rec.key.nonce,
                ts=now,
                creator=caller,
                end_time=core.end_time,
                bounty=core.bounty,
                max_appraisal=core.max_appraisal,
            )
        )
        return rec.key

    @_mutating
    def add_to_bounty(self, caller: str, asset: str, instance: InstanceId, value: int) -> int:
        rec = self._registry.require_current(asset, instance)
        if rec.checks.progression == Progression.CLOSED:
            raise PhaseViolation("session is closed", actual=rec.checks.progression.name)
        if self._now() >= rec.core.end_time:
            raise DeadlineViolation("voting has ended", now=self._now(), boundary=rec.core.end_time)
        if value <= 0:
            raise InsufficientBalance("bounty top-up must be positive", required=1, available=value, account=caller)
        self._collect(caller, value)
        rec.core.bounty += value
        return rec.core.bounty

    # ------------------------------------------------------------------ #
    # Commit-reveal voting
    # ------------------------------------------------------------------ #

    @_mutating
    def commit(self, caller: str, asset: str, instance: InstanceId, stake: int, concealed: bytes) -> None:
        now = self._now()
        rec = self._registry.require_current(asset, instance)
        existing = rec.votes.get(caller)
        if existing is not None and existing.stage != VoterStage.NONE:
            raise PhaseViolation("voter already committed", expected="NONE", actual=existing.stage.name)
        min_stake = self._cfg.stake.min_stake
        if stake < min_stake:
            raise InsufficientBalance("stake below minimum", required=min_stake, available=stake, account=caller)
        if now >= rec.core.end_time:
            raise DeadlineViolation("voting has ended", now=now, boundary=rec.core.end_time)
        if len(concealed) != 32:
            raise ValueError("concealed appraisal must be a 32-byte commitment")

        self._ledger.debit_principal(caller, stake, ts=now, op="stake", session=str(rec.key))

        vote = rec.vote(caller)
        vote.concealed = bytes(concealed)
        vote.stake = stake
        vote.advance(VoterStage.COMMITTED)

        core = rec.core
        core.lowest_stake = min(core.lowest_stake, stake)
        core.unique_voters += 1
        core.total_session_stake += stake
        self._emit(
            VoteCommitted(
                asset=asset, instance=instance, nonce=rec.key.nonce, ts=now, voter=caller, stake=stake
            )
        )

    @_mutating
    def update_commit(self, caller: str, asset: str, instance: InstanceId, concealed: bytes) -> None:
        now = self._now()
        rec = self._registry.require_current(asset, instance)
        vote = rec.votes.get(caller) or Vote()
        vote.require(VoterStage.COMMITTED)
        if now >= rec.core.end_time:
            raise DeadlineViolation("voting has ended", now=now, boundary=rec.core.end_time)
        if len(concealed) != 32:
            raise ValueError("concealed appraisal must be a 32-byte commitment")
        vote.concealed = bytes(concealed)

    @_mutating
    def reveal(self, caller: str, asset: str, instance: InstanceId, appraisal: int, secret: Secret) -> int:
        """Reveal a committed appraisal; returns the weight it was counted with."""
        now = self._now()
        rec = self._registry.require_current(asset, instance)
        core, checks = rec.core, rec.checks
        vote = rec.votes.get(caller) or Vote()
        vote.require(VoterStage.COMMITTED)
        if now < core.end_time:
            raise DeadlineViolation("reveal opens at the voting deadline", now=now, boundary=core.end_time)
        if checks.progression >= Progression.REVEAL_COMPLETE:
            raise PhaseViolation("reveal phase is over", actual=checks.progression.name)
        verify(vote.concealed, appraisal, caller, secret)
        if appraisal > core.max_appraisal:
            raise PhaseViolation(
                "appraisal above session cap",
                details={"appraisal": appraisal, "max_appraisal": core.max_appraisal},
            )

        if checks.progression == Progression.COMMITTING:
            checks.progression = Progression.REVEALING
        vote.appraisal = appraisal
        vote.advance(VoterStage.REVEALED)

        weight = vote_weight(vote.stake, core.lowest_stake)
        accumulate(core, weight, appraisal)
        checks.calls += 1
        if checks.calls == core.unique_voters or now > core.reveal_cutoff():
            core.unique_voters = checks.calls
            checks.calls = 0
            checks.progression = Progression.REVEAL_COMPLETE

        self._emit(
            VoteRevealed(
                asset=asset,
                instance=instance,
                nonce=rec.key.nonce,
                ts=now,
                voter=caller,
                appraisal=appraisal,
                weight=weight,
            )
        )
        return weight

    # ------------------------------------------------------------------ #
    # Consensus settlement
    # ------------------------------------------------------------------ #

    @_mutating
    def set_final_appraisal(self, caller: str, asset: str, instance: InstanceId) -> int:
        now = self._now()
        rec = self._registry.require_current(asset, instance)
        core, checks = rec.core, rec.checks
        if checks.progression >= Progression.CONSENSUS_SET:
            raise PhaseViolation("final appraisal already set", actual=checks.progression.name)
        if checks.progression != Progression.REVEAL_COMPLETE and now <= core.reveal_cutoff():
            raise DeadlineViolation(
                "reveals still open", now=now, boundary=core.reveal_cutoff()
            )
        final = weighted_average(core.total_appraisal_value, core.total_votes)

        self._notify("asset_priced", self._treasury.notify_asset_priced)
        if checks.calls != 0:
            core.unique_voters = checks.calls
            checks.calls = 0
        core.total_profit += core.bounty
        core.total_session_stake += core.bounty
        rec.final_appraisal = final
        checks.time_final_appraisal_set = now
        checks.progression = Progression.CONSENSUS_SET

        self._emit(
            FinalAppraisalSet(
                asset=asset,
                instance=instance,
                nonce=rec.key.nonce,
                ts=now,
                final_appraisal=final,
                participants=core.unique_voters,
                total_stake=core.total_session_stake,
            )
        )
        return final

    # ------------------------------------------------------------------ #
    # Harvest & scoring
    # ------------------------------------------------------------------ #

    @_mutating
    def harvest(self, caller: str, asset: str, instance: InstanceId) -> int:
        """Score the caller's revealed appraisal; returns the amount harvested from them."""
        now = self._now()
        rec = self._registry.require_current(asset, instance)
        core, checks = rec.core, rec.checks
        if checks.progression != Progression.CONSENSUS_SET:
            raise PhaseViolation("harvest requires consensus", expected="CONSENSUS_SET",
                                 actual=checks.progression.name)
        vote = rec.votes.get(caller) or Vote()
        vote.require(VoterStage.REVEALED)
        vote.advance(VoterStage.HARVESTED)

        weight = vote_weight(vote.stake, core.lowest_stake)
        base = self._scoring.score_base(rec.final_appraisal, vote.appraisal)
        vote.base = base
        harvested = commission = 0
        if base > 0:
            vote.winner_points = base * weight
            core.total_winner_points += vote.winner_points
            checks.correct += weight
        else:
            checks.incorrect += weight
            harvested = self._scoring.harvest_loss(vote.stake, vote.appraisal, rec.final_appraisal)
            vote.amount_harvested = harvested
            if harvested > 0:
                rate = self._scoring.commission_rate(self._treasury.balance())
                commission = harvested * rate // BPS_DEN
                core.total_profit += harvested - commission
                core.total_session_stake = _checked_sub(core.total_session_stake, commission, "stake pool")
                self._pay_treasury(commission, memo="commission")
                self._notify("profit_generated", lambda: self._treasury.notify_profit_generated(harvested))

        checks.calls += 1
        if checks.calls == core.unique_voters:
            checks.progression = Progression.HARVEST_COMPLETE
            checks.calls = 0

        self._emit(
            VoteHarvested(
                asset=asset,
                instance=instance,
                nonce=rec.key.nonce,
                ts=now,
                voter=caller,
                base=base,
                winner_points=vote.winner_points,
                amount_harvested=harvested,
                commission=commission,
            )
        )
        return harvested

    # ------------------------------------------------------------------ #
    # Claim & close-out
    # ------------------------------------------------------------------ #

    @_mutating
    def claim(self, caller: str, asset: str, instance: InstanceId) -> int:
        """
        Return the caller's principal and profit share to their ledger account.

        Returns 0 when this claim closed the session, 1 while claims are pending.
        """
        now = self._now()
        rec = self._registry.require_current(asset, instance)
        core, checks = rec.core, rec.checks
        if checks.progression == Progression.CLOSED:
            raise PhaseViolation("session is closed", actual=checks.progression.name)
        deadline = rec.claim_deadline()
        if checks.progression < Progression.HARVEST_COMPLETE and now <= deadline:
            raise DeadlineViolation("claims not open yet", now=now, boundary=deadline)

        vote = rec.votes.get(caller) or Vote()
        if checks.settled:
            vote.require(VoterStage.HARVESTED)
        elif vote.stage not in (VoterStage.COMMITTED, VoterStage.REVEALED):
            raise PhaseViolation("voter holds no stake in this session", actual=vote.stage.name)

        if checks.progression == Progression.CONSENSUS_SET:
            checks.progression = Progression.HARVEST_COMPLETE
            checks.calls = 0
        # Unscored voters walk through the remaining stages with nothing harvested.
        while vote.stage < VoterStage.CLAIMED:
            vote.advance(VoterStage(int(vote.stage) + 1))

        weight_total = checks.correct + checks.incorrect
        if weight_total > 0 and checks.correct * 100 // weight_total >= SYBIL_THRESHOLD_PCT:
            principal = vote.stake
        else:
            principal = vote.stake - vote.amount_harvested
        profit = 0
        if vote.winner_points > 0:
            profit = core.total_profit * vote.winner_points // core.total_winner_points

        core.total_profit = _checked_sub(core.total_profit, profit, "session profit")
        core.total_session_stake = _checked_sub(core.total_session_stake, principal + profit, "stake pool")
        core.total_winner_points -= vote.winner_points
        vote.winner_points = 0

        self._ledger.credit_principal(caller, principal, ts=now, op="return_principal", session=str(rec.key))
        if profit > 0:
            self._ledger.credit_profit(caller, profit, ts=now, session=str(rec.key))
        self._emit(
            VoteClaimed(
                asset=asset,
                instance=instance,
                nonce=rec.key.nonce,
                ts=now,
                voter=caller,
                principal=principal,
                profit=profit,
            )
        )

        checks.calls += 1
        if checks.calls == core.unique_voters:
            self._close(rec, reason="complete")
            return 0
        if now > deadline:
            self._close(rec, reason="expired")
            return 0
        return 1

    @_mutating
    def end_session(self, caller: str, asset: str, instance: InstanceId) -> None:
        """Close a settled session; on an already closed one this is an empty sweep."""
        now = self._now()
        rec = self._registry.require_current(asset, instance)
        checks = rec.checks
        if not checks.settled:
            raise PhaseViolation("session was never settled", actual=checks.progression.name)
        deadline = rec.claim_deadline()
        if checks.progression < Progression.HARVEST_COMPLETE and now <= deadline:
            raise DeadlineViolation("session cannot be ended yet", now=now, boundary=deadline)
        self._close(rec, reason="explicit")

    def _close(self, rec: SessionRecord, *, reason: str) -> None:
        """Mark CLOSED and sweep the stake pool: 97% treasury, remainder to the caller."""
        assert self._frame is not None
        core, checks = rec.core, rec.checks
        if not checks.settled and checks.progression != Progression.CLOSED:
            core.total_session_stake += core.bounty
        checks.progression = Progression.CLOSED

        pool = core.total_session_stake
        treasury_share = pool * SWEEP_TREASURY_PCT // 100
        caller_fee = pool - treasury_share
        core.total_session_stake = 0
        core.total_profit = 0

        self._pay_treasury(treasury_share, memo="sweep")
        self._pay(self._frame.caller, caller_fee)
        self._emit(
            SessionClosed(
                asset=rec.key.asset,
                instance=rec.key.instance,
                nonce=rec.key.nonce,
                ts=self._frame.now,
                closer=self._frame.caller,
                treasury_share=treasury_share,
                caller_fee=caller_fee,
                reason=reason,
            )
        )


def _observe(ev: SessionEvent) -> None:
    """Log and count a committed event."""
    if isinstance(ev, SessionCreated):
        metrics.record_session_opened()
        log.info("engine: session %s opened by %s (end=%d bounty=%d cap=%d)",
                 ev.key, ev.creator, ev.end_time, ev.bounty, ev.max_appraisal)
    elif isinstance(ev, VoteCommitted):
        metrics.record_commit()
        log.debug("engine: %s committed stake=%d in %s", ev.voter, ev.stake, ev.key)
    elif isinstance(ev, VoteRevealed):
        metrics.record_reveal()
        log.debug("engine: %s revealed %d (weight=%d) in %s", ev.voter, ev.appraisal, ev.weight, ev.key)
    elif isinstance(ev, FinalAppraisalSet):
        metrics.record_settled()
        log.info("engine: session %s settled at %d (participants=%d stake=%d)",
                 ev.key, ev.final_appraisal, ev.participants, ev.total_stake)
    elif isinstance(ev, VoteHarvested):
        metrics.record_harvest(ev.base > 0, ev.amount_harvested)
        log.debug("engine: %s harvested in %s base=%d points=%d loss=%d",
                  ev.voter, ev.key, ev.base, ev.winner_points, ev.amount_harvested)
    elif isinstance(ev, VoteClaimed):
        metrics.record_claim(ev.principal + ev.profit)
        log.debug("engine: %s claimed principal=%d profit=%d from %s",
                  ev.voter, ev.principal, ev.profit, ev.key)
    elif isinstance(ev, SessionClosed):
        metrics.record_closed(ev.reason)
        level = logging.INFO if ev.reason in ("complete", "explicit") else logging.WARNING
        log.log(level, "engine: session %s closed (%s) by %s: treasury=%d fee=%d",
                ev.key, ev.reason, ev.closer, ev.treasury_share, ev.caller_fee)


__all__ = [
    "MAX_APPRAISAL_BPS",
    "SWEEP_TREASURY_PCT",
    "SYBIL_THRESHOLD_PCT",
    "SessionEngine",
]
