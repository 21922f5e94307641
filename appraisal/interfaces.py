"""
Engine ⇄ Collaborator Interfaces
================================

Narrow, stable protocols the session engine uses to talk to the components
that live outside of it:

  • Treasury      : custodies swept funds and commissions, issues the reward
                  unit, and keeps protocol-wide counters
  • ScoringModel  : turns an appraisal-vs-consensus margin into a discrete
                  score, a harvested loss, and a commission rate
  • PaymentChannel: collects value attached to a call and pays recipients

Bundled reference implementations: `appraisal.treasury.InMemoryTreasury`,
`appraisal.scoring.DefaultScoring`, `appraisal.payments.Wallet`.

Collaborators that can undo their own side effects also implement
`Checkpointable`; the engine checkpoints them before every call and rolls them
back if the call fails.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class Treasury(Protocol):
    def send_reward(self, recipient: str, amount: int) -> None:
        """Issue `amount` reward units to `recipient`."""
        ...

    def reward_units_issued(self) -> int:
        """Total reward units issued so far (drives the exchange curve)."""
        ...

    def notify_asset_priced(self) -> None:
        ...

    def notify_profit_generated(self, amount: int) -> None:
        ...

    def receive(self, amount: int, *, memo: str) -> None:
        """Accept a fund transfer (commission, sweep, listing fee)."""
        ...

    def balance(self) -> int:
        ...


@runtime_checkable
class ScoringModel(Protocol):
    def score_base(self, final_appraisal: int, appraisal: int) -> int:
        """Discrete accuracy score in 0..6."""
        ...

    def harvest_loss(self, stake: int, appraisal: int, final_appraisal: int) -> int:
        ...

    def commission_rate(self, treasury_balance: int) -> int:
        """Commission on harvested amounts, in basis points."""
        ...


@runtime_checkable
class PaymentChannel(Protocol):
    def charge(self, sender: str, amount: int) -> None:
        """Collect value attached to a call; raises InsufficientBalance."""
        ...

    def transfer(self, recipient: str, amount: int) -> None:
        """Pay `recipient`; raises TransferFailed when refused."""
        ...


@runtime_checkable
class Checkpointable(Protocol):
    def checkpoint(self) -> Any:
        ...

    def rollback(self, token: Any) -> None:
        ...


__all__ = ["Treasury", "ScoringModel", "PaymentChannel", "Checkpointable"]
