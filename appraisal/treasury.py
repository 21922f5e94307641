from __future__ import annotations

"""
In-memory treasury
------------------

Reference implementation of the `Treasury` collaborator. It:
  • custodies base currency sent to it (listing fees, commissions, sweeps)
  • issues the reward unit to participants and tracks total issuance
  • counts priced assets and profit generated across all sessions

State is serializable with `dump()` / `load()`. `checkpoint()` / `rollback()`
let the session engine undo a failed call; receipts are truncated back rather
than copied.

Setting `accepting = False` makes every incoming transfer fail, which is how
tests exercise the engine's fail-closed transfer path.
"""

from dataclasses import asdict, dataclass, field
from typing import Dict, List, Tuple

from .errors import TransferFailed


@dataclass
class Receipt:
    amount: int
    memo: str


@dataclass
class TreasuryBook:
    balance: int = 0
    units_issued: int = 0
    assets_priced: int = 0
    profit_generated: int = 0
    reward_balances: Dict[str, int] = field(default_factory=dict)
    receipts: List[Receipt] = field(default_factory=list)


class InMemoryTreasury:
    def __init__(self, address: str = "treasury") -> None:
        self.address = address
        self.accepting = True
        self._book = TreasuryBook()

    # --- Treasury protocol ---

    def send_reward(self, recipient: str, amount: int) -> None:
        if amount < 0:
            raise ValueError("reward amount must be non-negative")
        bal = self._book.reward_balances
        bal[recipient] = bal.get(recipient, 0) + amount
        self._book.units_issued += amount

    def reward_units_issued(self) -> int:
        return self._book.units_issued

    def notify_asset_priced(self) -> None:
        self._book.assets_priced += 1

    def notify_profit_generated(self, amount: int) -> None:
        self._book.profit_generated += amount

    def receive(self, amount: int, *, memo: str) -> None:
        if not self.accepting:
            raise TransferFailed("treasury refused transfer", recipient=self.address, amount=amount)
        self._book.balance += amount
        self._book.receipts.append(Receipt(amount=amount, memo=memo))

    def balance(self) -> int:
        return self._book.balance

    # --- introspection ---

    @property
    def assets_priced(self) -> int:
        return self._book.assets_priced

    @property
    def profit_generated(self) -> int:
        return self._book.profit_generated

    def reward_balance(self, owner: str) -> int:
        return self._book.reward_balances.get(owner, 0)

    def received(self, memo: str | None = None) -> int:
        """Total received, optionally only for one memo tag."""
        return sum(r.amount for r in self._book.receipts if memo is None or r.memo == memo)

    # --- load/save ---

    def dump(self) -> Dict:
        return asdict(self._book)

    @classmethod
    def load(cls, data: Dict, address: str = "treasury") -> "InMemoryTreasury":
        t = cls(address)
        t._book = _book_from_dict(data)
        return t

    def checkpoint(self) -> Tuple[int, int, int, int, Dict[str, int], int]:
        b = self._book
        return (b.balance, b.units_issued, b.assets_priced, b.profit_generated,
                dict(b.reward_balances), len(b.receipts))

    def rollback(self, token: Tuple[int, int, int, int, Dict[str, int], int]) -> None:
        b = self._book
        b.balance, b.units_issued, b.assets_priced, b.profit_generated, rewards, n = token
        b.reward_balances = dict(rewards)
        del b.receipts[n:]


def _book_from_dict(d: Dict) -> TreasuryBook:
    return TreasuryBook(
        balance=int(d.get("balance", 0)),
        units_issued=int(d.get("units_issued", 0)),
        assets_priced=int(d.get("assets_priced", 0)),
        profit_generated=int(d.get("profit_generated", 0)),
        reward_balances={k: int(v) for k, v in d.get("reward_balances", {}).items()},
        receipts=[Receipt(amount=int(r["amount"]), memo=str(r["memo"])) for r in d.get("receipts", [])],
    )


__all__ = ["Receipt", "TreasuryBook", "InMemoryTreasury"]
