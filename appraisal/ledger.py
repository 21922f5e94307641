from __future__ import annotations

"""
Participant ledger - principal & profit balances
------------------------------------------------

This module maintains the *internal*, deterministic ledger every session draws
on and pays back into:
  • principal: funds a participant deposited (or had returned by a claim)
    and may stake or withdraw
  • profit: profit shares accrued from sessions, paid out by `claim_profit`

Balances persist across sessions. The ledger is storage-agnostic: call
`dump()` to serialize to a JSON-friendly dict and `load()` to restore.

The session engine brackets each call with `begin()` and `commit()` /
`rollback()`. Inside that window every account is snapshotted the first time
it is touched and the journal length is remembered; a rollback restores those
accounts and truncates the journal, so undo cost tracks the call, not history.

Amounts are integer *base units* (no floats). All operations check:
  • Non-negativity
  • Sufficient balances before debits

Concurrency: a coarse `threading.RLock` protects mutating methods.
"""

from dataclasses import dataclass, field
from threading import RLock
from typing import Dict, Iterable, List, Literal, Optional, Tuple

from .errors import AppraisalError, InsufficientBalance

Amount = int
OpName = Literal[
    "deposit",
    "withdraw",
    "stake",
    "return_principal",
    "accrue_profit",
    "pay_profit",
]


def _ensure_nonneg(x: int, name: str) -> None:
    if x < 0:
        raise AppraisalError(f"{name} must be non-negative, got {x}")


@dataclass
class Account:
    owner: str
    principal: Amount = 0
    profit: Amount = 0
    journal_seq: int = 0

    def snapshot(self) -> Dict:
        return {
            "owner": self.owner,
            "principal": self.principal,
            "profit": self.profit,
            "journal_seq": self.journal_seq,
        }

    @staticmethod
    def restore(d: Dict) -> "Account":
        return Account(
            owner=d["owner"],
            principal=int(d["principal"]),
            profit=int(d["profit"]),
            journal_seq=int(d.get("journal_seq", 0)),
        )

    def _bump_journal(self) -> int:
        self.journal_seq += 1
        return self.journal_seq


@dataclass(frozen=True)
class JournalEntry:
    seq: int
    owner: str
    op: OpName
    amount: Amount
    ts: int
    meta: Dict[str, str] = field(default_factory=dict)
    principal_after: Amount = 0
    profit_after: Amount = 0


class Ledger:
    """
    In-memory principal/profit ledger keyed by participant identity.

    The journal is retained in-memory for observability; `dump()` carries it
    so a restored ledger keeps its history.
    """

    def __init__(self) -> None:
        self._accounts: Dict[str, Account] = {}
        self._journal: List[JournalEntry] = []
        self._lock = RLock()
        self._undo: Optional[Dict[str, Optional[Dict]]] = None
        self._undo_journal_len = 0

    # --- load/save ---

    def dump(self) -> Dict:
        with self._lock:
            return {
                "accounts": {k: v.snapshot() for k, v in sorted(self._accounts.items())},
                "journal": list(self._journal),
            }

    @classmethod
    def load(cls, data: Dict) -> "Ledger":
        led = cls()
        for k, v in data.get("accounts", {}).items():
            led._accounts[k] = Account.restore(v)
        led._journal = list(data.get("journal", []))
        return led

    # --- undo window ---

    def begin(self) -> None:
        with self._lock:
            self._undo = {}
            self._undo_journal_len = len(self._journal)

    def commit(self) -> None:
        with self._lock:
            self._undo = None

    def rollback(self) -> None:
        """Restore every account touched since `begin()` and drop newer journal entries."""
        with self._lock:
            if self._undo is None:
                return
            for owner, snap in self._undo.items():
                if snap is None:
                    self._accounts.pop(owner, None)
                else:
                    self._accounts[owner] = Account.restore(snap)
            del self._journal[self._undo_journal_len:]
            self._undo = None

    # --- introspection ---

    def account(self, owner: str) -> Account:
        with self._lock:
            if self._undo is not None and owner not in self._undo:
                acct = self._accounts.get(owner)
                self._undo[owner] = acct.snapshot() if acct is not None else None
            if owner not in self._accounts:
                self._accounts[owner] = Account(owner=owner)
            return self._accounts[owner]

    def balances(self, owner: str) -> Tuple[Amount, Amount]:
        """Return (principal, profit)."""
        acct = self._accounts.get(owner)
        if acct is None:
            return 0, 0
        return acct.principal, acct.profit

    def total_principal(self) -> Amount:
        return sum(a.principal for a in self._accounts.values())

    def total_profit(self) -> Amount:
        return sum(a.profit for a in self._accounts.values())

    def journal(self, owner: str | None = None) -> Iterable[JournalEntry]:
        if owner is None:
            return tuple(self._journal)
        return tuple(e for e in self._journal if e.owner == owner)

    # --- mutations (all locked) ---

    def _record(self, acct: Account, op: OpName, amount: Amount, ts: int, meta: Dict[str, str]) -> JournalEntry:
        je = JournalEntry(
            seq=acct._bump_journal(),
            owner=acct.owner,
            op=op,
            amount=amount,
            ts=ts,
            meta=meta,
            principal_after=acct.principal,
            profit_after=acct.profit,
        )
        self._journal.append(je)
        return je

    def credit_principal(self, owner: str, amount: Amount, *, ts: int, op: OpName = "deposit", **meta: str) -> JournalEntry:
        _ensure_nonneg(amount, "amount")
        with self._lock:
            acct = self.account(owner)
            acct.principal += amount
            return self._record(acct, op, amount, ts, meta)

    def debit_principal(self, owner: str, amount: Amount, *, ts: int, op: OpName = "withdraw", **meta: str) -> JournalEntry:
        _ensure_nonneg(amount, "amount")
        with self._lock:
            acct = self.account(owner)
            if acct.principal < amount:
                raise InsufficientBalance(
                    "principal balance too low",
                    required=amount,
                    available=acct.principal,
                    account=owner,
                )
            acct.principal -= amount
            return self._record(acct, op, amount, ts, meta)

    def credit_profit(self, owner: str, amount: Amount, *, ts: int, **meta: str) -> JournalEntry:
        _ensure_nonneg(amount, "amount")
        with self._lock:
            acct = self.account(owner)
            acct.profit += amount
            return self._record(acct, "accrue_profit", amount, ts, meta)

    def take_profit(self, owner: str, *, ts: int) -> Amount:
        """Zero the owner's profit balance and return what it held."""
        with self._lock:
            acct = self.account(owner)
            amount = acct.profit
            if amount == 0:
                raise InsufficientBalance("no profit to claim", required=1, available=0, account=owner)
            acct.profit = 0
            self._record(acct, "pay_profit", amount, ts, {})
            return amount


__all__ = ["Account", "JournalEntry", "Ledger"]
