from __future__ import annotations

"""
Wallet - reference payment channel
----------------------------------

Holds the external (outside-the-engine) currency balance of every participant.
The engine `charge()`s it for value attached to a call and `transfer()`s out
of it when paying participants.

Recipients may register an `on_receive` hook that runs when funds arrive,
standing in for recipient-side code. A hook can call back into the engine; if
it raises, the incoming credit is reverted and the transfer fails with
`TransferFailed`, which in turn aborts the paying call.
"""

from typing import Callable, Dict, Set

from .errors import InsufficientBalance, TransferFailed

ReceiveHook = Callable[[str, int], None]


class Wallet:
    def __init__(self) -> None:
        self._balances: Dict[str, int] = {}
        self._hooks: Dict[str, ReceiveHook] = {}
        self._refusing: Set[str] = set()

    # --- setup ---

    def fund(self, owner: str, amount: int) -> int:
        if amount < 0:
            raise ValueError("amount must be non-negative")
        self._balances[owner] = self._balances.get(owner, 0) + amount
        return self._balances[owner]

    def on_receive(self, owner: str, hook: ReceiveHook | None) -> None:
        if hook is None:
            self._hooks.pop(owner, None)
        else:
            self._hooks[owner] = hook

    def refuse(self, owner: str, refusing: bool = True) -> None:
        if refusing:
            self._refusing.add(owner)
        else:
            self._refusing.discard(owner)

    def balance_of(self, owner: str) -> int:
        return self._balances.get(owner, 0)

    def total(self) -> int:
        return sum(self._balances.values())

    # --- PaymentChannel protocol ---

    def charge(self, sender: str, amount: int) -> None:
        have = self._balances.get(sender, 0)
        if have < amount:
            raise InsufficientBalance("wallet balance too low", required=amount, available=have, account=sender)
        self._balances[sender] = have - amount

    def transfer(self, recipient: str, amount: int) -> None:
        if recipient in self._refusing:
            raise TransferFailed("recipient refused transfer", recipient=recipient, amount=amount)
        self._balances[recipient] = self._balances.get(recipient, 0) + amount
        hook = self._hooks.get(recipient)
        if hook is None:
            return
        try:
            hook(recipient, amount)
        except Exception as e:
            self._balances[recipient] -= amount
            raise TransferFailed("recipient hook failed", recipient=recipient, amount=amount) from e

    # --- Checkpointable ---

    def checkpoint(self) -> Dict[str, int]:
        return dict(self._balances)

    def rollback(self, token: Dict[str, int]) -> None:
        self._balances = dict(token)


__all__ = ["Wallet", "ReceiveHook"]
