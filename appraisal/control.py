# -*- coding: utf-8 -*-
"""
appraisal.control
=================

Non-reentrancy latch for the session engine.

A latch is keyed by a *scope* tag. Typical pattern:

    guard.enter("engine")
    try:
        # critical section
        ...
    finally:
        guard.exit("engine")

If a latch is already entered for a scope, the next `enter` raises
`ReentrancyViolation`. Latches are per guard instance (one per engine), never
process-global.
"""
from __future__ import annotations

from typing import Set

from .errors import ReentrancyViolation

__all__ = ["ReentrancyGuard", "DEFAULT_SCOPE"]

DEFAULT_SCOPE = "default"


class ReentrancyGuard:
    def __init__(self) -> None:
        self._entered: Set[str] = set()

    def require_not_entered(self, scope: str = DEFAULT_SCOPE) -> None:
        """
        Raise if the latch for `scope` is already entered.
        """
        if scope in self._entered:
            raise ReentrancyViolation("reentrant call rejected", details={"scope": scope})

    def enter(self, scope: str = DEFAULT_SCOPE) -> None:
        """
        Enter a non-reentrant section for `scope`. Raises if already entered.
        """
        self.require_not_entered(scope)
        self._entered.add(scope)

    def exit(self, scope: str = DEFAULT_SCOPE) -> None:
        """
        Exit a non-reentrant section for `scope`. Idempotent.
        """
        self._entered.discard(scope)
