from __future__ import annotations

"""
Session registry: (asset, instance) → current nonce, and
(asset, instance, nonce) → SessionRecord.

The nonce is the only thing that lets several historical attempts for the same
asset/instance live side by side. It starts at 0 ("never opened") and every
`open()` increments it, so the first attempt is nonce 1.

Undo log
--------
Between `begin()` and `commit()` / `rollback()` the registry keeps a copy of
each record the first time it is handed out, plus the previous nonce of every
pair that was opened. A rollback restores only those entries, so its cost
depends on what the call touched, not on how many sessions exist.
"""

from copy import deepcopy
from typing import Dict, Optional, Tuple

from .errors import PhaseViolation
from .model.session import InstanceId, SessionCore, SessionKey, SessionRecord

PairKey = Tuple[str, InstanceId]


class SessionRegistry:
    def __init__(self) -> None:
        self._nonces: Dict[PairKey, int] = {}
        self._records: Dict[SessionKey, SessionRecord] = {}
        self._undo_records: Optional[Dict[SessionKey, Optional[SessionRecord]]] = None
        self._undo_nonces: Dict[PairKey, int] = {}

    # --- lookups ---

    def current_nonce(self, asset: str, instance: InstanceId) -> int:
        return self._nonces.get((asset, instance), 0)

    def current_key(self, asset: str, instance: InstanceId) -> SessionKey:
        nonce = self.current_nonce(asset, instance)
        if nonce == 0:
            raise PhaseViolation("no session for asset", details={"asset": asset, "instance": instance})
        return SessionKey(asset, instance, nonce)

    def current(self, asset: str, instance: InstanceId) -> Optional[SessionRecord]:
        nonce = self.current_nonce(asset, instance)
        if nonce == 0:
            return None
        return self.get(SessionKey(asset, instance, nonce))

    def get(self, key: SessionKey) -> SessionRecord:
        rec = self._records.get(key)
        if rec is None:
            raise PhaseViolation("unknown session", details={"key": str(key)})
        self._touch(key, rec)
        return rec

    def require_current(self, asset: str, instance: InstanceId) -> SessionRecord:
        return self.get(self.current_key(asset, instance))

    def __len__(self) -> int:
        return len(self._records)

    # --- mutation ---

    def open(self, asset: str, instance: InstanceId, core: SessionCore) -> SessionRecord:
        """Bump the nonce for (asset, instance) and store a fresh record under it."""
        pair = (asset, instance)
        nonce = self.current_nonce(asset, instance) + 1
        key = SessionKey(asset, instance, nonce)
        rec = SessionRecord(key=key, core=core)
        if self._undo_records is not None:
            self._undo_nonces.setdefault(pair, nonce - 1)
            self._undo_records.setdefault(key, None)
        self._nonces[pair] = nonce
        self._records[key] = rec
        return rec

    # --- undo log ---

    def _touch(self, key: SessionKey, rec: SessionRecord) -> None:
        if self._undo_records is not None and key not in self._undo_records:
            self._undo_records[key] = deepcopy(rec)

    def begin(self) -> None:
        self._undo_records = {}
        self._undo_nonces = {}

    def commit(self) -> None:
        self._undo_records = None
        self._undo_nonces = {}

    def rollback(self) -> None:
        if self._undo_records is None:
            return
        for key, saved in self._undo_records.items():
            if saved is None:
                self._records.pop(key, None)
            else:
                self._records[key] = saved
        for pair, nonce in self._undo_nonces.items():
            if nonce == 0:
                self._nonces.pop(pair, None)
            else:
                self._nonces[pair] = nonce
        self.commit()


__all__ = ["SessionRegistry", "PairKey"]
