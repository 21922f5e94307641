from __future__ import annotations

"""
Concealed appraisals (commit/reveal).

A concealment binds an appraisal to the voter's identity and a voter-chosen
secret:

    sha3_256( appraisal as 32-byte big-endian || voter (utf-8) || secret )

Binding the voter identity stops one participant from replaying another's
commitment. The appraisal is fixed-width so that no (appraisal, voter) pair
can be shifted into a different split of the same byte string.
"""

import hashlib
import hmac
from typing import Union

from .errors import ConcealmentMismatch

Secret = Union[bytes, str]

APPRAISAL_WIDTH = 32


def _secret_bytes(secret: Secret) -> bytes:
    if isinstance(secret, str):
        return secret.encode("utf-8")
    return bytes(secret)


def conceal(appraisal: int, voter: str, secret: Secret) -> bytes:
    """Return the 32-byte commitment for (appraisal, voter, secret)."""
    if appraisal < 0 or appraisal >= 1 << (8 * APPRAISAL_WIDTH):
        raise ValueError(f"appraisal out of range: {appraisal}")
    payload = (
        int(appraisal).to_bytes(APPRAISAL_WIDTH, "big")
        + voter.encode("utf-8")
        + _secret_bytes(secret)
    )
    return hashlib.sha3_256(payload).digest()


def verify(concealed: bytes, appraisal: int, voter: str, secret: Secret) -> None:
    """Raise ConcealmentMismatch unless (appraisal, voter, secret) rebuilds `concealed`."""
    try:
        rebuilt = conceal(appraisal, voter, secret)
    except ValueError as e:
        raise ConcealmentMismatch(str(e), details={"voter": voter}) from e
    if not hmac.compare_digest(rebuilt, bytes(concealed)):
        raise ConcealmentMismatch("reveal does not match commitment", details={"voter": voter})


__all__ = ["conceal", "verify", "APPRAISAL_WIDTH"]
