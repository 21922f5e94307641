from __future__ import annotations

"""
Per-voter records.

A voter's stage only ever moves forward by exactly one step:

    NONE → COMMITTED → REVEALED → HARVESTED → CLAIMED

`Vote.advance()` enforces that; the engine never assigns `stage` directly.
"""

from dataclasses import asdict, dataclass
from enum import IntEnum
from typing import Any, Dict

from ..errors import PhaseViolation


class VoterStage(IntEnum):
    NONE = 0
    COMMITTED = 1
    REVEALED = 2
    HARVESTED = 3
    CLAIMED = 4


@dataclass
class Vote:
    """
    One voter's participation in one session attempt.

    Fields
    ------
    concealed: sha3-256 commitment over (appraisal, voter, secret).
    appraisal: revealed appraisal (0 until revealed).
    stake: amount debited from the voter's principal at commit.
    base: accuracy score 0..6 assigned at harvest.
    winner_points: base * weight for winners; zeroed once claimed.
    amount_harvested: stake forfeited by an inaccurate voter.
    stage: forward-only voter progression.
    """

    concealed: bytes = b""
    appraisal: int = 0
    stake: int = 0
    base: int = 0
    winner_points: int = 0
    amount_harvested: int = 0
    stage: VoterStage = VoterStage.NONE

    def advance(self, to: VoterStage) -> None:
        if int(to) != int(self.stage) + 1:
            raise PhaseViolation(
                "voter stage must advance one step at a time",
                expected=VoterStage(int(to) - 1).name if int(to) > 0 else None,
                actual=self.stage.name,
            )
        self.stage = to

    def require(self, stage: VoterStage) -> None:
        if self.stage != stage:
            raise PhaseViolation(
                f"voter must be {stage.name.lower()}",
                expected=stage.name,
                actual=self.stage.name,
            )

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["concealed"] = self.concealed.hex()
        d["stage"] = self.stage.name
        return d


__all__ = ["VoterStage", "Vote"]
