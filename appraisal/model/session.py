from __future__ import annotations

"""
Session records: key, core aggregates, phase checks, and the per-voter map.

A record is created when a session opens and is never deleted. CLOSED plus a
zeroed stake pool marks the end of its life; a later attempt for the same
asset/instance gets a fresh key with a higher nonce.
"""

from dataclasses import asdict, dataclass, field
from enum import IntEnum
from typing import Any, Dict, Union

from .vote import Vote

# Larger than any stake the engine will ever see; replaced by the first commit.
LOWEST_STAKE_SENTINEL = 10**40

InstanceId = Union[int, str]


class Progression(IntEnum):
    COMMITTING = 0
    REVEALING = 1
    REVEAL_COMPLETE = 2
    CONSENSUS_SET = 3
    HARVEST_COMPLETE = 4
    CLOSED = 5


@dataclass(frozen=True)
class SessionKey:
    asset: str
    instance: InstanceId
    nonce: int

    def __str__(self) -> str:
        return f"{self.asset}/{self.instance}#{self.nonce}"


@dataclass
class SessionCore:
    end_time: int
    bounty: int
    max_appraisal: int
    voting_time: int
    lowest_stake: int = LOWEST_STAKE_SENTINEL
    total_appraisal_value: int = 0
    total_session_stake: int = 0
    total_profit: int = 0
    total_winner_points: int = 0
    total_votes: int = 0
    unique_voters: int = 0

    # Time boundaries derived from the voting window.
    def reveal_cutoff(self) -> int:
        return self.end_time + self.voting_time

    def claim_cutoff(self) -> int:
        return self.end_time + 2 * self.voting_time

    def stale_after(self) -> int:
        return self.end_time + 3 * self.voting_time


@dataclass
class SessionChecks:
    progression: Progression = Progression.COMMITTING
    calls: int = 0
    correct: int = 0
    incorrect: int = 0
    time_final_appraisal_set: int = 0

    @property
    def settled(self) -> bool:
        return self.time_final_appraisal_set != 0


@dataclass
class SessionRecord:
    key: SessionKey
    core: SessionCore
    checks: SessionChecks = field(default_factory=SessionChecks)
    votes: Dict[str, Vote] = field(default_factory=dict)
    final_appraisal: int = 0

    def vote(self, voter: str) -> Vote:
        """Return the voter's record, creating an empty (NONE) one if needed."""
        v = self.votes.get(voter)
        if v is None:
            v = Vote()
            self.votes[voter] = v
        return v

    def claim_deadline(self) -> int:
        """Moment after which claims may force-close the attempt."""
        if self.checks.settled:
            return self.checks.time_final_appraisal_set + 2 * self.core.voting_time
        return self.core.claim_cutoff()

    def snapshot(self) -> Dict[str, Any]:
        return {
            "key": {"asset": self.key.asset, "instance": self.key.instance, "nonce": self.key.nonce},
            "core": asdict(self.core),
            "checks": {**asdict(self.checks), "progression": self.checks.progression.name},
            "final_appraisal": self.final_appraisal,
            "votes": {k: v.to_dict() for k, v in sorted(self.votes.items())},
        }


__all__ = [
    "LOWEST_STAKE_SENTINEL",
    "Progression",
    "SessionKey",
    "SessionCore",
    "SessionChecks",
    "SessionRecord",
]
