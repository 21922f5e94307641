from __future__ import annotations

"""
Session engine notifications.

Events are queued while a call runs and published to subscribers only after
the call commits; a rolled back call publishes nothing. All events are plain
dataclasses with JSON-friendly fields.

Events:
  - SessionCreated:    a new attempt was opened for an asset/instance.
  - VoteCommitted:     a voter staked and submitted a concealed appraisal.
  - VoteRevealed:      a voter revealed and was counted with a weight.
  - FinalAppraisalSet: consensus was frozen for the attempt.
  - VoteHarvested:     a voter was scored against consensus.
  - VoteClaimed:       a voter took back principal and profit share.
  - SessionClosed:     residual funds were swept and the attempt closed.
"""


from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Dict, Union

from .session import InstanceId, SessionKey


class EventType(str, Enum):
    SESSION_CREATED = "SessionCreated"
    VOTE_COMMITTED = "VoteCommitted"
    VOTE_REVEALED = "VoteRevealed"
    FINAL_APPRAISAL_SET = "FinalAppraisalSet"
    VOTE_HARVESTED = "VoteHarvested"
    VOTE_CLAIMED = "VoteClaimed"
    SESSION_CLOSED = "SessionClosed"


@dataclass(frozen=True)
class _KeyedEvent:
    asset: str
    instance: InstanceId
    nonce: int
    ts: int

    @property
    def key(self) -> SessionKey:
        return SessionKey(self.asset, self.instance, self.nonce)

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["etype"] = self.etype.value  # type: ignore[attr-defined]
        return d


@dataclass(frozen=True)
class SessionCreated(_KeyedEvent):
    creator: str
    end_time: int
    bounty: int
    max_appraisal: int
    etype: EventType = EventType.SESSION_CREATED


@dataclass(frozen=True)
class VoteCommitted(_KeyedEvent):
    voter: str
    stake: int
    etype: EventType = EventType.VOTE_COMMITTED


@dataclass(frozen=True)
class VoteRevealed(_KeyedEvent):
    voter: str
    appraisal: int
    weight: int
    etype: EventType = EventType.VOTE_REVEALED


@dataclass(frozen=True)
class FinalAppraisalSet(_KeyedEvent):
    final_appraisal: int
    participants: int
    total_stake: int
    etype: EventType = EventType.FINAL_APPRAISAL_SET


@dataclass(frozen=True)
class VoteHarvested(_KeyedEvent):
    voter: str
    base: int
    winner_points: int
    amount_harvested: int
    commission: int
    etype: EventType = EventType.VOTE_HARVESTED


@dataclass(frozen=True)
class VoteClaimed(_KeyedEvent):
    voter: str
    principal: int
    profit: int
    etype: EventType = EventType.VOTE_CLAIMED


@dataclass(frozen=True)
class SessionClosed(_KeyedEvent):
    closer: str
    treasury_share: int
    caller_fee: int
    reason: str
    etype: EventType = EventType.SESSION_CLOSED


SessionEvent = Union[
    SessionCreated,
    VoteCommitted,
    VoteRevealed,
    FinalAppraisalSet,
    VoteHarvested,
    VoteClaimed,
    SessionClosed,
]


__all__ = [
    "EventType",
    "SessionEvent",
    "SessionCreated",
    "VoteCommitted",
    "VoteRevealed",
    "FinalAppraisalSet",
    "VoteHarvested",
    "VoteClaimed",
    "SessionClosed",
]
