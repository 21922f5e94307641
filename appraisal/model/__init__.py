from __future__ import annotations

"""
Shared record types for the appraisal session engine.

Conventions
-----------
- Participant identities are opaque strings (addresses).
- Monetary values are integers in base units (1 currency unit = 10**18).
- Timestamps are UNIX seconds; 0 means "not set".
"""

from typing import NewType

from .session import (LOWEST_STAKE_SENTINEL, Progression, SessionChecks,
                      SessionCore, SessionKey, SessionRecord)
from .vote import Vote, VoterStage
from .events import (EventType, FinalAppraisalSet, SessionClosed,
                     SessionCreated, SessionEvent, VoteClaimed, VoteCommitted,
                     VoteHarvested, VoteRevealed)

Address = NewType("Address", str)

__all__ = [
    "Address",
    "LOWEST_STAKE_SENTINEL",
    "Progression",
    "SessionKey",
    "SessionCore",
    "SessionChecks",
    "SessionRecord",
    "Vote",
    "VoterStage",
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
