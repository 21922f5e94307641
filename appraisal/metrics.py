from __future__ import annotations

"""
Prometheus metrics for the appraisal session engine.

We expose counters and histograms covering:
- sessions: opened, settled, closed (by reason)
- votes: committed and revealed
- harvest: voters scored by outcome, harvested amount distribution
- claims: principal/profit returned to voters
- rejections: calls aborted by error code

Metrics are recorded only after a call commits, so a rolled back call leaves
no trace apart from the rejection counter.
"""


from typing import Optional

from prometheus_client import (CONTENT_TYPE_LATEST, CollectorRegistry, Counter,
                               Histogram, generate_latest)

# Use a dedicated registry so embedding apps can choose to merge or expose it directly.
REGISTRY = CollectorRegistry()

UNIT = 10**18

# ────────────────────────────────────────────────────────────────────────────────
# Label conventions
#   outcome: "winner" | "harvested"
#   reason:  "complete" | "expired" | "explicit" | "reopened"
#   code:    AppraisalError.code
# ────────────────────────────────────────────────────────────────────────────────

SESSIONS_OPENED = Counter(
    "appraisal_sessions_opened_total",
    "Total appraisal sessions opened.",
    registry=REGISTRY,
)

VOTES_COMMITTED = Counter(
    "appraisal_votes_committed_total",
    "Total concealed appraisals committed.",
    registry=REGISTRY,
)

VOTES_REVEALED = Counter(
    "appraisal_votes_revealed_total",
    "Total appraisals revealed.",
    registry=REGISTRY,
)

SESSIONS_SETTLED = Counter(
    "appraisal_sessions_settled_total",
    "Total sessions whose final appraisal was set.",
    registry=REGISTRY,
)

VOTERS_HARVESTED = Counter(
    "appraisal_voters_harvested_total",
    "Total voters scored during harvest by outcome.",
    labelnames=("outcome",),
    registry=REGISTRY,
)

CLAIMS = Counter(
    "appraisal_claims_total",
    "Total voter claims processed.",
    registry=REGISTRY,
)

SESSIONS_CLOSED = Counter(
    "appraisal_sessions_closed_total",
    "Total sessions closed by reason.",
    labelnames=("reason",),
    registry=REGISTRY,
)

CALLS_REJECTED = Counter(
    "appraisal_calls_rejected_total",
    "Total engine calls aborted, by error code.",
    labelnames=("code",),
    registry=REGISTRY,
)

# Monetary amounts are tracked in whole currency units (float) to keep bucket scales reasonable.
_AMOUNT_BUCKETS = (
    0.001,
    0.01,
    0.05,
    0.1,
    0.25,
    0.5,
    1,
    2.5,
    5,
    10,
    25,
    50,
    100,
    250,
    1000,
)

HARVESTED_AMOUNT = Histogram(
    "appraisal_harvested_amount_units",
    "Distribution of harvested (forfeited) stake amounts, in currency units.",
    buckets=_AMOUNT_BUCKETS,
    registry=REGISTRY,
)

CLAIMED_AMOUNT = Histogram(
    "appraisal_claimed_amount_units",
    "Distribution of principal + profit returned per claim, in currency units.",
    buckets=_AMOUNT_BUCKETS,
    registry=REGISTRY,
)


# ────────────────────────────────────────────────────────────────────────────────
# Recording helpers
# ────────────────────────────────────────────────────────────────────────────────


def _units(amount: int) -> float:
    return amount / UNIT


def record_session_opened() -> None:
    SESSIONS_OPENED.inc()


def record_commit() -> None:
    VOTES_COMMITTED.inc()


def record_reveal() -> None:
    VOTES_REVEALED.inc()


def record_settled() -> None:
    SESSIONS_SETTLED.inc()


def record_harvest(winner: bool, harvested: int = 0) -> None:
    """Record a harvested voter and, for losers, the forfeited amount."""
    VOTERS_HARVESTED.labels(outcome="winner" if winner else "harvested").inc()
    if not winner and harvested > 0:
        HARVESTED_AMOUNT.observe(_units(harvested))


def record_claim(amount: int) -> None:
    CLAIMS.inc()
    if amount >= 0:
        CLAIMED_AMOUNT.observe(_units(amount))


def record_closed(reason: str) -> None:
    SESSIONS_CLOSED.labels(reason=reason).inc()


def record_rejected(code: str) -> None:
    CALLS_REJECTED.labels(code=code).inc()


def render(registry: Optional[CollectorRegistry] = None) -> bytes:
    """Return the text exposition of the registry (Prometheus format)."""
    return generate_latest(registry or REGISTRY)


__all__ = [
    "REGISTRY",
    "CONTENT_TYPE_LATEST",
    "SESSIONS_OPENED",
    "VOTES_COMMITTED",
    "VOTES_REVEALED",
    "SESSIONS_SETTLED",
    "VOTERS_HARVESTED",
    "CLAIMS",
    "SESSIONS_CLOSED",
    "CALLS_REJECTED",
    "HARVESTED_AMOUNT",
    "CLAIMED_AMOUNT",
    "record_session_opened",
    "record_commit",
    "record_reveal",
    "record_settled",
    "record_harvest",
    "record_claim",
    "record_closed",
    "record_rejected",
    "render",
]
