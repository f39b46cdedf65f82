"""
Signal models - the pipeline's output.

These models represent the output of compute_signals.py (Step 5) and the
result of a full scan (orchestrator.py).
"""

import enum
from datetime import datetime
from typing import Optional, Literal
from pydantic import BaseModel, Field


class SignalStatus(str, enum.Enum):
    ACTIVE = "active"
    DISMISSED = "dismissed"
    ADDED = "added"


# active is the only state with outgoing transitions
SIGNAL_TRANSITIONS: dict[SignalStatus, set[SignalStatus]] = {
    SignalStatus.ACTIVE: {SignalStatus.DISMISSED, SignalStatus.ADDED},
    SignalStatus.DISMISSED: set(),
    SignalStatus.ADDED: set(),
}


def can_transition(current: SignalStatus, new: SignalStatus) -> bool:
    """Check whether a signal may move from `current` to `new`."""
    return SignalStatus(new) in SIGNAL_TRANSITIONS[SignalStatus(current)]


class SignalDraft(BaseModel):
    """
    A signal ready to be stored.

    `market_price` and `ai_fair_price` are both prices of the chosen side, so
    a consumer can read "underpriced" without knowing which side was picked.
    """
    topic_id: str
    market_id: str
    market_question: str
    market_description: Optional[str] = None
    side: Literal["YES", "NO"]
    market_price: float  # Price of the chosen side (0-1)
    ai_fair_price: float  # Judge's fair price of the chosen side (0-1)
    edge_bps: int
    explanation: str
    volume: Optional[float] = None
    liquidity: Optional[float] = None
    end_date: Optional[datetime] = None


class Signal(SignalDraft):
    """A stored signal."""
    id: str
    status: SignalStatus = SignalStatus.ACTIVE
    created_at: Optional[datetime] = None


class ScanOutcome(str, enum.Enum):
    SIGNALS_FOUND = "SIGNALS_FOUND"
    NO_MARKETS = "NO_MARKETS"
    NO_MISPRICINGS = "NO_MISPRICINGS"
    DRY_RUN = "DRY_RUN"  # Stopped before the judge; nothing stored


class ScanResult(BaseModel):
    """
    Complete output of one scan.

    A hard failure never produces a ScanResult; it raises instead.
    """
    topic_id: str
    outcome: ScanOutcome
    message: str
    created_signal_count: int = 0
    signals: list[Signal] = Field(default_factory=list)

    # Summary statistics
    listings_fetched: int = 0
    candidates_selected: int = 0
    candidates_enriched: int = 0
    opinions_received: int = 0
    opinions_rejected: int = 0

    # Cost tracking
    judge_model: Optional[str] = None
    judge_tokens: int = 0
    judge_cost_usd: float = 0.0

    started_at: str  # ISO timestamp
    completed_at: str  # ISO timestamp
