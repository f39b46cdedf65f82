"""
Shared Pydantic models for the Polymarket Topic Signals pipeline.

These models define the data structures that flow between pipeline steps,
ensuring type safety and validation across the entire system.
"""

from models.market import (
    TopicProfile,
    ListingCandidate,
    EnrichedCandidate,
)
from models.opinion import (
    JudgeOpinion,
    OpinionStatus,
    OpinionResult,
    JudgeEstimate,
)
from models.signal import (
    SignalStatus,
    SignalDraft,
    Signal,
    ScanOutcome,
    ScanResult,
    can_transition,
)

__all__ = [
    # Market
    "TopicProfile",
    "ListingCandidate",
    "EnrichedCandidate",
    # Opinion
    "JudgeOpinion",
    "OpinionStatus",
    "OpinionResult",
    "JudgeEstimate",
    # Signal
    "SignalStatus",
    "SignalDraft",
    "Signal",
    "ScanOutcome",
    "ScanResult",
    "can_transition",
]
