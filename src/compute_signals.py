#!/usr/bin/env python3
"""
Turn judge opinions into trading signals.

Prices are converted to the recommended side before the edge is taken, so a
NO recommendation compares 1 - yes_price against 1 - fair probability. Only
edges at or above the materiality threshold become signals.

Functions for pipeline:
    compute_signals(topic_id, candidates, opinions) -> list[SignalDraft]
"""

import math
import sys
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional

from dateutil import parser as date_parser

# Add parent to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from models.market import ListingCandidate
from models.opinion import JudgeOpinion
from models.signal import SignalDraft
from config.settings import settings

# =============================================================================
# CONFIGURATION (from settings.py)
# =============================================================================

MIN_EDGE_BPS = settings.min_edge_bps
BPS_PER_UNIT = 10_000


# =============================================================================
# MATH UTILITIES
# =============================================================================

def round_half_away_from_zero(value: float) -> int:
    """Round to the nearest integer; .5 ties go away from zero (2.5 -> 3, -2.5 -> -3)."""
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


@dataclass(frozen=True)
class EdgeQuote:
    side_price: float  # Market price of the recommended side
    fair_price: float  # Judge's fair price of the recommended side
    edge_bps: int


def compute_edge(side: str, yes_price: float, ai_probability: float) -> EdgeQuote:
    """
    Side-aware edge in basis points.

    Args:
        side: "YES" or "NO"
        yes_price: Market price of the YES outcome (0-1)
        ai_probability: Judge's YES probability as a percentage (0-100)
    """
    yes_prob = ai_probability / 100
    if side == "YES":
        side_price, fair_price = yes_price, yes_prob
    elif side == "NO":
        side_price, fair_price = 1 - yes_price, 1 - yes_prob
    else:
        raise ValueError(f"Unknown side: {side!r}")

    edge_bps = round_half_away_from_zero((fair_price - side_price) * BPS_PER_UNIT)
    return EdgeQuote(side_price=side_price, fair_price=fair_price, edge_bps=edge_bps)


def parse_end_date(end_date_str: Optional[str]) -> Optional[datetime]:
    """Parse ISO date string to datetime."""
    if not end_date_str:
        return None
    try:
        return date_parser.isoparse(end_date_str)
    except (ValueError, TypeError):
        return None


# =============================================================================
# PUBLIC API (for pipeline use)
# =============================================================================

def compute_signals(
    topic_id: str,
    candidates: list[ListingCandidate],
    opinions: list[JudgeOpinion],
    min_edge_bps: int = MIN_EDGE_BPS,
    verbose: bool = False,
) -> list[SignalDraft]:
    """
    Build signal drafts from judge opinions.

    An opinion becomes a signal only if the judge flagged it, its candidate
    is in the batch, and the side-adjusted edge is at least `min_edge_bps`.
    Negative edges are never emitted.
    """
    by_id = {c.id: c for c in candidates}
    signals = []

    for opinion in opinions:
        if not opinion.should_trade:
            continue

        candidate = by_id.get(opinion.market_id)
        if candidate is None:
            continue

        edge = compute_edge(opinion.side, candidate.yes_price, opinion.ai_probability)

        if verbose:
            q_short = candidate.question[:45] + "..." if len(candidate.question) > 45 else candidate.question
            print(f"   {opinion.side} {q_short}: market {edge.side_price:.1%} → fair {edge.fair_price:.1%} ({edge.edge_bps:+d} bps)")

        if edge.edge_bps < min_edge_bps:
            continue

        signals.append(SignalDraft(
            topic_id=topic_id,
            market_id=candidate.id,
            market_question=candidate.question,
            market_description=candidate.description,
            side=opinion.side,
            market_price=edge.side_price,
            ai_fair_price=edge.fair_price,
            edge_bps=edge.edge_bps,
            explanation=opinion.explanation,
            volume=candidate.volume,
            liquidity=candidate.liquidity,
            end_date=parse_end_date(candidate.end_date),
        ))

    return signals
