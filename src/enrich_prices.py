#!/usr/bin/env python3
"""
Refresh YES prices for the top candidates from the CLOB midpoint endpoint.

Quotes are fetched concurrently, one request per candidate, each with its
own timeout. Every failure is local to its candidate: that candidate keeps
its catalog price and its siblings are unaffected.

Functions for pipeline:
    enrich_candidates(candidates) -> list[EnrichedCandidate]
"""

import sys
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Optional

import requests

# Add parent to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from models.market import ListingCandidate, EnrichedCandidate
from src.get_markets import safe_float
from config.settings import settings

# =============================================================================
# CONFIGURATION (from settings.py)
# =============================================================================

MAX_ENRICHED = settings.max_enriched
QUOTE_TIMEOUT = settings.quote_timeout_seconds


# =============================================================================
# INTERNAL FUNCTIONS
# =============================================================================

def fetch_quote(
    token_id: str,
    timeout: float = QUOTE_TIMEOUT,
    session: Optional[requests.Session] = None,
) -> Optional[float]:
    """
    Fetch the live midpoint for one outcome token.

    Returns None for anything other than a valid probability.
    """
    if not token_id:
        return None

    http = session or requests
    try:
        resp = http.get(
            f"{settings.clob_api_base}/midpoint",
            params={"token_id": token_id},
            headers={"Accept": "application/json"},
            timeout=timeout,
        )
        resp.raise_for_status()
        data = resp.json()
    except (requests.RequestException, ValueError):
        return None

    if not isinstance(data, dict):
        return None
    price = safe_float(data.get("mid", data.get("price")))
    if price is None or not (0.0 <= price <= 1.0):
        return None
    return price


# =============================================================================
# PUBLIC API (for pipeline use)
# =============================================================================

def enrich_candidates(
    candidates: list[ListingCandidate],
    max_enriched: int = MAX_ENRICHED,
    timeout: float = QUOTE_TIMEOUT,
    session: Optional[requests.Session] = None,
    verbose: bool = False,
) -> list[EnrichedCandidate]:
    """
    Refresh the YES price of the first `max_enriched` candidates.

    All candidates are returned, in input order. Candidates past the cutoff,
    without a YES token id, or whose quote failed keep their catalog price.
    """
    to_quote = [c for c in candidates[:max_enriched] if c.yes_token_id]
    quotes: dict[str, Optional[float]] = {}

    if to_quote:
        with ThreadPoolExecutor(max_workers=len(to_quote)) as executor:
            futures = {
                c.id: executor.submit(fetch_quote, c.yes_token_id, timeout, session)
                for c in to_quote
            }
            for market_id, future in futures.items():
                # fetch_quote absorbs its own errors; anything else is a bug
                quotes[market_id] = future.result()

    enriched = [EnrichedCandidate.from_listing(c, quotes.get(c.id)) for c in candidates]

    if verbose:
        updated = sum(1 for e in enriched if e.price_source == "quote")
        print(f"💱 Refreshed {updated}/{len(to_quote)} quotes")
        for before, after in zip(candidates, enriched):
            if after.price_source == "quote" and before.yes_price != after.yes_price:
                q_short = before.question[:45] + "..." if len(before.question) > 45 else before.question
                print(f"   {q_short}: {before.yes_price:.1%} → {after.yes_price:.1%}")

    return enriched
