#!/usr/bin/env python3
"""
Polymarket Listing Fetcher

Fetches the open listing set from Polymarket's Gamma API and parses each
listing into a ListingCandidate. Listings whose YES price cannot be parsed
into a valid probability are dropped, never defaulted.

Functions for pipeline:
    fetch_active_listings() -> list[ListingCandidate]
    fetch_market_by_slug(slug, cache) -> ListingCandidate | None

CLI Usage:
    python get_markets.py              # Fetch and summarise open listings
    python get_markets.py --verbose    # Show dropped listings
"""

import argparse
import json
import math
import sys
from pathlib import Path
from typing import Optional

import requests
from pydantic import ValidationError

# Add parent to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from models.market import ListingCandidate
from src.market_cache import MarketCache
from config.settings import settings


# =============================================================================
# CONFIGURATION (from settings.py)
# =============================================================================

GAMMA_API_BASE = settings.gamma_api_base
DEFAULT_OUTCOMES = ["Yes", "No"]


# =============================================================================
# PARSING
# =============================================================================

def safe_float(value) -> Optional[float]:
    if value is None:
        return None
    try:
        result = float(value)
    except (ValueError, TypeError):
        return None
    if math.isnan(result) or math.isinf(result):
        return None
    return result


def _parse_json_list(value) -> Optional[list]:
    """Gamma encodes arrays as JSON strings; accept either form."""
    if value is None:
        return None
    if isinstance(value, list):
        return value
    if isinstance(value, str):
        try:
            parsed = json.loads(value)
        except json.JSONDecodeError:
            return None
        return parsed if isinstance(parsed, list) else None
    return None


def find_yes_index(outcomes: list[str]) -> int:
    """Index of the affirmative outcome; the first outcome if none is named Yes."""
    for i, name in enumerate(outcomes):
        if name.strip().lower() == "yes":
            return i
    return 0


def parse_listing(item: dict, include_closed: bool = False) -> Optional[ListingCandidate]:
    """
    Parse one Gamma market into a ListingCandidate.

    Returns None (drop) for closed listings, missing id/question, a price
    vector that does not yield a valid YES probability, or text fields
    (question, description, slug, endDate) that are not strings.
    """
    if not isinstance(item, dict):
        return None
    if item.get("closed") and not include_closed:
        return None

    market_id = item.get("id")
    question = item.get("question")
    if market_id in (None, "") or not question:
        return None

    outcomes = [str(o) for o in (_parse_json_list(item.get("outcomes")) or DEFAULT_OUTCOMES)]
    raw_prices = _parse_json_list(item.get("outcomePrices"))
    if not raw_prices:
        return None

    prices = [safe_float(p) for p in raw_prices]
    if any(p is None for p in prices):
        return None

    yes_index = find_yes_index(outcomes)
    if yes_index >= len(prices):
        return None
    yes_price = prices[yes_index]
    if not (0.0 <= yes_price <= 1.0):
        return None

    token_ids = [str(t) for t in (_parse_json_list(item.get("clobTokenIds")) or [])]

    volume = safe_float(item.get("volume"))
    if volume is None:
        volume = safe_float(item.get("volumeNum"))
    liquidity = safe_float(item.get("liquidity"))
    if liquidity is None:
        liquidity = safe_float(item.get("liquidityNum"))

    try:
        return ListingCandidate(
            id=str(market_id),
            question=question,
            subtitle=item.get("subtitle") or item.get("groupItemTitle") or None,
            description=item.get("description") or None,
            slug=item.get("slug") or None,
            outcomes=outcomes,
            outcome_prices=prices,
            clob_token_ids=token_ids,
            yes_index=yes_index,
            volume=volume,
            liquidity=liquidity,
            end_date=item.get("endDate"),
        )
    except ValidationError:
        # Text fields of the wrong type
        return None


# =============================================================================
# API FETCHING
# =============================================================================

def fetch_active_listings(
    timeout: Optional[float] = None,
    limit: Optional[int] = None,
    session: Optional[requests.Session] = None,
    verbose: bool = False,
) -> list[ListingCandidate]:
    """
    Fetch all open listings from the Gamma catalog.

    One attempt, no retries. Any failure (unreachable, non-2xx, timeout,
    unparsable body) yields an empty list.
    """
    timeout = settings.listing_timeout_seconds if timeout is None else timeout
    limit = settings.listing_limit if limit is None else limit
    http = session or requests

    params = {
        "active": "true",
        "closed": "false",
        "limit": limit,
        "order": "volumeNum",
        "ascending": "false",
    }

    if verbose:
        print(f"🌐 Fetching listings from Polymarket Gamma API...")

    try:
        resp = http.get(
            f"{settings.gamma_api_base}/markets",
            params=params,
            headers={"Accept": "application/json"},
            timeout=timeout,
        )
        resp.raise_for_status()
        data = resp.json()
    except requests.RequestException as e:
        if verbose:
            print(f"  ❌ Error fetching listings: {e}")
        return []
    except ValueError as e:
        if verbose:
            print(f"  ❌ Error parsing response: {e}")
        return []

    if not isinstance(data, list):
        if verbose:
            print(f"  ❌ Unexpected response shape: {type(data).__name__}")
        return []

    listings = []
    dropped = 0
    for item in data:
        listing = parse_listing(item)
        if listing is None:
            dropped += 1
            continue
        listings.append(listing)

    if verbose:
        print(f"✅ Fetched {len(listings)} open listings ({dropped} dropped)")

    return listings


def fetch_market_by_slug(
    slug: str,
    cache: MarketCache,
    timeout: Optional[float] = None,
    session: Optional[requests.Session] = None,
    verbose: bool = False,
) -> Optional[ListingCandidate]:
    """
    Look up a single market by slug, trying the market slug first and then
    the event slug (using the event's primary market).

    Results are cached under the requested slug and the market's own slug.
    """
    cached = cache.get(slug)
    if cached is not None:
        return cached

    timeout = settings.market_lookup_timeout_seconds if timeout is None else timeout
    http = session or requests
    headers = {"Accept": "application/json"}

    try:
        resp = http.get(f"{settings.gamma_api_base}/markets", params={"slug": slug},
                        headers=headers, timeout=timeout)
        if resp.ok:
            markets = resp.json()
            if isinstance(markets, list) and markets:
                market = parse_listing(markets[0], include_closed=True)
                if market is not None:
                    cache.set(slug, market)
                    return market

        resp = http.get(f"{settings.gamma_api_base}/events", params={"slug": slug},
                        headers=headers, timeout=timeout)
        if resp.ok:
            events = resp.json()
            event = events[0] if isinstance(events, list) and events else None
            event_markets = event.get("markets") if isinstance(event, dict) else None
            if isinstance(event_markets, list) and event_markets:
                market = parse_listing(event_markets[0], include_closed=True)
                if market is not None:
                    cache.set(slug, market)
                    if market.slug and market.slug != slug:
                        cache.set(market.slug, market)
                    return market
    except (requests.RequestException, ValueError) as e:
        if verbose:
            print(f"  ❌ Error fetching market {slug}: {e}")
        return None

    return None


# =============================================================================
# MAIN
# =============================================================================

def main():
    parser = argparse.ArgumentParser(description="Fetch open Polymarket listings")
    parser.add_argument("--verbose", "-v", action="store_true", help="Show fetch details")
    parser.add_argument("--limit", type=int, default=None, help="Maximum listings to request")
    args = parser.parse_args()

    print("=" * 70)
    print("POLYMARKET LISTING FETCHER")
    print("=" * 70)

    listings = fetch_active_listings(limit=args.limit, verbose=True)

    ranked = sorted((l for l in listings if l.volume is not None), key=lambda l: l.volume, reverse=True)
    if ranked:
        print(f"\n🔥 TOP LISTINGS BY VOLUME:")
        for i, l in enumerate(ranked[:10], 1):
            q_short = l.question[:60] + "..." if len(l.question) > 60 else l.question
            print(f"  {i}. {q_short}")
            print(f"     YES {l.yes_price:.1%} | ${l.volume:,.0f} volume")


if __name__ == "__main__":
    main()
