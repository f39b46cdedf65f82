#!/usr/bin/env python3
"""
Narrow the open listing set to the listings relevant to a topic.

A listing matches a keyword when its searchable text (question, subtitle,
description) contains the whole keyword, or, for multi-word keywords, every
word longer than two characters. Matches are ranked by volume and capped;
when too few listings match, the highest-volume listings overall are merged
in so an obscure topic still has something to judge.

Functions for pipeline:
    select_candidates(listings, keywords) -> list[ListingCandidate]
"""

import sys
from pathlib import Path

# Add parent to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from models.market import ListingCandidate
from config.settings import settings

# =============================================================================
# CONFIGURATION (from settings.py)
# =============================================================================

MAX_CANDIDATES = settings.max_candidates
MIN_KEYWORD_MATCHES = settings.min_keyword_matches
FALLBACK_CANDIDATES = settings.fallback_candidates
MIN_WORD_LENGTH = 3


# =============================================================================
# MATCHING
# =============================================================================

def searchable_text(listing: ListingCandidate) -> str:
    """Question + subtitle + description, lower-cased."""
    parts = [listing.question, listing.subtitle or "", listing.description or ""]
    return " ".join(parts).lower()


def matches_keyword(text: str, keyword: str) -> bool:
    """Whole-phrase match, or all significant words of a multi-word keyword."""
    keyword = keyword.strip().lower()
    if not keyword:
        return False
    if keyword in text:
        return True

    words = keyword.split()
    if len(words) < 2:
        return False
    significant = [w for w in words if len(w) >= MIN_WORD_LENGTH]
    return bool(significant) and all(w in text for w in significant)


def match_listings(listings: list[ListingCandidate], keywords: list[str]) -> list[ListingCandidate]:
    """Primary match set, in input order."""
    matched = []
    for listing in listings:
        text = searchable_text(listing)
        if any(matches_keyword(text, kw) for kw in keywords):
            matched.append(listing)
    return matched


def rank_by_volume(listings: list[ListingCandidate]) -> list[ListingCandidate]:
    """Sort by volume, highest first. Listings without a volume are left out."""
    ranked = [l for l in listings if l.volume is not None]
    ranked.sort(key=lambda l: l.volume, reverse=True)
    return ranked


# =============================================================================
# PUBLIC API (for pipeline use)
# =============================================================================

def select_candidates(
    listings: list[ListingCandidate],
    keywords: list[str],
    max_candidates: int = MAX_CANDIDATES,
    min_matches: int = MIN_KEYWORD_MATCHES,
    fallback_count: int = FALLBACK_CANDIDATES,
    verbose: bool = False,
) -> list[ListingCandidate]:
    """
    Select the listings to send to the judge for a topic.

    Args:
        listings: Full open listing set
        keywords: Topic keywords
        max_candidates: Cap on the returned list (default: 10)
        min_matches: Below this many matches, merge in the fallback (default: 3)
        fallback_count: How many top-volume listings the fallback adds (default: 5)
        verbose: Print progress

    Returns:
        Candidates ordered by volume, keyword matches first
    """
    candidates = rank_by_volume(match_listings(listings, keywords))[:max_candidates]

    if verbose:
        print(f"🔍 {len(candidates)} listings matched {len(keywords)} keywords")

    if len(candidates) < min_matches:
        seen = {c.id for c in candidates}
        added = 0
        for listing in rank_by_volume(listings)[:fallback_count]:
            if len(candidates) >= max_candidates:
                break
            if listing.id in seen:
                continue
            candidates.append(listing)
            seen.add(listing.id)
            added += 1

        if verbose:
            print(f"   ⏭️  Low keyword yield, added {added} top-volume listings")

    return candidates
