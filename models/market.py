"""
Market models - data structures from the Polymarket API.

These models represent:
- The topic a scan runs against: TopicProfile
- Output of get_markets.py (Step 1): ListingCandidate
- Output of enrich_prices.py (Step 3): EnrichedCandidate
"""

from typing import Optional, Literal
from pydantic import BaseModel, Field


class TopicProfile(BaseModel):
    """A user-defined topic. Owned by the application, read-only to the pipeline."""
    id: str
    name: str
    keywords: list[str] = Field(default_factory=list)
    description: Optional[str] = None


class ListingCandidate(BaseModel):
    """
    A single open Polymarket listing (one binary question).

    Prices are per outcome, in the same order as `outcomes`. `yes_index`
    points at the affirmative outcome.
    """
    id: str
    question: str
    subtitle: Optional[str] = None
    description: Optional[str] = None
    slug: Optional[str] = None

    outcomes: list[str] = Field(default_factory=lambda: ["Yes", "No"])
    outcome_prices: list[float]
    clob_token_ids: list[str] = Field(default_factory=list)
    yes_index: int = 0

    volume: Optional[float] = None
    liquidity: Optional[float] = None
    end_date: Optional[str] = None

    @property
    def yes_price(self) -> float:
        """Market price of the affirmative outcome."""
        return self.outcome_prices[self.yes_index]

    @property
    def yes_token_id(self) -> Optional[str]:
        """CLOB token id for the affirmative outcome (for live quotes)."""
        if self.yes_index < len(self.clob_token_ids):
            return self.clob_token_ids[self.yes_index]
        return None


class EnrichedCandidate(ListingCandidate):
    """
    A ListingCandidate whose YES price may have been refreshed from the CLOB.

    The refresh only happens for a valid probability; otherwise the catalog
    price is kept and `price_source` stays "catalog".
    """
    price_source: Literal["catalog", "quote"] = "catalog"

    @classmethod
    def from_listing(
        cls,
        listing: ListingCandidate,
        quote: Optional[float] = None,
    ) -> "EnrichedCandidate":
        """Create an EnrichedCandidate, overwriting the YES price with a valid quote."""
        data = listing.model_dump()
        if quote is not None and 0.0 <= quote <= 1.0:
            prices = list(data["outcome_prices"])
            prices[listing.yes_index] = quote
            data["outcome_prices"] = prices
            data["price_source"] = "quote"
        return cls(**data)
