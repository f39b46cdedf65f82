"""Single-market lookup and judging, served through the TTL cache."""
from fastapi import APIRouter, Depends, HTTPException

from api.dependencies import get_market_cache, get_judge_client
from config.settings import settings
from src.get_markets import fetch_market_by_slug
from src.enrich_prices import enrich_candidates
from src.estimate_fair_value import estimate_market, JudgeError
from src.compute_signals import compute_edge
from src.market_cache import MarketCache

router = APIRouter()


def _lookup(slug: str, cache: MarketCache):
    market = fetch_market_by_slug(slug, cache)
    if market is None:
        raise HTTPException(status_code=404, detail="Market not found")
    return market


@router.get("/{slug}")
def get_market(slug: str, cache: MarketCache = Depends(get_market_cache)):
    """Get market details by market or event slug."""
    market = _lookup(slug, cache)

    return {
        **market.model_dump(),
        "yes_price": market.yes_price,
        "no_price": 1 - market.yes_price,
        "yes_token_id": market.yes_token_id,
    }


@router.get("/{slug}/ai-insights")
def get_market_insights(
    slug: str,
    cache: MarketCache = Depends(get_market_cache),
    judge_client=Depends(get_judge_client),
):
    """
    Ask the judge about one market.

    The YES price is refreshed from the CLOB first. The edge is reported for
    whichever side the judge recommends, with no materiality gate and nothing
    stored.
    """
    market = _lookup(slug, cache)
    [candidate] = enrich_candidates(
        [market],
        max_enriched=1,
        timeout=settings.quote_timeout_seconds,
    )

    try:
        opinion = estimate_market(
            candidate,
            judge_client,
            model=settings.judge_model,
            max_completion_tokens=settings.judge_max_completion_tokens,
            verbose=settings.debug,
        )
    except JudgeError as e:
        print(f"❌ Insights failed for market {slug}: {e}")
        raise HTTPException(status_code=502, detail=f"Failed to fetch AI insights: {e}")

    if opinion is None:
        raise HTTPException(status_code=502, detail="Judge returned no usable opinion for this market")

    edge = compute_edge(opinion.side, candidate.yes_price, opinion.ai_probability)

    return {
        "market_id": candidate.id,
        "slug": slug,
        "question": candidate.question,
        "recommended_side": opinion.side,
        "market_price": edge.side_price,
        "ai_fair_price": edge.fair_price,
        "edge_bps": edge.edge_bps,
        "should_trade": opinion.should_trade,
        "explanation": opinion.explanation,
        "price_source": candidate.price_source,
    }
