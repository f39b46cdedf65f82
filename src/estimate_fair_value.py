#!/usr/bin/env python3
"""
Estimate fair YES probabilities for a batch of candidates with an LLM judge.

The whole batch goes out in one chat-completions call. The response is
parsed strictly: each entry is validated and tagged (valid, unknown id,
duplicate id, malformed), and only valid opinions move on. A failed call
or an unreadable response aborts the batch; there is no partial output.

Functions for pipeline:
    build_judge_client(settings) -> OpenAI
    estimate_fair_values(topic_name, candidates, client) -> JudgeEstimate
    estimate_market(candidate, client) -> JudgeOpinion | None
"""

import json
import sys
from pathlib import Path
from typing import Optional

from openai import OpenAI, OpenAIError
from pydantic import ValidationError

# Add parent to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from models.market import EnrichedCandidate
from models.opinion import JudgeOpinion, OpinionStatus, OpinionResult, JudgeEstimate
from src.cost_tracker import UsageStats
from config.settings import Settings, settings

# Configuration (from settings.py)
MODEL = settings.judge_model
MAX_COMPLETION_TOKENS = settings.judge_max_completion_tokens


class JudgeError(Exception):
    """The judge call failed or its response could not be used."""


# =============================================================================
# PROMPTS
# =============================================================================

SYSTEM_PROMPT = (
    "You are an expert prediction market analyst. Provide accurate probability "
    "estimates based on available information. Be conservative: only flag a market "
    "when you have reasonable confidence in a significant mispricing. "
    "Always respond with valid JSON."
)


def _format_candidate(index: int, c: EnrichedCandidate) -> str:
    lines = [f"{index}. Question: {c.question}"]
    if c.description:
        lines.append(f"   Description: {c.description[:500]}")
    lines.append(f"   Current YES Price: {c.yes_price * 100:.1f}%")
    if c.volume:
        lines.append(f"   Volume: ${c.volume:,.0f}")
    if c.end_date:
        lines.append(f"   Ends: {c.end_date}")
    lines.append(f"   Market ID: {c.id}")
    return "\n".join(lines)


def build_judge_prompt(topic_name: Optional[str], candidates: list[EnrichedCandidate]) -> str:
    """Build the user prompt embedding every candidate in the batch."""
    markets_text = "\n\n".join(_format_candidate(i, c) for i, c in enumerate(candidates, 1))
    scope = f" related to \"{topic_name}\"" if topic_name else ""

    return f"""Analyze the following prediction markets{scope} and estimate fair probabilities.

For each market, provide:
1. Your estimated fair probability (0-100) for the YES outcome
2. Whether to bet YES or NO based on the current price
3. A brief 1-2 sentence explanation of your reasoning
4. Whether this represents a tradeable mispricing (edge > 3%)

Markets to analyze:

{markets_text}

Respond in JSON format:
{{
  "analyses": [
    {{
      "marketId": "string (copy the Market ID exactly)",
      "aiProbability": number (0-100),
      "side": "YES" or "NO",
      "explanation": "string",
      "shouldTrade": boolean
    }}
  ]
}}

Only use Market IDs listed above. Be conservative with your estimates. Only mark shouldTrade as true if the edge is significant (>3%) and you have reasonable confidence."""


# =============================================================================
# RESPONSE PARSING
# =============================================================================

def parse_judge_response(content: str, known_ids: set[str]) -> list[OpinionResult]:
    """
    Parse and validate the judge's JSON response.

    Raises JudgeError if the body is not a JSON object with an `analyses`
    list. Individual bad entries are tagged, not raised.
    """
    try:
        payload = json.loads(content)
    except json.JSONDecodeError as e:
        raise JudgeError(f"Judge returned invalid JSON: {e}") from e

    if not isinstance(payload, dict):
        raise JudgeError("Judge response is not a JSON object")
    analyses = payload.get("analyses")
    if not isinstance(analyses, list):
        raise JudgeError("Judge response has no 'analyses' list")

    results = []
    seen: set[str] = set()
    for entry in analyses:
        try:
            opinion = JudgeOpinion.model_validate(entry)
        except ValidationError as e:
            market_id = entry.get("marketId") if isinstance(entry, dict) else None
            results.append(OpinionResult(
                status=OpinionStatus.MALFORMED,
                market_id=str(market_id) if market_id is not None else None,
                reason=f"{e.error_count()} validation error(s)",
            ))
            continue

        if opinion.market_id not in known_ids:
            results.append(OpinionResult(
                status=OpinionStatus.UNKNOWN_ID,
                market_id=opinion.market_id,
                reason="id not in batch",
            ))
        elif opinion.market_id in seen:
            results.append(OpinionResult(
                status=OpinionStatus.DUPLICATE_ID,
                market_id=opinion.market_id,
                reason="id already judged",
            ))
        else:
            seen.add(opinion.market_id)
            results.append(OpinionResult(
                status=OpinionStatus.VALID,
                opinion=opinion,
                market_id=opinion.market_id,
            ))

    return results


# =============================================================================
# PUBLIC API (for pipeline use)
# =============================================================================

def build_judge_client(config: Settings = settings) -> OpenAI:
    """Construct the judge client once at startup from settings."""
    if not config.openai_api_key:
        raise ValueError("OPENAI_KEY not found in environment")

    return OpenAI(
        api_key=config.openai_api_key,
        base_url=config.openai_base_url or None,
        timeout=config.judge_timeout_seconds,
        max_retries=config.judge_max_retries,
    )


def estimate_fair_values(
    topic_name: Optional[str],
    candidates: list[EnrichedCandidate],
    client: OpenAI,
    model: str = MODEL,
    max_completion_tokens: int = MAX_COMPLETION_TOKENS,
    usage_stats: Optional[UsageStats] = None,
    verbose: bool = False,
) -> JudgeEstimate:
    """
    Ask the judge for a fair YES probability on every candidate.

    This is the main entry point for the pipeline.

    Args:
        topic_name: Display name of the topic being scanned (None for a lone market)
        candidates: Enriched candidates (may be empty)
        client: Judge client, built once by build_judge_client()
        model: Judge model name
        usage_stats: Optional accumulator for token usage/cost
        verbose: Print progress

    Returns:
        JudgeEstimate with tagged per-entry results

    Raises:
        JudgeError: call failed, empty response, or unreadable JSON
    """
    if not candidates:
        return JudgeEstimate(model=model)

    usage_stats = usage_stats if usage_stats is not None else UsageStats()
    prompt = build_judge_prompt(topic_name, candidates)

    if verbose:
        print(f"🤖 Judging {len(candidates)} markets with {model}...")

    try:
        response = client.chat.completions.create(
            model=model,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            response_format={"type": "json_object"},
            max_completion_tokens=max_completion_tokens,
        )
    except OpenAIError as e:
        raise JudgeError(f"Judge call failed: {type(e).__name__}: {e}") from e

    tokens_before = (usage_stats.input_tokens, usage_stats.output_tokens)
    cost = usage_stats.add_openai_usage(getattr(response, "usage", None), model)

    content = response.choices[0].message.content if response.choices else None
    if not content:
        raise JudgeError("No response from judge")

    results = parse_judge_response(content, {c.id for c in candidates})
    estimate = JudgeEstimate(
        results=results,
        model=model,
        input_tokens=usage_stats.input_tokens - tokens_before[0],
        output_tokens=usage_stats.output_tokens - tokens_before[1],
        cost_usd=cost,
    )

    if verbose:
        print(f"    ✅ {len(estimate.opinions)} opinions, {len(estimate.rejected)} rejected [{usage_stats.format_cost(cost)}]")
        for r in estimate.rejected:
            print(f"    ⚠️  {r.status.value}: {r.market_id} ({r.reason})")

    return estimate


def estimate_market(
    candidate: EnrichedCandidate,
    client: OpenAI,
    model: str = MODEL,
    max_completion_tokens: int = MAX_COMPLETION_TOKENS,
    usage_stats: Optional[UsageStats] = None,
    verbose: bool = False,
) -> Optional[JudgeOpinion]:
    """
    Judge a single market outside of any topic.

    Returns the judge's opinion on `candidate`, or None if the response held
    no valid entry for it.

    Raises:
        JudgeError: call failed, empty response, or unreadable JSON
    """
    estimate = estimate_fair_values(
        None,
        [candidate],
        client,
        model=model,
        max_completion_tokens=max_completion_tokens,
        usage_stats=usage_stats,
        verbose=verbose,
    )
    return next((o for o in estimate.opinions if o.market_id == candidate.id), None)
