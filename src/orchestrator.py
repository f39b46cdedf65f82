#!/usr/bin/env python3
"""
Scan Orchestrator - Runs the signal-discovery pipeline for one topic.

Stages run strictly in order, each consuming the previous stage's full
output:

    listings -> relevance filter -> price enrichment -> judge -> edges -> signals

Source outages and malformed listings are absorbed by their stage. A judge
failure aborts the scan before anything is written.

Usage:
    python orchestrator.py <topic_id>              # Scan a topic and store signals
    python orchestrator.py <topic_id> --dry-run    # Stop before calling the judge
"""

import argparse
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Protocol

import requests
from openai import OpenAI

# Add parent to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

# Import pipeline functions
from src.get_markets import fetch_active_listings
from src.filter_markets import select_candidates
from src.enrich_prices import enrich_candidates
from src.estimate_fair_value import estimate_fair_values, build_judge_client, JudgeError
from src.compute_signals import compute_signals
from src.cost_tracker import UsageStats

# Import models
from models.market import TopicProfile
from models.signal import Signal, SignalDraft, ScanOutcome, ScanResult

from config.settings import Settings, settings as default_settings


class TopicNotFoundError(LookupError):
    """The topic being scanned does not exist."""


class SignalSink(Protocol):
    """What the pipeline needs from persistence."""

    def get_topic(self, topic_id: str) -> Optional[TopicProfile]: ...

    def create_signals(self, drafts: list[SignalDraft]) -> list[Signal]: ...

    def update_topic_signal_count(self, topic_id: str) -> int: ...


NO_MARKETS_MESSAGE = "No markets found for this topic"
NO_MISPRICINGS_MESSAGE = "No significant mispricings detected"


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class ScanOrchestrator:
    """
    Runs scans for topics.

    The judge client and settings are built once by the caller and passed in;
    the orchestrator holds no global state of its own.
    """

    def __init__(
        self,
        store: SignalSink,
        judge_client: OpenAI,
        settings: Settings = default_settings,
        session: Optional[requests.Session] = None,
        verbose: bool = False,
    ):
        self.store = store
        self.judge_client = judge_client
        self.settings = settings
        self.session = session
        self.verbose = verbose

    def _log(self, message: str):
        if self.verbose:
            print(message)

    def scan(self, topic_id: str, dry_run: bool = False) -> ScanResult:
        """
        Scan one topic and store any new signals.

        Raises:
            TopicNotFoundError: unknown topic id
            JudgeError: the judge call failed; nothing was stored
        """
        cfg = self.settings
        started_at = _now()

        topic = self.store.get_topic(topic_id)
        if topic is None:
            raise TopicNotFoundError(topic_id)

        self._log(f"{'─'*70}")
        self._log(f"🚀 Scanning topic: {topic.name} ({', '.join(topic.keywords)})")
        self._log(f"{'─'*70}")

        # STEP 1: Discover listings
        listings = fetch_active_listings(
            timeout=cfg.listing_timeout_seconds,
            limit=cfg.listing_limit,
            session=self.session,
            verbose=self.verbose,
        )

        # STEP 2: Relevance filter
        candidates = select_candidates(
            listings,
            topic.keywords,
            max_candidates=cfg.max_candidates,
            min_matches=cfg.min_keyword_matches,
            fallback_count=cfg.fallback_candidates,
            verbose=self.verbose,
        )

        result_fields = dict(
            topic_id=topic.id,
            started_at=started_at,
            listings_fetched=len(listings),
            candidates_selected=len(candidates),
        )

        if not candidates:
            self._log(f"❌ {NO_MARKETS_MESSAGE}")
            return ScanResult(
                outcome=ScanOutcome.NO_MARKETS,
                message=NO_MARKETS_MESSAGE,
                completed_at=_now(),
                **result_fields,
            )

        # STEP 3: Price enrichment (concurrent, best-effort)
        enriched = enrich_candidates(
            candidates,
            max_enriched=cfg.max_enriched,
            timeout=cfg.quote_timeout_seconds,
            session=self.session,
            verbose=self.verbose,
        )
        result_fields["candidates_enriched"] = sum(1 for e in enriched if e.price_source == "quote")

        if dry_run:
            self._log(f"\n🔍 DRY RUN - Would judge {len(enriched)} markets:")
            for i, c in enumerate(enriched, 1):
                q_short = c.question[:55] + "..." if len(c.question) > 55 else c.question
                self._log(f"   {i}. {q_short} ({c.yes_price:.1%})")
            return ScanResult(
                outcome=ScanOutcome.DRY_RUN,
                message=f"Dry run: {len(enriched)} markets would be judged",
                completed_at=_now(),
                **result_fields,
            )

        # STEP 4: Fair-value estimation (raises JudgeError)
        usage = UsageStats()
        estimate = estimate_fair_values(
            topic.name,
            enriched,
            self.judge_client,
            model=cfg.judge_model,
            max_completion_tokens=cfg.judge_max_completion_tokens,
            usage_stats=usage,
            verbose=self.verbose,
        )
        result_fields.update(
            opinions_received=len(estimate.opinions),
            opinions_rejected=len(estimate.rejected),
            judge_model=estimate.model,
            judge_tokens=usage.total_tokens,
            judge_cost_usd=usage.estimated_cost,
        )

        # STEP 5: Edges and materiality gate
        drafts = compute_signals(
            topic.id,
            enriched,
            estimate.opinions,
            min_edge_bps=cfg.min_edge_bps,
            verbose=self.verbose,
        )

        if not drafts:
            self._log(f"⚪ {NO_MISPRICINGS_MESSAGE}")
            return ScanResult(
                outcome=ScanOutcome.NO_MISPRICINGS,
                message=NO_MISPRICINGS_MESSAGE,
                completed_at=_now(),
                **result_fields,
            )

        # STEP 6: Store
        signals = self.store.create_signals(drafts)
        self.store.update_topic_signal_count(topic.id)

        message = f"Found {len(signals)} new signals"
        self._log(f"✅ {message}")
        self._log(f"   💰 Judge: {usage.summary()}")

        return ScanResult(
            outcome=ScanOutcome.SIGNALS_FOUND,
            message=message,
            created_signal_count=len(signals),
            signals=signals,
            completed_at=_now(),
            **result_fields,
        )


def scan(
    topic_id: str,
    *,
    store: SignalSink,
    judge_client: OpenAI,
    settings: Settings = default_settings,
    session: Optional[requests.Session] = None,
    verbose: bool = False,
) -> ScanResult:
    """Run one scan. See ScanOrchestrator.scan."""
    orchestrator = ScanOrchestrator(store, judge_client, settings=settings, session=session, verbose=verbose)
    return orchestrator.scan(topic_id)


def main():
    parser = argparse.ArgumentParser(
        description="Scan a topic for mispriced Polymarket listings"
    )
    parser.add_argument("topic_id", help="Topic id to scan")
    parser.add_argument(
        "--dry-run", action="store_true",
        help="Fetch and filter markets, but don't call the judge"
    )
    parser.add_argument(
        "--quiet", "-q", action="store_true",
        help="Minimal output"
    )
    args = parser.parse_args()

    from db.connection import init_db, session_scope
    from db.store import SignalStore

    init_db()
    judge_client = None if args.dry_run else build_judge_client(default_settings)

    with session_scope() as db:
        orchestrator = ScanOrchestrator(SignalStore(db), judge_client, verbose=not args.quiet)
        try:
            result = orchestrator.scan(args.topic_id, dry_run=args.dry_run)
        except TopicNotFoundError:
            print(f"❌ Topic not found: {args.topic_id}")
            sys.exit(1)
        except JudgeError as e:
            print(f"❌ Scan failed: {e}")
            sys.exit(2)

    print(f"\n{'='*70}")
    print(f"   {result.message}")
    print(f"   Listings: {result.listings_fetched} | Candidates: {result.candidates_selected} | "
          f"Quotes: {result.candidates_enriched} | Opinions: {result.opinions_received}")
    for s in result.signals:
        symbol = "🟢" if s.side == "YES" else "🔴"
        q_short = s.market_question[:50] + "..." if len(s.market_question) > 50 else s.market_question
        print(f"   {symbol} {s.side} {q_short}")
        print(f"      Market: {s.market_price:.1%} → Fair: {s.ai_fair_price:.1%} (+{s.edge_bps} bps)")


if __name__ == "__main__":
    main()
