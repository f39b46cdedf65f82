"""
Tests for side-aware edge calculation and the materiality gate.
"""

from datetime import datetime

import pytest

from models.market import EnrichedCandidate
from models.opinion import JudgeOpinion
from src.compute_signals import (
    compute_edge,
    compute_signals,
    round_half_away_from_zero,
    parse_end_date,
)
from conftest import make_listing


def opinion(market_id, probability, side="YES", should_trade=True) -> JudgeOpinion:
    return JudgeOpinion(
        market_id=market_id,
        ai_probability=probability,
        side=side,
        explanation="Because.",
        should_trade=should_trade,
    )


class TestRounding:

    @pytest.mark.parametrize("value,expected", [
        (2.5, 3),
        (-2.5, -3),
        (2.4999, 2),
        (0.5, 1),
        (-0.4, 0),
        (2999.9999999999995, 3000),
    ])
    def test_ties_round_away_from_zero(self, value, expected):
        assert round_half_away_from_zero(value) == expected


class TestComputeEdge:
    """Tests for compute_edge()."""

    def test_side_flip_symmetry(self):
        """Same price and probability give opposite edges for YES and NO."""
        yes = compute_edge("YES", 0.30, 50)
        no = compute_edge("NO", 0.30, 50)

        assert yes.edge_bps == 2000
        assert no.edge_bps == -2000
        assert yes.side_price == pytest.approx(0.30)
        assert no.side_price == pytest.approx(0.70)
        assert no.fair_price == pytest.approx(0.50)

    def test_no_side_uses_complement_prices(self):
        edge = compute_edge("NO", 0.80, 60)

        assert edge.side_price == pytest.approx(0.20)
        assert edge.fair_price == pytest.approx(0.40)
        assert edge.edge_bps == 2000

    def test_unknown_side_raises(self):
        with pytest.raises(ValueError):
            compute_edge("MAYBE", 0.5, 50)


class TestComputeSignals:
    """Tests for compute_signals()."""

    def test_election_scenario(self):
        candidates = [EnrichedCandidate.from_listing(make_listing(
            "m1", question="Will X win?", yes_price=0.10, end_date="2026-11-03T00:00:00Z",
        ))]

        signals = compute_signals("t1", candidates, [opinion("m1", 40)])

        assert len(signals) == 1
        s = signals[0]
        assert s.side == "YES"
        assert s.market_price == pytest.approx(0.10)
        assert s.ai_fair_price == pytest.approx(0.40)
        assert s.edge_bps == 3000
        assert s.topic_id == "t1"
        assert s.end_date.year == 2026

    def test_gate_is_inclusive_at_300_bps(self):
        candidates = [
            make_listing("below", yes_price=0.10),
            make_listing("at", yes_price=0.10),
        ]
        opinions = [opinion("below", 12.99), opinion("at", 13)]

        signals = compute_signals("t1", candidates, opinions, min_edge_bps=300)

        assert [s.market_id for s in signals] == ["at"]
        assert signals[0].edge_bps == 300

    def test_negative_edge_never_emitted(self):
        candidates = [make_listing("m1", yes_price=0.30)]

        signals = compute_signals("t1", candidates, [opinion("m1", 50, side="NO")])

        assert signals == []

    def test_should_trade_false_is_skipped_even_with_large_edge(self):
        candidates = [make_listing("m1", yes_price=0.05)]

        signals = compute_signals("t1", candidates, [opinion("m1", 95, should_trade=False)])

        assert signals == []

    def test_opinion_for_unknown_candidate_is_skipped(self):
        candidates = [make_listing("m1", yes_price=0.05)]

        assert compute_signals("t1", candidates, [opinion("other", 95)]) == []

    def test_uses_enriched_price(self):
        listing = make_listing("m1", yes_price=0.10)
        enriched = EnrichedCandidate.from_listing(listing, quote=0.38)

        signals = compute_signals("t1", [enriched], [opinion("m1", 40)])

        assert signals == []


class TestParseEndDate:

    def test_parses_iso(self):
        assert parse_end_date("2026-01-31T12:00:00Z") == datetime.fromisoformat("2026-01-31T12:00:00+00:00")

    def test_bad_date_is_none(self):
        assert parse_end_date("someday") is None
        assert parse_end_date(None) is None
