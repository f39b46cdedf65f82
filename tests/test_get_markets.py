"""
Tests for listing discovery and parsing.
"""

import json
from unittest.mock import MagicMock, patch

import pytest
import requests

from src.get_markets import (
    parse_listing,
    find_yes_index,
    safe_float,
    fetch_active_listings,
    fetch_market_by_slug,
)
from src.market_cache import MarketCache
from conftest import make_gamma_market


def mock_response(payload, status_code=200):
    resp = MagicMock()
    resp.status_code = status_code
    resp.ok = status_code < 400
    resp.json.return_value = payload
    if status_code >= 400:
        resp.raise_for_status.side_effect = requests.HTTPError(f"{status_code} error")
    return resp


class TestParseListing:
    """Tests for parsing one Gamma market."""

    def test_parses_json_encoded_fields(self):
        """Should decode outcomes, prices and token ids from JSON strings."""
        listing = parse_listing(make_gamma_market("m1", prices=("0.42", "0.58")))

        assert listing is not None
        assert listing.id == "m1"
        assert listing.yes_price == pytest.approx(0.42)
        assert listing.yes_token_id == "m1-yes"
        assert listing.volume == 1000.0

    def test_unparseable_price_is_dropped_not_defaulted(self):
        """A garbage price must drop the listing, never fall back to 0.5."""
        assert parse_listing(make_gamma_market(prices=("abc", "0.5"))) is None
        assert parse_listing(make_gamma_market(outcomePrices="not json")) is None
        assert parse_listing(make_gamma_market(outcomePrices=None)) is None

    def test_out_of_range_yes_price_is_dropped(self):
        assert parse_listing(make_gamma_market(prices=("1.2", "-0.2"))) is None

    def test_closed_listing_is_excluded(self):
        assert parse_listing(make_gamma_market(closed=True)) is None

    def test_closed_listing_allowed_for_lookups(self):
        assert parse_listing(make_gamma_market(closed=True), include_closed=True) is not None

    def test_missing_question_is_dropped(self):
        assert parse_listing(make_gamma_market(question="")) is None

    def test_yes_outcome_found_by_name(self):
        item = make_gamma_market(
            outcomes=json.dumps(["No", "Yes"]),
            prices=("0.7", "0.3"),
        )
        listing = parse_listing(item)

        assert listing.yes_index == 1
        assert listing.yes_price == pytest.approx(0.3)
        assert listing.yes_token_id == "m1-no"

    def test_volume_falls_back_to_volume_num(self):
        item = make_gamma_market(volume=None, volumeNum=2500)
        assert parse_listing(item).volume == 2500.0

    @pytest.mark.parametrize("field,value", [
        ("question", 2028),
        ("description", {"html": "<p>Resolves YES if...</p>"}),
        ("slug", ["will-it-rain"]),
        ("endDate", 20261103),
    ])
    def test_wrong_typed_text_field_is_dropped(self, field, value):
        """A non-string text field drops the listing instead of raising."""
        assert parse_listing(make_gamma_market(**{field: value})) is None


class TestHelpers:

    def test_find_yes_index_defaults_to_first(self):
        assert find_yes_index(["Trump", "Harris"]) == 0
        assert find_yes_index(["no", " YES "]) == 1

    def test_safe_float_rejects_non_finite(self):
        assert safe_float("nan") is None
        assert safe_float("inf") is None
        assert safe_float("0.25") == 0.25
        assert safe_float(None) is None


class TestFetchActiveListings:
    """Tests for the catalog fetch."""

    @patch("src.get_markets.requests.get")
    def test_returns_parsed_listings_and_drops_bad_ones(self, mock_get):
        mock_get.return_value = mock_response([
            make_gamma_market("m1"),
            make_gamma_market("m2", prices=("oops", "0.5")),
            make_gamma_market("m3", closed=True),
        ])

        listings = fetch_active_listings(timeout=1, limit=10)

        assert [l.id for l in listings] == ["m1"]
        _, kwargs = mock_get.call_args
        assert kwargs["params"]["closed"] == "false"
        assert kwargs["params"]["limit"] == 10
        assert kwargs["timeout"] == 1

    @patch("src.get_markets.requests.get")
    def test_wrong_typed_listing_does_not_sink_the_batch(self, mock_get):
        mock_get.return_value = mock_response([
            make_gamma_market("good"),
            make_gamma_market("bad-desc", description={"html": "..."}),
            make_gamma_market("bad-question", question=2028),
        ])

        listings = fetch_active_listings(timeout=1)

        assert [l.id for l in listings] == ["good"]

    @patch("src.get_markets.requests.get")
    def test_network_failure_returns_empty(self, mock_get):
        mock_get.side_effect = requests.ConnectionError("unreachable")
        assert fetch_active_listings(timeout=1) == []

    @patch("src.get_markets.requests.get")
    def test_http_error_returns_empty(self, mock_get):
        mock_get.return_value = mock_response({"error": "down"}, status_code=503)
        assert fetch_active_listings(timeout=1) == []

    @patch("src.get_markets.requests.get")
    def test_non_list_body_returns_empty(self, mock_get):
        mock_get.return_value = mock_response({"markets": []})
        assert fetch_active_listings(timeout=1) == []

    @patch("src.get_markets.requests.get")
    def test_invalid_json_returns_empty(self, mock_get):
        resp = mock_response(None)
        resp.json.side_effect = ValueError("bad json")
        mock_get.return_value = resp
        assert fetch_active_listings(timeout=1) == []


class TestFetchMarketBySlug:
    """Tests for the cached single-market lookup."""

    def test_market_slug_hit_is_cached(self):
        session = MagicMock()
        session.get.return_value = mock_response([make_gamma_market("m1", slug="will-it-rain")])
        cache = MarketCache(ttl_seconds=60)

        first = fetch_market_by_slug("will-it-rain", cache, session=session)
        second = fetch_market_by_slug("will-it-rain", cache, session=session)

        assert first.id == "m1"
        assert second is first
        assert session.get.call_count == 1

    def test_falls_back_to_event_slug(self):
        session = MagicMock()
        session.get.side_effect = [
            mock_response([]),
            mock_response([{"slug": "rain-event", "markets": [make_gamma_market("m9", slug="rain-market")]}]),
        ]
        cache = MarketCache(ttl_seconds=60)

        market = fetch_market_by_slug("rain-event", cache, session=session)

        assert market.id == "m9"
        assert "rain-event" in cache
        assert "rain-market" in cache

    def test_non_object_event_is_not_found(self):
        session = MagicMock()
        session.get.side_effect = [mock_response([]), mock_response(["rain-event"])]

        assert fetch_market_by_slug("rain-event", MarketCache(60), session=session) is None

    def test_not_found_returns_none(self):
        session = MagicMock()
        session.get.return_value = mock_response([])

        assert fetch_market_by_slug("nope", MarketCache(60), session=session) is None

    def test_network_failure_returns_none(self):
        session = MagicMock()
        session.get.side_effect = requests.Timeout("slow")

        assert fetch_market_by_slug("slow", MarketCache(60), session=session) is None
