"""
Tests for the topic relevance filter.
"""

from src.filter_markets import matches_keyword, match_listings, select_candidates
from conftest import make_listing


class TestMatchesKeyword:

    def test_whole_phrase_match(self):
        assert matches_keyword("will the fed cut rates in march?", "fed")

    def test_case_insensitive(self):
        assert matches_keyword("will bitcoin hit 100k?", "Bitcoin")

    def test_multi_word_matches_when_all_words_present(self):
        text = "super league final: which team wins the bowl?"
        assert matches_keyword(text, "super bowl")

    def test_multi_word_requires_every_significant_word(self):
        assert not matches_keyword("who wins the super league?", "super bowl")

    def test_short_words_are_ignored(self):
        """Words under three characters don't count toward the all-words rule."""
        assert matches_keyword("artificial general intelligence by 2030?", "ai artificial intelligence")

    def test_keyword_with_only_short_words_never_matches_by_words(self):
        assert not matches_keyword("ab cd", "a b")

    def test_blank_keyword_never_matches(self):
        assert not matches_keyword("anything", "   ")


class TestSelectCandidates:
    """Tests for candidate selection."""

    def test_searches_subtitle_and_description(self):
        listings = [
            make_listing("m1", question="Who wins?", subtitle="Presidential election"),
            make_listing("m2", question="Who wins?", description="Decided by the election board"),
            make_listing("m3", question="Who wins?"),
        ]
        assert [l.id for l in match_listings(listings, ["election"])] == ["m1", "m2"]

    def test_ranks_matches_by_volume_and_caps_at_ten(self):
        listings = [
            make_listing(f"m{i}", question=f"Election question {i}", volume=float(i * 100))
            for i in range(1, 16)
        ]

        candidates = select_candidates(listings, ["election"])

        assert len(candidates) == 10
        assert [c.id for c in candidates] == [f"m{i}" for i in range(15, 5, -1)]

    def test_no_fallback_when_enough_matches(self):
        listings = [make_listing(f"e{i}", question=f"Election {i}", volume=10.0) for i in range(3)]
        listings.append(make_listing("big", question="Unrelated", volume=1e9))

        candidates = select_candidates(listings, ["election"])

        assert {c.id for c in candidates} == {"e0", "e1", "e2"}

    def test_fallback_merges_top_volume_without_duplicates(self):
        """Fewer than three matches pulls in the top five by volume, deduplicated."""
        listings = [
            make_listing("match-big", question="Election winner?", volume=5000.0),
            make_listing("a", question="Q a", volume=4000.0),
            make_listing("b", question="Q b", volume=3000.0),
            make_listing("c", question="Q c", volume=2000.0),
            make_listing("d", question="Q d", volume=1000.0),
            make_listing("e", question="Q e", volume=500.0),
        ]

        candidates = select_candidates(listings, ["election"])
        ids = [c.id for c in candidates]

        assert ids == ["match-big", "a", "b", "c", "d"]
        assert len(ids) == len(set(ids))

    def test_fallback_with_no_matches(self):
        listings = [make_listing(f"m{i}", question="Q", volume=float(i)) for i in range(8)]

        candidates = select_candidates(listings, ["nothing matches this"])

        assert [c.id for c in candidates] == ["m7", "m6", "m5", "m4", "m3"]

    def test_empty_listings_give_no_candidates(self):
        assert select_candidates([], ["election"]) == []

    def test_fallback_respects_cap(self):
        listings = [
            make_listing("x1", question="Election one", volume=1.0),
            make_listing("x2", question="Election two", volume=2.0),
        ] + [make_listing(f"v{i}", question="Q", volume=100.0 + i) for i in range(5)]

        candidates = select_candidates(listings, ["election"], max_candidates=4)

        assert len(candidates) == 4
        assert [c.id for c in candidates[:2]] == ["x2", "x1"]
