"""
Unit tests for search hit ranking.
"""

from nutrisnap.domain.nutrition.models import SearchHit
from nutrisnap.domain.nutrition.ranking import rank_hits, token_overlap, trust_tier


def _hit(food_id: int, description: str, data_source: str = None, score: float = None) -> SearchHit:
    return SearchHit(
        external_id=food_id,
        description=description,
        data_source=data_source,
        relevance_score=score,
    )


class TestTrustTier:
    """Test data-source tier mapping."""

    def test_known_tags(self) -> None:
        assert trust_tier("Foundation") == 0
        assert trust_tier("SR Legacy") == 1
        assert trust_tier("Survey (FNDDS)") == 2
        assert trust_tier("Branded") == 3

    def test_case_insensitive(self) -> None:
        assert trust_tier("FOUNDATION") == 0
        assert trust_tier("sr legacy") == 1

    def test_unknown_or_missing_tag_is_middle_tier(self) -> None:
        assert trust_tier("Experimental") == 2
        assert trust_tier(None) == 2
        assert trust_tier("") == 2


class TestTokenOverlap:
    """Test query/description similarity."""

    def test_share_of_query_tokens(self) -> None:
        assert token_overlap("chicken breast", "chicken breast roasted") == 1.0
        assert token_overlap("chicken breast", "chicken thigh") == 0.5

    def test_empty_query(self) -> None:
        assert token_overlap("   ", "chicken") == 0.0


class TestRankHits:
    """Test ranking order."""

    def test_tier_beats_similarity(self) -> None:
        """A tier-0 hit with no overlap still outranks a tier-1 exact match."""
        exact = _hit(1, "chicken breast", "SR Legacy")
        unrelated = _hit(2, "beef stew", "Foundation")

        ranked = rank_hits([exact, unrelated], "chicken breast")

        assert [h.external_id for h in ranked] == [2, 1]

    def test_similarity_orders_within_tier(self) -> None:
        weak = _hit(1, "chicken soup", "Foundation")
        strong = _hit(2, "chicken breast", "Foundation")

        ranked = rank_hits([weak, strong], "chicken breast")

        assert [h.external_id for h in ranked] == [2, 1]

    def test_relevance_score_preferred_over_overlap(self) -> None:
        low = _hit(1, "chicken breast", "Branded", score=10.0)
        high = _hit(2, "something else", "Branded", score=90.0)

        ranked = rank_hits([low, high], "chicken breast")

        assert [h.external_id for h in ranked] == [2, 1]

    def test_stable_for_equal_keys(self) -> None:
        hits = [_hit(i, "rice", "Survey (FNDDS)") for i in range(5)]

        ranked = rank_hits(hits, "rice")

        assert [h.external_id for h in ranked] == [0, 1, 2, 3, 4]

    def test_returns_new_list(self) -> None:
        hits = [_hit(1, "b", "Branded"), _hit(2, "a", "Foundation")]

        ranked = rank_hits(hits, "a")

        assert ranked is not hits
        assert [h.external_id for h in hits] == [1, 2]
