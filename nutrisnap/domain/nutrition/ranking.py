"""
Search result ranking.

Orders database hits by data-source trust tier, then by similarity to the
query. Curated reference data (Foundation, SR Legacy) is more reliable per
100 g than survey or branded entries, so tier always wins over similarity.
"""

from __future__ import annotations

import re
from typing import Iterable, List, Optional, Set

from nutrisnap.domain.nutrition.models import SearchHit

DEFAULT_TIER = 2

# Substring of the lower-cased dataType tag -> tier (0 = most trusted).
DATA_SOURCE_TIERS = (
    ("foundation", 0),
    ("sr legacy", 1),
    ("survey", 2),
    ("fndds", 2),
    ("branded", 3),
)

_WHITESPACE = re.compile(r"\s+")


def trust_tier(data_source: Optional[str]) -> int:
    """
    Trust tier of a data-source tag.

    Example:
        >>> assert trust_tier("Foundation") == 0
        >>> assert trust_tier("Survey (FNDDS)") == 2
        >>> assert trust_tier(None) == 2
    """
    if not data_source:
        return DEFAULT_TIER
    lower = data_source.lower()
    for key, tier in DATA_SOURCE_TIERS:
        if key in lower:
            return tier
    return DEFAULT_TIER


def _tokens(text: str) -> Set[str]:
    return {t for t in _WHITESPACE.sub(" ", text.lower()).split(" ") if t}


def token_overlap(query: str, description: str) -> float:
    """
    Share of query tokens present in the description.

    Example:
        >>> assert token_overlap("chicken breast", "Chicken breast, raw") == 0.5
        >>> assert token_overlap("", "anything") == 0.0
    """
    query_tokens = _tokens(query)
    if not query_tokens:
        return 0.0
    return len(query_tokens & _tokens(description)) / len(query_tokens)


def rank_hits(hits: Iterable[SearchHit], query_text: str) -> List[SearchHit]:
    """
    Rank hits by trust tier, then by score descending.

    The score is the hit's own relevance score when present, else the token
    overlap with the query. The sort is stable and returns a new list.

    Args:
        hits: Search hits in the order the database returned them
        query_text: Query the hits were returned for

    Returns:
        New list, best candidate first
    """
    query = query_text.strip().lower()

    def sort_key(hit: SearchHit) -> tuple:
        score = (
            hit.relevance_score
            if hit.relevance_score is not None
            else token_overlap(query, hit.description)
        )
        return (trust_tier(hit.data_source), -score)

    return sorted(hits, key=sort_key)
