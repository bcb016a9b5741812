"""Stub nutrition database for testing.

In-memory catalogue of search hits and nutrient profiles. No network.
"""

import re
from typing import Dict, Iterable, List, Optional, Set, Tuple

from nutrisnap.domain.nutrition.models import NutrientProfile, SearchHit
from nutrisnap.domain.nutrition.resolver import ensure_valid
from nutrisnap.domain.shared.errors import ExternalServiceError

CatalogueEntry = Tuple[SearchHit, NutrientProfile]

_WORD = re.compile(r"\w+")


def _words(text: str) -> Set[str]:
    return set(_WORD.findall(text.lower()))


def _entry(
    food_id: int,
    description: str,
    data_source: str,
    calories: float,
    protein: float,
    fat: float,
    carbs: float,
    reference_amount_g: Optional[float] = None,
) -> CatalogueEntry:
    hit = SearchHit(external_id=food_id, description=description, data_source=data_source)
    profile = NutrientProfile(
        calories_per_100g=calories,
        protein_per_100g=protein,
        fat_per_100g=fat,
        carbs_per_100g=carbs,
        reference_amount_g=reference_amount_g,
        description=description,
    )
    return hit, profile


# Per 100 g, FoodData Central values
DEFAULT_CATALOGUE: List[CatalogueEntry] = [
    _entry(171077, "Chicken, broiler or fryer, breast, meat only, raw", "Foundation", 165, 31.0, 3.6, 0.0),
    _entry(167513, "Cake, chocolate, prepared from recipe without frosting", "SR Legacy", 371, 5.3, 15.1, 53.4),
    _entry(2342695, "Salad, caesar", "Survey (FNDDS)", 190, 3.6, 16.2, 8.0),
    _entry(168927, "Pasta, cooked, enriched", "SR Legacy", 158, 5.8, 0.9, 30.9),
]


class StubNutritionDatabase:
    """
    Stub implementation of INutritionDatabaseClient.

    ``search_foods`` returns catalogue entries sharing at least one word with
    the query, in catalogue order.

    Example:
        >>> database = StubNutritionDatabase()
        >>> hits = await database.search_foods("chicken breast")
        >>> profile = await database.get_food_details(hits[0].external_id)
    """

    def __init__(self, catalogue: Optional[Iterable[CatalogueEntry]] = None) -> None:
        self._hits: List[SearchHit] = []
        self._profiles: Dict[int, NutrientProfile] = {}
        for hit, profile in DEFAULT_CATALOGUE if catalogue is None else catalogue:
            self._hits.append(hit)
            self._profiles[hit.external_id] = profile

    async def __aenter__(self) -> "StubNutritionDatabase":
        """Enter async context (no-op for stub)."""
        return self

    async def __aexit__(self, exc_type: object, exc_val: object, exc_tb: object) -> None:
        """Exit async context (no-op for stub)."""
        return None

    async def search_foods(self, query: str) -> List[SearchHit]:
        """Catalogue hits with any word in common with ``query``."""
        words = _words(query)
        return [hit for hit in self._hits if words & _words(hit.description)]

    async def get_food_details(self, food_id: int) -> NutrientProfile:
        """
        Profile for a catalogue id.

        Raises:
            ExternalServiceError: Unknown id (404)
            InvalidNutrientsError: All macros non-positive
        """
        profile = self._profiles.get(food_id)
        if profile is None:
            raise ExternalServiceError(f"Stub food {food_id} not found", status=404)
        return ensure_valid(profile, food_id)
