"""
Ports for nutrition data collaborators.

Design Pattern: Ports & Adapters. The nutrition database is a required
collaborator; fallback estimation and translation are optional capabilities
injected separately, so callers branch on configuration rather than on
runtime attribute checks.
"""

from typing import List, Protocol, runtime_checkable

from nutrisnap.domain.nutrition.models import NutrientProfile, ScaledMacros, SearchHit


@runtime_checkable
class INutritionDatabaseClient(Protocol):
    """
    Port for a structured nutrition database (USDA FoodData Central).
    """

    async def search_foods(self, query: str) -> List[SearchHit]:
        """
        Search the database.

        Args:
            query: Search term (e.g., "chicken breast")

        Returns:
            Hits in database order

        Raises:
            ExternalServiceError: On non-success responses
        """
        ...

    async def get_food_details(self, food_id: int) -> NutrientProfile:
        """
        Fetch nutrients for one record.

        Args:
            food_id: External id from a SearchHit

        Returns:
            NutrientProfile with optional reference amount

        Raises:
            InvalidNutrientsError: If all four macros are non-positive
            ExternalServiceError: On non-success responses
        """
        ...


@runtime_checkable
class INutritionEstimator(Protocol):
    """Port for the fallback estimator (LLM guess from dish name and weight)."""

    async def estimate_nutrition(self, dish: str, portion_grams: int) -> ScaledMacros:
        """
        Estimate macros for the whole portion.

        Raises:
            Exception: Implementation-specific errors (network, parsing)
        """
        ...


@runtime_checkable
class ITranslator(Protocol):
    """Port for best-effort translation of database descriptions."""

    async def translate_to_russian(self, text: str) -> str:
        """
        Translate a short phrase.

        Best effort: implementations return the input unchanged on failure
        and never raise.
        """
        ...
