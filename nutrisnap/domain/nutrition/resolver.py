"""
Nutrient detail resolution and portion scaling.
"""

from __future__ import annotations

import structlog

from nutrisnap.domain.nutrition.models import NutrientProfile, ScaledMacros
from nutrisnap.domain.nutrition.ports import INutritionDatabaseClient
from nutrisnap.domain.shared.errors import InvalidNutrientsError
from nutrisnap.domain.shared.value_objects import round_half_up, round_one_decimal

logger = structlog.get_logger(__name__)


def ensure_valid(profile: NutrientProfile, food_id: int) -> NutrientProfile:
    """
    Reject profiles whose four macros are all non-positive.

    Raises:
        InvalidNutrientsError: For unusable records, whatever the reference amount
    """
    if not profile.is_valid():
        raise InvalidNutrientsError(f"USDA_INVALID_NUTRIENTS: food {food_id}")
    return profile


def scale_profile(profile: NutrientProfile, portion_grams: float) -> ScaledMacros:
    """
    Scale per-100g macros to a portion.

    Calories round to an integer, the other macros to one decimal. The
    profile is treated as per 100 g even when ``may_be_per_serving`` is set;
    recording that ambiguity is the caller's job.

    Example:
        >>> profile = NutrientProfile(
        ...     calories_per_100g=200, protein_per_100g=10.0,
        ...     fat_per_100g=5.0, carbs_per_100g=30.0,
        ... )
        >>> scaled = scale_profile(profile, 50)
        >>> assert scaled.calories == 100
        >>> assert scaled.carbs == 15.0
    """
    factor = portion_grams / 100
    return ScaledMacros(
        calories=round_half_up(profile.calories_per_100g * factor),
        protein=round_one_decimal(profile.protein_per_100g * factor),
        fat=round_one_decimal(profile.fat_per_100g * factor),
        carbs=round_one_decimal(profile.carbs_per_100g * factor),
    )


class NutrientDetailResolver:
    """
    Fetches and validates nutrient details for a ranked candidate.

    Example:
        >>> resolver = NutrientDetailResolver(usda_client)
        >>> profile = await resolver.resolve(171077)
        >>> macros = resolver.scale(profile, 150)
    """

    def __init__(self, client: INutritionDatabaseClient) -> None:
        self.client = client

    async def resolve(self, food_id: int) -> NutrientProfile:
        """
        Fetch the profile of one record.

        Raises:
            InvalidNutrientsError: If all four macros are non-positive
            ExternalServiceError: If the fetch fails
        """
        profile = await self.client.get_food_details(food_id)
        ensure_valid(profile, food_id)
        if profile.may_be_per_serving:
            logger.info(
                "Reference amount differs from 100 g",
                food_id=food_id,
                reference_amount_g=profile.reference_amount_g,
            )
        return profile

    @staticmethod
    def scale(profile: NutrientProfile, portion_grams: float) -> ScaledMacros:
        """Scale ``profile`` to ``portion_grams`` (see ``scale_profile``)."""
        return scale_profile(profile, portion_grams)
