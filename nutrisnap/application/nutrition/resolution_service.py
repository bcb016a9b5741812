"""
Nutrition Resolution Service.

Turns a vision guess (dish name, candidate queries, portion, confidence) into
a NutritionResult: database lookup first, LLM estimate as a last resort.

Design Pattern: Service Layer + Dependency Injection
"""

from typing import List, Optional, Sequence

import structlog

from nutrisnap.domain.nutrition.confidence import downgrade, range_for
from nutrisnap.domain.nutrition.models import NutrientProfile, NutritionResult, SearchHit
from nutrisnap.domain.nutrition.ports import (
    INutritionDatabaseClient,
    INutritionEstimator,
    ITranslator,
)
from nutrisnap.domain.nutrition.ranking import rank_hits
from nutrisnap.domain.nutrition.resolver import NutrientDetailResolver
from nutrisnap.domain.shared.errors import NoMatchError
from nutrisnap.domain.shared.value_objects import Confidence

logger = structlog.get_logger(__name__)

MAX_QUERIES = 6
MAX_CANDIDATES_PER_QUERY = 5

SOURCE_ASSUMPTION = "Источник: база USDA. {label}"
PORTION_ASSUMPTION = "Порция {grams} г (расчёт от 100 г)."
PER_SERVING_ASSUMPTION = "Значения в базе USDA могут быть указаны на порцию, а не на 100 г."
ESTIMATED_ASSUMPTION = "Совпадений в базе USDA нет; калорийность и БЖУ оценены нейросетью."


def build_queries(dish_name: str, candidate_queries: Sequence[str]) -> List[str]:
    """
    Ordered search queries: stripped candidates, then the dish name.

    Empty strings are skipped; duplicates are kept; capped at six.

    Example:
        >>> build_queries(" куриная грудка ", ["chicken breast", " "])
        ['chicken breast', 'куриная грудка']
    """
    queries = [c.strip() for c in candidate_queries if c.strip()]
    if dish_name.strip():
        queries.append(dish_name.strip())
    return queries[:MAX_QUERIES]


class NutritionResolutionService:
    """
    Orchestrates nutrition resolution.

    Flow:
    1. For each query: search, rank, try the top 5 hits in order
    2. First hit with usable nutrients wins; nothing else is tried
    3. Otherwise, if enabled, ask the fallback estimator
    4. Otherwise raise NoMatchError

    Candidate attempts are strictly sequential so the winner is always the
    best-ranked usable hit of the earliest query.

    Example:
        >>> service = NutritionResolutionService(database=usda_client)
        >>> result = await service.resolve(
        ...     "куриная грудка", ["chicken breast"], 150, Confidence.HIGH
        ... )
        >>> print(result.calories, result.calories_range)
    """

    def __init__(
        self,
        database: INutritionDatabaseClient,
        estimator: Optional[INutritionEstimator] = None,
        translator: Optional[ITranslator] = None,
        enable_fallback: bool = False,
    ) -> None:
        """
        Args:
            database: Nutrition database client
            estimator: Fallback estimator (optional capability)
            translator: Description translator (optional capability)
            enable_fallback: Whether the estimator may be used
        """
        self.database = database
        self.resolver = NutrientDetailResolver(database)
        self.estimator = estimator
        self.translator = translator
        self.enable_fallback = enable_fallback

    async def resolve(
        self,
        dish_name: str,
        candidate_queries: Sequence[str],
        portion_grams: int,
        vision_confidence: Confidence,
    ) -> NutritionResult:
        """
        Resolve nutrition for a recognised dish.

        Args:
            dish_name: Display name from vision
            candidate_queries: Database search strings from vision
            portion_grams: Estimated portion weight
            vision_confidence: Provisional confidence from vision

        Returns:
            NutritionResult

        Raises:
            NoMatchError: If no database path and no fallback succeeded
        """
        for query in build_queries(dish_name, candidate_queries):
            try:
                hits = await self.database.search_foods(query)
            except Exception as e:
                logger.warning("Search failed, trying next query", query=query, error=str(e))
                continue

            ranked = rank_hits(hits, query)
            for hit in ranked[:MAX_CANDIDATES_PER_QUERY]:
                try:
                    profile = await self.resolver.resolve(hit.external_id)
                except Exception as e:
                    logger.info(
                        "Candidate rejected, trying next",
                        query=query,
                        food_id=hit.external_id,
                        error=str(e),
                    )
                    continue

                return await self._from_database(hit, profile, portion_grams, vision_confidence)

        fallback = await self._estimate(dish_name, portion_grams)
        if fallback is not None:
            return fallback

        logger.warning("No nutrition match", dish=dish_name)
        raise NoMatchError("USDA_NO_MATCH")

    async def _from_database(
        self,
        hit: SearchHit,
        profile: NutrientProfile,
        portion_grams: int,
        vision_confidence: Confidence,
    ) -> NutritionResult:
        macros = self.resolver.scale(profile, portion_grams)

        confidence = vision_confidence
        if profile.may_be_per_serving:
            confidence = downgrade(confidence)

        label = await self._translate(profile.description or hit.description)

        assumptions = [SOURCE_ASSUMPTION.format(label=label)]
        if portion_grams != 100:
            assumptions.append(PORTION_ASSUMPTION.format(grams=portion_grams))
        if profile.may_be_per_serving:
            assumptions.append(PER_SERVING_ASSUMPTION)

        logger.info(
            "Resolved from database",
            food_id=hit.external_id,
            data_source=hit.data_source,
            calories=macros.calories,
            confidence=Confidence(confidence).value,
        )

        return NutritionResult(
            calories=macros.calories,
            protein=macros.protein,
            fat=macros.fat,
            carbs=macros.carbs,
            calories_range=range_for(macros.calories, confidence, True),
            confidence=confidence,
            assumptions=assumptions,
            from_database=True,
        )

    async def _translate(self, description: str) -> str:
        """Translated description, or the original on any failure."""
        if not description or self.translator is None:
            return description
        try:
            translated = await self.translator.translate_to_russian(description)
        except Exception as e:
            logger.warning("Translation failed, keeping original", error=str(e))
            return description
        return translated or description

    async def _estimate(self, dish_name: str, portion_grams: int) -> Optional[NutritionResult]:
        if not self.enable_fallback or self.estimator is None:
            return None
        try:
            estimated = await self.estimator.estimate_nutrition(dish_name, portion_grams)
        except Exception as e:
            logger.warning("Fallback estimate failed", dish=dish_name, error=str(e))
            return None

        logger.info("Resolved by fallback estimator", dish=dish_name, calories=estimated.calories)
        return NutritionResult(
            calories=estimated.calories,
            protein=estimated.protein,
            fat=estimated.fat,
            carbs=estimated.carbs,
            calories_range=range_for(estimated.calories, Confidence.LOW, False),
            confidence=Confidence.LOW,
            assumptions=[ESTIMATED_ASSUMPTION],
            from_database=False,
        )
