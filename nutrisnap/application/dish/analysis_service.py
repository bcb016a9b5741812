"""
Dish Analysis Service.

Photo-to-analysis use case: rate-limit gate, vision recognition, nutrition
resolution and history recording.
"""

from typing import Optional

import structlog

from nutrisnap.application.nutrition.resolution_service import NutritionResolutionService
from nutrisnap.domain.dish.models import DishAnalysis, ImageMimeType, VisionGuess
from nutrisnap.domain.dish.ports import IHistoryRepository, IVisionProvider
from nutrisnap.domain.nutrition.models import CaloriesRange
from nutrisnap.domain.shared.errors import SubjectRateLimitedError
from nutrisnap.domain.shared.value_objects import SubjectId
from nutrisnap.infrastructure.rate_limit import DEFAULT_INTERVAL_MS, SubjectRateLimiter

logger = structlog.get_logger(__name__)

UNRECOGNIZED_DISH = "Не распознано"
NOT_FOOD_ASSUMPTION = "На фото не распознано блюдо."


class DishAnalysisService:
    """
    Analyzes a dish photo for a subject.

    Flow:
    1. Reject the subject if its rate-limit interval has not elapsed
    2. Recognise the dish (vision provider)
    3. Non-food photos get a zero analysis without any lookup
    4. Otherwise resolve nutrition and assemble the analysis
    5. Record the analysis in history

    Example:
        >>> service = DishAnalysisService(vision, resolution, limiter, history)
        >>> analysis = await service.analyze_from_image(photo, subject_id=42)
        >>> print(analysis.dish, analysis.calories)
    """

    def __init__(
        self,
        vision: IVisionProvider,
        resolution: NutritionResolutionService,
        rate_limiter: SubjectRateLimiter,
        history: IHistoryRepository,
        rate_limit_interval_ms: int = DEFAULT_INTERVAL_MS,
    ) -> None:
        self.vision = vision
        self.resolution = resolution
        self.rate_limiter = rate_limiter
        self.history = history
        self.rate_limit_interval_ms = rate_limit_interval_ms

    async def analyze_from_image(
        self,
        image: bytes,
        subject_id: SubjectId,
        mime_type: Optional[ImageMimeType] = None,
    ) -> DishAnalysis:
        """
        Analyze one photo.

        Args:
            image: Raw image bytes
            subject_id: Requesting subject
            mime_type: Image format (JPEG when omitted)

        Returns:
            DishAnalysis

        Raises:
            SubjectRateLimitedError: If the subject is inside its interval
            VisionInvalidError: If the vision output is unusable
            NoMatchError: If no nutrition source succeeded
        """
        if not self.rate_limiter.check_and_record(subject_id, self.rate_limit_interval_ms):
            remaining = self.rate_limiter.remaining_seconds(subject_id, self.rate_limit_interval_ms)
            raise SubjectRateLimitedError(remaining)

        guess = await self.vision.analyze_dish_from_image(image, mime_type or ImageMimeType.JPEG)

        if not guess.is_food:
            analysis = self._not_food(guess)
        else:
            nutrition = await self.resolution.resolve(
                guess.dish,
                guess.candidate_queries,
                guess.portion_grams,
                guess.confidence,
            )
            analysis = DishAnalysis(
                is_food=True,
                dish=guess.dish,
                weight_grams=guess.portion_grams,
                calories=nutrition.calories,
                protein=nutrition.protein,
                fat=nutrition.fat,
                carbs=nutrition.carbs,
                calories_range=nutrition.calories_range,
                confidence=nutrition.confidence,
                assumptions=nutrition.assumptions,
            )

        await self.history.add(subject_id, analysis)
        logger.info(
            "Dish analyzed",
            subject_id=subject_id,
            is_food=analysis.is_food,
            dish=analysis.dish,
            calories=analysis.calories,
        )
        return analysis

    @staticmethod
    def _not_food(guess: VisionGuess) -> DishAnalysis:
        return DishAnalysis(
            is_food=False,
            dish=guess.dish or UNRECOGNIZED_DISH,
            weight_grams=guess.portion_grams,
            calories=0,
            protein=0,
            fat=0,
            carbs=0,
            calories_range=CaloriesRange(min=0, max=0),
            confidence=guess.confidence,
            assumptions=[NOT_FOOD_ASSUMPTION],
        )
