"""Stub vision provider for testing.

Returns a fixed dish guess without calling external APIs. Also serves the
estimator and translator ports so local runs need no API key.
"""

from typing import Dict, Optional

from nutrisnap.domain.dish.models import ImageMimeType, VisionGuess
from nutrisnap.domain.nutrition.models import ScaledMacros
from nutrisnap.domain.shared.value_objects import Confidence, round_half_up

DEFAULT_GUESS = VisionGuess(
    is_food=True,
    dish="куриная грудка",
    portion_grams=150,
    candidate_queries=["chicken breast"],
    confidence=Confidence.HIGH,
)

# Whole-portion estimate per 100 g used by estimate_nutrition
_ESTIMATE_PER_100G = ScaledMacros(calories=200, protein=10.0, fat=8.0, carbs=20.0)

_TRANSLATIONS: Dict[str, str] = {
    "Chicken, broiler or fryer, breast, meat only, raw": "Куриная грудка, сырая",
    "Cake, chocolate, prepared from recipe without frosting": "Шоколадный торт",
    "Salad, caesar": "Салат цезарь",
    "Pasta, cooked, enriched": "Паста варёная",
}


class StubVisionProvider:
    """
    Stub implementation of IVisionProvider, INutritionEstimator and ITranslator.

    Example:
        >>> provider = StubVisionProvider()
        >>> guess = await provider.analyze_dish_from_image(b"...")
        >>> assert guess.dish == "куриная грудка"
    """

    def __init__(self, guess: Optional[VisionGuess] = None) -> None:
        """
        Args:
            guess: Guess returned for every image (default: chicken breast, 150 g)
        """
        self.guess = guess or DEFAULT_GUESS

    async def __aenter__(self) -> "StubVisionProvider":
        """Enter async context (no-op for stub)."""
        return self

    async def __aexit__(self, exc_type: object, exc_val: object, exc_tb: object) -> None:
        """Exit async context (no-op for stub)."""
        return None

    async def analyze_dish_from_image(
        self, image: bytes, mime_type: ImageMimeType = ImageMimeType.JPEG
    ) -> VisionGuess:
        """Return the configured guess whatever the image."""
        return self.guess

    async def estimate_nutrition(self, dish: str, portion_grams: int) -> ScaledMacros:
        """Flat per-100 g estimate scaled to the portion."""
        factor = portion_grams / 100
        return ScaledMacros(
            calories=round_half_up(_ESTIMATE_PER_100G.calories * factor),
            protein=round_half_up(_ESTIMATE_PER_100G.protein * factor),
            fat=round_half_up(_ESTIMATE_PER_100G.fat * factor),
            carbs=round_half_up(_ESTIMATE_PER_100G.carbs * factor),
        )

    async def translate_to_russian(self, text: str) -> str:
        """Known catalogue descriptions in Russian; anything else unchanged."""
        return _TRANSLATIONS.get(text.strip(), text.strip())
