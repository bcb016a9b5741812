"""
Integration tests: photo -> analysis -> clarification with stub providers.

Exercises the real wiring from build_services; no network.
"""

from typing import Any

import pytest

from nutrisnap.config import Settings
from nutrisnap.domain.dish.models import VisionGuess
from nutrisnap.domain.nutrition.models import CaloriesRange
from nutrisnap.domain.shared.errors import NoMatchError, SubjectRateLimitedError
from nutrisnap.domain.shared.value_objects import Confidence
from nutrisnap.infrastructure.providers.factory import build_services
from nutrisnap.infrastructure.providers.stub_vision_provider import StubVisionProvider

pytestmark = pytest.mark.integration

CAKE_GUESS = VisionGuess(
    is_food=True,
    dish="chocolate cake",
    portion_grams=100,
    candidate_queries=["chocolate cake"],
    confidence=Confidence.MEDIUM,
)


class TestPhotoFlow:
    """End-to-end flows over stub providers."""

    async def test_chicken_breast(self, fake_clock: Any) -> None:
        async with build_services(Settings(), clock=fake_clock) as services:
            analysis = await services.dish_analysis.analyze_from_image(b"photo", 42)

            assert analysis.calories == 248
            assert analysis.calories_range == CaloriesRange(min=211, max=285)
            assert analysis.confidence == Confidence.HIGH
            assert analysis.assumptions[0] == "Источник: база USDA. Куриная грудка, сырая"
            assert services.dialogs.offer(42, analysis) is None
            assert len(await services.history.list_for(42)) == 1

    async def test_second_photo_is_rate_limited(self, fake_clock: Any) -> None:
        services = build_services(Settings(), clock=fake_clock)
        await services.dish_analysis.analyze_from_image(b"photo", 42)

        fake_clock.advance(4)
        with pytest.raises(SubjectRateLimitedError) as exc_info:
            await services.dish_analysis.analyze_from_image(b"photo", 42)
        assert exc_info.value.remaining_seconds == 6

        fake_clock.advance(6)
        assert (await services.dish_analysis.analyze_from_image(b"photo", 42)).calories == 248

    @pytest.mark.parametrize("answer,calories,fat", [("yes", 464, 20), ("no", 371, 15.1)])
    async def test_cake_clarification(self, fake_clock: Any, answer: str, calories: int, fat: float) -> None:
        services = build_services(Settings(), vision=StubVisionProvider(guess=CAKE_GUESS), clock=fake_clock)

        analysis = await services.dish_analysis.analyze_from_image(b"photo", 7)
        assert analysis.calories == 371
        assert analysis.calories_range == CaloriesRange(min=278, max=464)

        question = services.dialogs.offer(7, analysis)
        assert question is not None
        assert question.id == "cream"

        corrected = services.dialogs.answer(7, question.id, answer)

        assert corrected.calories == calories
        assert corrected.fat == fat
        assert services.dialogs.pending(7) is None

    async def test_unknown_dish(self, fake_clock: Any) -> None:
        guess = VisionGuess(is_food=True, dish="хачапури", portion_grams=250, candidate_queries=["khachapuri"])
        services = build_services(Settings(), vision=StubVisionProvider(guess=guess), clock=fake_clock)

        with pytest.raises(NoMatchError):
            await services.dish_analysis.analyze_from_image(b"photo", 1)

    async def test_unknown_dish_with_fallback(self, fake_clock: Any) -> None:
        guess = VisionGuess(is_food=True, dish="хачапури", portion_grams=250, candidate_queries=["khachapuri"])
        services = build_services(
            Settings(enable_ai_fallback=True), vision=StubVisionProvider(guess=guess), clock=fake_clock
        )

        analysis = await services.dish_analysis.analyze_from_image(b"photo", 1)

        assert analysis.calories == 500
        assert analysis.confidence == Confidence.LOW
        assert analysis.calories_range == CaloriesRange(min=300, max=700)
