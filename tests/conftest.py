"""
Shared fixtures for nutrisnap tests.
"""

from typing import Any, List
from unittest.mock import AsyncMock

import pytest

from nutrisnap.domain.dish.models import DishAnalysis
from nutrisnap.domain.nutrition.models import CaloriesRange, NutrientProfile, SearchHit
from nutrisnap.domain.nutrition.ports import INutritionDatabaseClient
from nutrisnap.domain.shared.value_objects import Confidence
from nutrisnap.infrastructure.retry import RetryExecutor


# ═══════════════════════════════════════════════════════════
# DOMAIN MODEL FIXTURES
# ═══════════════════════════════════════════════════════════


@pytest.fixture
def chicken_hit() -> SearchHit:
    """Foundation chicken breast hit."""
    return SearchHit(
        external_id=171077,
        description="Chicken, broiler or fryer, breast, meat only, raw",
        data_source="Foundation",
    )


@pytest.fixture
def chicken_profile() -> NutrientProfile:
    """Chicken breast per 100 g."""
    return NutrientProfile(
        calories_per_100g=165,
        protein_per_100g=31.0,
        fat_per_100g=3.6,
        carbs_per_100g=0.0,
        description="Chicken, broiler or fryer, breast, meat only, raw",
    )


@pytest.fixture
def cake_analysis() -> DishAnalysis:
    """Medium-confidence chocolate cake analysis."""
    return DishAnalysis(
        is_food=True,
        dish="chocolate cake",
        weight_grams=100,
        calories=371,
        protein=5.3,
        fat=15.1,
        carbs=53.4,
        calories_range=CaloriesRange(min=278, max=464),
        confidence=Confidence.MEDIUM,
        assumptions=["Источник: база USDA. Шоколадный торт"],
    )


@pytest.fixture
def chicken_analysis() -> DishAnalysis:
    """High-confidence chicken breast analysis."""
    return DishAnalysis(
        is_food=True,
        dish="куриная грудка",
        weight_grams=150,
        calories=248,
        protein=46.5,
        fat=5.4,
        carbs=0.0,
        calories_range=CaloriesRange(min=211, max=285),
        confidence=Confidence.HIGH,
    )


# ═══════════════════════════════════════════════════════════
# INFRASTRUCTURE FIXTURES
# ═══════════════════════════════════════════════════════════


class FakeSleep:
    """Async sleep replacement recording requested delays (seconds)."""

    def __init__(self) -> None:
        self.calls: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


class FakeClock:
    """Manually advanced seconds clock."""

    def __init__(self, start: float = 1_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def fake_sleep() -> FakeSleep:
    """Recording async sleep."""
    return FakeSleep()


@pytest.fixture
def fake_clock() -> FakeClock:
    """Manually advanced clock."""
    return FakeClock()


@pytest.fixture
def instant_retry(fake_sleep: FakeSleep) -> RetryExecutor:
    """Retry executor that never really sleeps."""
    return RetryExecutor(sleep=fake_sleep)


@pytest.fixture
def mock_database() -> Any:
    """Mock nutrition database client."""
    return AsyncMock(spec=INutritionDatabaseClient)
