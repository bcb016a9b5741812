"""Provider factory and service wiring.

Settings-based provider selection with stubs as the safe default.
Strategy:
- .env (runtime): VISION_PROVIDER=openai, NUTRITION_PROVIDER=usda
- tests: VISION_PROVIDER=stub, NUTRITION_PROVIDER=stub (or unset)

Usage:
    from nutrisnap.config import load_settings
    from nutrisnap.infrastructure.providers.factory import build_services

    async with build_services(load_settings()) as services:
        analysis = await services.dish_analysis.analyze_from_image(photo, 42)
        question = services.dialogs.offer(42, analysis)
"""

from contextlib import AsyncExitStack
from dataclasses import dataclass, field
from typing import Callable, Optional

import structlog

from nutrisnap.application.clarification.dialog_service import ClarificationDialogService
from nutrisnap.application.dish.analysis_service import DishAnalysisService
from nutrisnap.application.nutrition.resolution_service import NutritionResolutionService
from nutrisnap.config import Settings
from nutrisnap.domain.dish.ports import IVisionProvider
from nutrisnap.domain.nutrition.ports import (
    INutritionDatabaseClient,
    INutritionEstimator,
    ITranslator,
)
from nutrisnap.infrastructure.ai.openai_provider import OpenAIVisionProvider
from nutrisnap.infrastructure.persistence.in_memory import InMemoryHistoryRepository
from nutrisnap.infrastructure.providers.stub_nutrition_database import StubNutritionDatabase
from nutrisnap.infrastructure.providers.stub_vision_provider import StubVisionProvider
from nutrisnap.infrastructure.rate_limit import SubjectRateLimiter
from nutrisnap.infrastructure.store.in_memory_store import InMemoryKeyedStore
from nutrisnap.infrastructure.usda.api_client import USDAApiClient

logger = structlog.get_logger(__name__)


def create_vision_provider(settings: Settings) -> IVisionProvider:
    """Create vision provider based on ``settings.vision_provider``.

    Values:
        - "openai": GPT-4o (requires OPENAI_API_KEY)
        - "stub": Stub provider (default)
    """
    if settings.vision_provider == "openai":
        return OpenAIVisionProvider(
            api_key=settings.openai_api_key,
            model=settings.openai_model,
            timeout_seconds=settings.http_timeout_seconds,
        )

    # Default: stub (safe fallback)
    return StubVisionProvider()


def create_nutrition_database(settings: Settings) -> INutritionDatabaseClient:
    """Create nutrition database client based on ``settings.nutrition_provider``.

    Values:
        - "usda": USDA FoodData Central (requires USDA_API_KEY)
        - "stub": In-memory catalogue (default)
    """
    if settings.nutrition_provider == "usda":
        return USDAApiClient(
            api_key=settings.usda_api_key or "",
            timeout_seconds=settings.http_timeout_seconds,
        )

    # Default: stub (safe fallback)
    return StubNutritionDatabase()


@dataclass
class ServiceContainer:
    """
    Wired application services.

    Async context manager: entering opens provider sessions, exiting closes
    them.
    """

    settings: Settings
    vision: IVisionProvider
    database: INutritionDatabaseClient
    rate_limiter: SubjectRateLimiter
    history: InMemoryHistoryRepository
    resolution: NutritionResolutionService
    dish_analysis: DishAnalysisService
    dialogs: ClarificationDialogService
    _exit_stack: AsyncExitStack = field(default_factory=AsyncExitStack, repr=False)

    async def __aenter__(self) -> "ServiceContainer":
        for provider in (self.database, self.vision):
            if hasattr(provider, "__aenter__"):
                await self._exit_stack.enter_async_context(provider)
        return self

    async def __aexit__(self, *args: object) -> None:
        await self._exit_stack.aclose()


def build_services(
    settings: Settings,
    vision: Optional[IVisionProvider] = None,
    database: Optional[INutritionDatabaseClient] = None,
    clock: Optional[Callable[[], float]] = None,
) -> ServiceContainer:
    """
    Wire every service from settings.

    The vision provider doubles as estimator and translator when it
    implements those ports.

    Args:
        settings: Runtime settings
        vision: Vision provider override (default: from settings)
        database: Database client override (default: from settings)
        clock: Seconds clock for the rate limiter and stores

    Returns:
        ServiceContainer
    """
    vision = vision or create_vision_provider(settings)
    database = database or create_nutrition_database(settings)

    estimator = vision if isinstance(vision, INutritionEstimator) else None
    translator = vision if isinstance(vision, ITranslator) else None

    rate_limiter = SubjectRateLimiter(InMemoryKeyedStore(name="rate_limit", clock=clock), clock=clock)
    history = InMemoryHistoryRepository()
    resolution = NutritionResolutionService(
        database=database,
        estimator=estimator,
        translator=translator,
        enable_fallback=settings.enable_ai_fallback,
    )
    dish_analysis = DishAnalysisService(
        vision=vision,
        resolution=resolution,
        rate_limiter=rate_limiter,
        history=history,
        rate_limit_interval_ms=settings.rate_limit_interval_ms,
    )
    dialogs = ClarificationDialogService(
        InMemoryKeyedStore(name="dialogs", clock=clock),
        ttl_seconds=settings.dialog_ttl_seconds,
    )

    logger.info(
        "Services built",
        vision_provider=type(vision).__name__,
        nutrition_provider=type(database).__name__,
        ai_fallback=settings.enable_ai_fallback,
    )

    return ServiceContainer(
        settings=settings,
        vision=vision,
        database=database,
        rate_limiter=rate_limiter,
        history=history,
        resolution=resolution,
        dish_analysis=dish_analysis,
        dialogs=dialogs,
    )
