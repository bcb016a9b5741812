"""
Unit tests for provider selection and service wiring.
"""

from unittest.mock import MagicMock, patch

from nutrisnap.config import Settings
from nutrisnap.infrastructure.ai.openai_provider import OpenAIVisionProvider
from nutrisnap.infrastructure.providers.factory import (
    ServiceContainer,
    build_services,
    create_nutrition_database,
    create_vision_provider,
)
from nutrisnap.infrastructure.providers.stub_nutrition_database import StubNutritionDatabase
from nutrisnap.infrastructure.providers.stub_vision_provider import StubVisionProvider
from nutrisnap.infrastructure.usda.api_client import USDAApiClient


class TestCreateProviders:
    """Test settings-based selection."""

    def test_stubs_by_default(self) -> None:
        settings = Settings()

        assert isinstance(create_vision_provider(settings), StubVisionProvider)
        assert isinstance(create_nutrition_database(settings), StubNutritionDatabase)

    def test_usda_client(self) -> None:
        settings = Settings(nutrition_provider="usda", usda_api_key="key", http_timeout_ms=5000)

        client = create_nutrition_database(settings)

        assert isinstance(client, USDAApiClient)
        assert client.api_key == "key"
        assert client.timeout_seconds == 5.0

    def test_openai_provider(self) -> None:
        settings = Settings(vision_provider="openai", openai_api_key="sk-test", openai_model="gpt-4o-mini")

        with patch("nutrisnap.infrastructure.ai.openai_provider.AsyncOpenAI") as openai_cls:
            provider = create_vision_provider(settings)

        assert isinstance(provider, OpenAIVisionProvider)
        assert provider.model == "gpt-4o-mini"
        openai_cls.assert_called_once_with(api_key="sk-test", timeout=30.0, max_retries=0)


class TestBuildServices:
    """Test wiring."""

    def test_wires_stub_capabilities(self) -> None:
        services = build_services(Settings(enable_ai_fallback=True, rate_limit_interval_ms=3000))

        assert isinstance(services, ServiceContainer)
        assert services.resolution.estimator is services.vision
        assert services.resolution.translator is services.vision
        assert services.resolution.enable_fallback is True
        assert services.dish_analysis.rate_limit_interval_ms == 3000
        assert services.dialogs.ttl_seconds == 900

    def test_dialogs_without_ttl(self) -> None:
        services = build_services(Settings(dialog_ttl_seconds=None))

        assert services.dialogs.ttl_seconds is None

    def test_overrides(self) -> None:
        vision = StubVisionProvider()
        database = StubNutritionDatabase([])

        services = build_services(Settings(), vision=vision, database=database)

        assert services.vision is vision
        assert services.database is database

    async def test_context_manager_enters_and_exits_providers(self) -> None:
        database = MagicMock()
        database.__aenter__.return_value = database

        async with build_services(Settings(), database=database) as services:
            assert services.database is database
            database.__aenter__.assert_awaited_once()
            database.__aexit__.assert_not_awaited()

        database.__aexit__.assert_awaited_once()
