"""
USDA FoodData Central API client - implements INutritionDatabaseClient.

Key Features:
- Search (POST /foods/search) and detail (GET /food/{id}) lookups
- Typed errors per failure kind (429, 5xx, other 4xx, timeout, bad body)
- Retry with jittered backoff on transient failures
- Circuit breaker per endpoint (5 transient failures -> 60s open)
"""

import asyncio
import json
from typing import Any, Awaitable, Callable, Dict, List, Optional, TypeVar

import aiohttp
import structlog
from circuitbreaker import CircuitBreaker

from nutrisnap.domain.nutrition.models import NutrientProfile, SearchHit
from nutrisnap.domain.shared.errors import (
    ExternalServiceError,
    InvalidResponseError,
    RateLimitError,
    ServiceUnavailableError,
    TimeoutError,
)
from nutrisnap.infrastructure.retry import RetryExecutor, is_retryable
from nutrisnap.infrastructure.usda.mapper import USDAMapper

logger = structlog.get_logger(__name__)

T = TypeVar("T")

SEARCH_PAGE_SIZE = 10
CIRCUIT_FAILURE_THRESHOLD = 5
CIRCUIT_RECOVERY_TIMEOUT_S = 60


def _opens_circuit(thrown_type: type, thrown_value: BaseException) -> bool:
    """Only transient upstream failures count; a 404 for one stale id does not."""
    return issubclass(thrown_type, ExternalServiceError) and is_retryable(thrown_value)


class USDAApiClient:
    """
    USDA FoodData Central API client.

    Example:
        >>> async with USDAApiClient(api_key="...") as client:
        ...     hits = await client.search_foods("chicken breast")
        ...     profile = await client.get_food_details(hits[0].external_id)
    """

    BASE_URL = "https://api.nal.usda.gov/fdc/v1"

    def __init__(
        self,
        api_key: str,
        timeout_seconds: float = 30.0,
        retry_executor: Optional[RetryExecutor] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> None:
        """
        Initialize API client.

        Args:
            api_key: USDA API key
            timeout_seconds: Per-request timeout
            retry_executor: Retry policy (default: 4 attempts, 300/900/1800 ms)
            session: Pre-built aiohttp session (owned by the caller)
        """
        self.api_key = api_key
        self.timeout_seconds = timeout_seconds
        self.retry_executor = retry_executor or RetryExecutor()
        self._session = session
        self._owns_session = session is None

        self._search = self._protect("usda_search", self._search_once)
        self._details = self._protect("usda_details", self._details_once)

    async def __aenter__(self) -> "USDAApiClient":
        """Async context manager entry."""
        if self._session is None:
            self._session = aiohttp.ClientSession()
        return self

    async def __aexit__(self, *args: object) -> None:
        """Async context manager exit."""
        if self._session and self._owns_session:
            await self._session.close()
            self._session = None

    def _protect(
        self, name: str, fn: Callable[..., Awaitable[T]]
    ) -> Callable[..., Awaitable[T]]:
        """Wrap ``fn`` in retry, then in a circuit breaker counting exhausted transient calls."""
        breaker = CircuitBreaker(
            failure_threshold=CIRCUIT_FAILURE_THRESHOLD,
            recovery_timeout=CIRCUIT_RECOVERY_TIMEOUT_S,
            expected_exception=_opens_circuit,
            name=name,
        )

        async def call(*args: Any) -> T:
            return await self.retry_executor.execute(lambda: fn(*args))

        return breaker(call)

    def _require_session(self) -> aiohttp.ClientSession:
        if not self._session:
            msg = "Client not initialized, use async with"
            raise ExternalServiceError(msg)
        return self._session

    async def _read_json(self, response: aiohttp.ClientResponse, what: str) -> Dict[str, Any]:
        if response.status == 429:
            raise RateLimitError(f"USDA {what} failed: 429")

        if response.status >= 500:
            raise ServiceUnavailableError(
                f"USDA {what} failed: {response.status}", status=response.status
            )

        if response.status >= 400:
            body = await response.text()
            raise ExternalServiceError(
                f"USDA {what} failed: {response.status} {body[:200]}",
                status=response.status,
            )

        try:
            data = await response.json(content_type=None)
        except (aiohttp.ContentTypeError, json.JSONDecodeError, ValueError) as e:
            raise InvalidResponseError(f"USDA {what} returned a non-JSON body") from e

        if not isinstance(data, dict):
            raise InvalidResponseError(f"USDA {what} returned {type(data).__name__}")
        return data

    async def _send(self, what: str, request: Callable[[], Any]) -> Dict[str, Any]:
        try:
            async with request() as response:
                return await self._read_json(response, what)
        except asyncio.TimeoutError as e:
            raise TimeoutError(f"USDA {what} timeout after {self.timeout_seconds}s") from e
        except aiohttp.ClientConnectionError as e:
            raise ServiceUnavailableError(f"USDA {what} network error: {e}") from e

    async def _search_once(self, query: str) -> List[SearchHit]:
        session = self._require_session()
        url = f"{self.BASE_URL}/foods/search"
        data = await self._send(
            "search",
            lambda: session.post(
                url,
                params={"api_key": self.api_key},
                json={"query": query.strip(), "pageSize": SEARCH_PAGE_SIZE},
                timeout=aiohttp.ClientTimeout(total=self.timeout_seconds),
            ),
        )
        return USDAMapper.parse_search_hits(data)

    async def _details_once(self, food_id: int) -> NutrientProfile:
        session = self._require_session()
        url = f"{self.BASE_URL}/food/{food_id}"
        data = await self._send(
            "food details",
            lambda: session.get(
                url,
                params={"api_key": self.api_key},
                timeout=aiohttp.ClientTimeout(total=self.timeout_seconds),
            ),
        )
        return USDAMapper.to_nutrient_profile(food_id, data)

    async def search_foods(self, query: str) -> List[SearchHit]:
        """
        Search USDA database by free text.

        Args:
            query: Search term

        Returns:
            Hits in USDA order

        Raises:
            RateLimitError: On 429 after retries
            ServiceUnavailableError: On 5xx or network failure after retries
            TimeoutError: If every attempt timed out
            ExternalServiceError: On other 4xx (not retried)
            CircuitBreakerError: While the circuit is open
        """
        hits = await self._search(query)
        logger.info("USDA search complete", query=query, results_count=len(hits))
        return hits

    async def get_food_details(self, food_id: int) -> NutrientProfile:
        """
        Get nutrients for a specific food by FDC ID.

        Raises:
            InvalidNutrientsError: If all four macros are non-positive
            ExternalServiceError: See ``search_foods``
        """
        return await self._details(food_id)
