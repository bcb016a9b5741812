"""
OpenAI provider - implements IVisionProvider, INutritionEstimator and ITranslator.

Key Features:
- JSON response mode for vision and estimation
- One stricter-prompt retry on unparsable vision output
- OpenAI errors mapped to typed ExternalServiceError subclasses and retried
  with jittered backoff (the SDK's own retries are disabled)
- Best-effort translation that never raises
"""

import base64
from typing import Any, Dict, List, Optional

import openai
import structlog
from openai import AsyncOpenAI

from nutrisnap.domain.dish.models import ImageMimeType, VisionGuess
from nutrisnap.domain.nutrition.models import ScaledMacros
from nutrisnap.domain.shared.errors import (
    ExternalServiceError,
    RateLimitError,
    ServiceUnavailableError,
    TimeoutError,
    VisionInvalidError,
)
from nutrisnap.infrastructure.ai.prompts import (
    VISION_STRICT_USER_PROMPT,
    VISION_SYSTEM_PROMPT,
    VISION_USER_PROMPT,
    estimate_prompt,
    translate_prompt,
)
from nutrisnap.infrastructure.ai.response_parser import (
    parse_macros_payload,
    parse_vision_payload,
)
from nutrisnap.infrastructure.retry import RetryExecutor

logger = structlog.get_logger(__name__)


class OpenAIVisionProvider:
    """
    GPT-4o adapter for dish recognition, fallback estimates and translation.

    Example:
        >>> provider = OpenAIVisionProvider(api_key="sk-...")
        >>> guess = await provider.analyze_dish_from_image(image_bytes, ImageMimeType.JPEG)
        >>> print(guess.dish, guess.portion_grams)
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = "gpt-4o",
        timeout_seconds: float = 30.0,
        retry_executor: Optional[RetryExecutor] = None,
        client: Optional[AsyncOpenAI] = None,
    ) -> None:
        """
        Args:
            api_key: OpenAI API key (ignored when ``client`` is given)
            model: Vision-capable chat model
            timeout_seconds: Per-request timeout
            retry_executor: Retry policy for transient failures
            client: Pre-configured AsyncOpenAI client (for testing)
        """
        self._client = client or AsyncOpenAI(
            api_key=api_key,
            timeout=timeout_seconds,
            max_retries=0,
        )
        self.model = model
        self.retry_executor = retry_executor or RetryExecutor()

    async def _complete_once(self, messages: List[Dict[str, Any]], json_mode: bool) -> str:
        params: Dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "temperature": 0.2,
            "max_tokens": 800,
        }
        if json_mode:
            params["response_format"] = {"type": "json_object"}

        try:
            completion = await self._client.chat.completions.create(**params)
        except openai.APITimeoutError as e:
            raise TimeoutError(f"OpenAI timeout: {e}") from e
        except openai.APIConnectionError as e:
            raise ServiceUnavailableError(f"OpenAI network error: {e}") from e
        except openai.RateLimitError as e:
            raise RateLimitError(f"OpenAI rate limit: {e}") from e
        except openai.APIStatusError as e:
            if e.status_code >= 500:
                raise ServiceUnavailableError(
                    f"OpenAI failed: {e.status_code}", status=e.status_code
                ) from e
            raise ExternalServiceError(
                f"OpenAI failed: {e.status_code} {e.message}", status=e.status_code
            ) from e

        return (completion.choices[0].message.content or "").strip()

    async def _complete(self, messages: List[Dict[str, Any]], json_mode: bool = True) -> str:
        return await self.retry_executor.execute(lambda: self._complete_once(messages, json_mode))

    def _vision_messages(self, image: bytes, mime_type: ImageMimeType, user_text: str) -> List[Dict[str, Any]]:
        encoded = base64.b64encode(image).decode("ascii")
        return [
            {"role": "system", "content": VISION_SYSTEM_PROMPT},
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": user_text},
                    {
                        "type": "image_url",
                        "image_url": {"url": f"data:{ImageMimeType(mime_type).value};base64,{encoded}"},
                    },
                ],
            },
        ]

    async def analyze_dish_from_image(
        self, image: bytes, mime_type: ImageMimeType = ImageMimeType.JPEG
    ) -> VisionGuess:
        """
        Recognise the dish on a photo.

        Raises:
            VisionInvalidError: If both the regular and the strict prompt
                produce unparsable output
            ExternalServiceError: On API failures after retries
        """
        for attempt, user_text in enumerate((VISION_USER_PROMPT, VISION_STRICT_USER_PROMPT), start=1):
            content = await self._complete(self._vision_messages(image, mime_type, user_text))
            try:
                guess = parse_vision_payload(content)
            except ValueError as e:
                logger.warning("Unparsable vision output", attempt=attempt, error=str(e))
                continue

            logger.info(
                "Dish recognised",
                is_food=guess.is_food,
                dish=guess.dish,
                portion_grams=guess.portion_grams,
                confidence=guess.confidence.value,
            )
            return guess

        raise VisionInvalidError("Invalid JSON from vision")

    async def estimate_nutrition(self, dish: str, portion_grams: int) -> ScaledMacros:
        """
        Estimate whole-portion macros from the dish name.

        Raises:
            ValueError: If the output holds no JSON object
            ExternalServiceError: On API failures after retries
        """
        content = await self._complete(
            [{"role": "user", "content": estimate_prompt(dish, portion_grams)}]
        )
        return parse_macros_payload(content)

    async def translate_to_russian(self, text: str) -> str:
        """
        Short Russian rendering of ``text``; the input itself on any failure.
        """
        source = text.strip()
        if not source:
            return ""
        try:
            content = await self._complete(
                [{"role": "user", "content": translate_prompt(source)}], json_mode=False
            )
        except Exception as e:
            logger.warning("Translation failed, keeping original", error=str(e))
            return source

        translated = content.strip().strip("\"'").strip()
        return translated or source
