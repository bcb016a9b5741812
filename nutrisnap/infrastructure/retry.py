"""
Retry with jittered exponential backoff.

Wraps every outbound call to the nutrition database and the vision provider;
exported for the messaging front-end as well.

Key Features:
- 1 initial attempt + 3 retries
- Delays 300 / 900 / 1800 ms with +-20% jitter
- Retries only transient failures (network, timeout, 429, 5xx)
"""

from __future__ import annotations

import asyncio
import errno
import random
import re
import socket
from typing import Awaitable, Callable, Optional, Sequence, TypeVar

import aiohttp
import structlog
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception,
    stop_after_attempt,
)

logger = structlog.get_logger(__name__)

T = TypeVar("T")

DEFAULT_DELAYS_MS: Sequence[int] = (300, 900, 1800)
JITTER_SHARE = 0.2

RETRYABLE_ERRNO_NAMES = frozenset(
    {
        "ECONNRESET",
        "ETIMEDOUT",
        "ECONNREFUSED",
        "ENOTFOUND",
        "EAI_AGAIN",
        "EPROTO",
        "ENETUNREACH",
        "EHOSTUNREACH",
    }
)

RETRYABLE_EXCEPTION_TYPES = (
    ConnectionError,  # reset, refused, aborted
    TimeoutError,
    asyncio.TimeoutError,
    socket.gaierror,
    aiohttp.ClientConnectionError,
    aiohttp.ClientPayloadError,
)

_TEXT_SIGNALS = ("ECONNRESET", "ETIMEDOUT", "ECONNREFUSED", "network", "429")
_TEXT_5XX = (re.compile(r"failed: 5\d\d"), re.compile(r"status.*5\d\d"))


def _status_of(exc: BaseException) -> Optional[int]:
    for attr in ("status", "status_code"):
        value = getattr(exc, attr, None)
        if isinstance(value, int):
            return value
    return None


def _errno_name(exc: BaseException) -> Optional[str]:
    code = getattr(exc, "code", None)
    if isinstance(code, str):
        return code
    number = getattr(exc, "errno", None)
    if isinstance(number, int):
        return errno.errorcode.get(number)
    return None


def _structurally_retryable(exc: BaseException) -> Optional[bool]:
    """True/False when the exception carries a verdict, None when it has no signal."""
    flagged = getattr(exc, "retryable", None)
    if isinstance(flagged, bool):
        return flagged
    status = _status_of(exc)
    if status is not None:
        return status == 429 or 500 <= status < 600
    if isinstance(exc, RETRYABLE_EXCEPTION_TYPES):
        return True
    if _errno_name(exc) in RETRYABLE_ERRNO_NAMES:
        return True
    return None


def is_retryable(exc: BaseException) -> bool:
    """
    Classify a failure as transient.

    Checks, in order: structured status / exception type / errno on the
    exception, the same on its ``__cause__``, then the message text.

    Example:
        >>> from nutrisnap.domain.shared.errors import RateLimitError
        >>> assert is_retryable(RateLimitError("USDA API rate limit"))
        >>> assert not is_retryable(ValueError("bad input"))
    """
    verdict = _structurally_retryable(exc)
    if verdict is None and exc.__cause__ is not None:
        verdict = _structurally_retryable(exc.__cause__)
    if verdict is not None:
        return verdict

    message = str(exc)
    if any(signal in message for signal in _TEXT_SIGNALS):
        return True
    return any(pattern.search(message) for pattern in _TEXT_5XX)


def jitter(delay_ms: float, rng: Optional[random.Random] = None) -> float:
    """
    Spread a delay by up to +-20%, never below zero.

    Example:
        >>> assert 240 <= jitter(300) <= 360
    """
    spread = delay_ms * JITTER_SHARE
    source = rng or random
    return max(0.0, delay_ms + source.uniform(-spread, spread))


class JitteredDelays:
    """tenacity wait strategy: fixed delay schedule with jitter, in seconds."""

    def __init__(self, delays_ms: Sequence[float], rng: Optional[random.Random] = None) -> None:
        self.delays_ms = list(delays_ms)
        self.rng = rng

    def __call__(self, retry_state: RetryCallState) -> float:
        # attempt_number is the attempt that just failed (1-based)
        index = min(retry_state.attempt_number, len(self.delays_ms)) - 1
        return jitter(self.delays_ms[index], self.rng) / 1000.0


class RetryExecutor:
    """
    Retries an async operation on transient failures.

    The last failure is re-raised unchanged after exhaustion; non-retryable
    failures propagate on the first attempt without sleeping.

    Example:
        >>> executor = RetryExecutor()
        >>> hits = await executor.execute(lambda: client.search_foods("apple"))
    """

    def __init__(
        self,
        delays_ms: Sequence[float] = DEFAULT_DELAYS_MS,
        sleep: Optional[Callable[[float], Awaitable[None]]] = None,
        rng: Optional[random.Random] = None,
        classifier: Callable[[BaseException], bool] = is_retryable,
    ) -> None:
        """
        Args:
            delays_ms: Delay before each retry; its length sets the retry count
            sleep: Async sleep function (injectable for tests)
            rng: Random source for jitter
            classifier: Predicate deciding whether a failure is retried
        """
        self.delays_ms = list(delays_ms)
        self.max_attempts = len(self.delays_ms) + 1
        self._sleep = sleep or asyncio.sleep
        self._rng = rng
        self._classifier = classifier

    def _log_retry(self, retry_state: RetryCallState) -> None:
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        logger.warning(
            "Transient failure, retrying",
            attempt=retry_state.attempt_number,
            max_attempts=self.max_attempts,
            delay_s=round(retry_state.next_action.sleep, 3) if retry_state.next_action else None,
            error=str(exc),
        )

    async def execute(self, operation: Callable[[], Awaitable[T]]) -> T:
        """
        Run ``operation`` with retries.

        Args:
            operation: Zero-argument coroutine factory, called once per attempt

        Returns:
            The first successful result

        Raises:
            Exception: Whatever the last attempt raised
        """
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=JitteredDelays(self.delays_ms, self._rng),
            retry=retry_if_exception(self._classifier),
            before_sleep=self._log_retry,
            sleep=self._sleep,
            reraise=True,
        )

        async def attempt() -> T:
            return await operation()

        return await retrying(attempt)
