"""
Per-subject rate limiting.

One analysis per subject per interval. Timestamps live in a keyed store so
stale subjects are evicted through the store TTL.
"""

import math
import time
from typing import Callable, Optional

import structlog

from nutrisnap.domain.shared.ports import IKeyedStore
from nutrisnap.domain.shared.value_objects import SubjectId

logger = structlog.get_logger(__name__)

DEFAULT_INTERVAL_MS = 10_000

# Records are kept this many intervals before eviction.
EVICTION_INTERVALS = 2


class SubjectRateLimiter:
    """
    Minimum-interval gate keyed by subject.

    Example:
        >>> limiter = SubjectRateLimiter(InMemoryKeyedStore(name="rate_limit"))
        >>> assert limiter.check_and_record(42)
        >>> assert not limiter.check_and_record(42)
    """

    def __init__(
        self,
        store: IKeyedStore[float],
        clock: Optional[Callable[[], float]] = None,
    ) -> None:
        """
        Args:
            store: Keyed store of last-allowed timestamps (ms)
            clock: Seconds clock; defaults to time.time
        """
        self.store = store
        self._clock = clock

    def _now_ms(self) -> float:
        return (self._clock() if self._clock else time.time()) * 1000

    def check_and_record(self, subject_id: SubjectId, interval_ms: int = DEFAULT_INTERVAL_MS) -> bool:
        """
        Allow the subject if its interval has elapsed, recording now on success.

        Read and write happen in one synchronous step.

        Returns:
            True if allowed
        """
        now = self._now_ms()
        last = self.store.get(subject_id)
        if last is not None and now - last < interval_ms:
            logger.info("Subject rate limited", subject_id=subject_id)
            return False

        ttl_seconds = EVICTION_INTERVALS * interval_ms / 1000
        self.store.set(subject_id, now, ttl_seconds=ttl_seconds)
        return True

    def remaining_seconds(self, subject_id: SubjectId, interval_ms: int = DEFAULT_INTERVAL_MS) -> int:
        """
        Whole seconds until the subject is allowed again, 0 if allowed now.
        """
        last = self.store.get(subject_id)
        if last is None:
            return 0
        elapsed = self._now_ms() - last
        return max(0, math.ceil((interval_ms - elapsed) / 1000))
