"""
In-memory keyed store implementation.

Simple per-process store with optional TTL per entry. Not shared between
processes; a distributed store (Redis or similar) can implement the same
IKeyedStore port.
"""

import time
from typing import Callable, Dict, Generic, Hashable, Optional, Tuple, TypeVar

import structlog

logger = structlog.get_logger(__name__)

V = TypeVar("V")


class InMemoryKeyedStore(Generic[V]):
    """In-memory implementation of IKeyedStore with lazy and swept expiry."""

    def __init__(self, name: str = "store", clock: Optional[Callable[[], float]] = None) -> None:
        """
        Args:
            name: Label used in log events
            clock: Seconds clock; defaults to time.time
        """
        self.name = name
        self._clock = clock
        # Storage: key -> (value, expires_at or None)
        self._entries: Dict[Hashable, Tuple[V, Optional[float]]] = {}

    def _now(self) -> float:
        return self._clock() if self._clock else time.time()

    def get(self, key: Hashable) -> Optional[V]:
        """Return the live value for ``key``; expired entries are dropped."""
        entry = self._entries.get(key)
        if entry is None:
            return None

        value, expires_at = entry
        if expires_at is not None and self._now() > expires_at:
            logger.debug("Entry expired", store=self.name, key=key)
            del self._entries[key]
            return None

        return value

    def set(self, key: Hashable, value: V, ttl_seconds: Optional[float] = None) -> None:
        """Store ``value`` under ``key``, replacing any previous entry."""
        expires_at = self._now() + ttl_seconds if ttl_seconds is not None else None
        self._entries[key] = (value, expires_at)

    def delete(self, key: Hashable) -> None:
        """Remove ``key`` if present."""
        self._entries.pop(key, None)

    def cleanup_expired(self) -> int:
        """
        Remove all expired entries.

        Returns:
            Number of entries removed
        """
        now = self._now()
        expired_keys = [
            key
            for key, (_, expires_at) in self._entries.items()
            if expires_at is not None and now > expires_at
        ]

        for key in expired_keys:
            del self._entries[key]

        if expired_keys:
            logger.info("Removed expired entries", store=self.name, count=len(expired_keys))

        return len(expired_keys)

    def clear(self) -> None:
        """Clear all entries (for testing)."""
        self._entries.clear()

    def size(self) -> int:
        """Number of stored entries, expired ones included until swept."""
        return len(self._entries)
