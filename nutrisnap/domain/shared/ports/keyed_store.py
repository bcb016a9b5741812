"""
Keyed store port.

Process-wide per-subject state (rate-limit timestamps, pending dialogs) goes
through this contract so a distributed store can replace the in-memory one
without touching resolution or dialog logic.

All methods are synchronous: each mutation is a single step with no
suspension point, which keeps read-then-write sequences atomic under asyncio.
"""

from typing import Hashable, Optional, Protocol, TypeVar, runtime_checkable

V = TypeVar("V")


@runtime_checkable
class IKeyedStore(Protocol[V]):
    """Port for keyed storage with optional per-entry TTL."""

    def get(self, key: Hashable) -> Optional[V]:
        """Return the live value for ``key`` or None if absent or expired."""
        ...

    def set(self, key: Hashable, value: V, ttl_seconds: Optional[float] = None) -> None:
        """Store ``value``, overwriting any previous entry.

        Args:
            key: Entry key (usually a subject id)
            value: Value to store
            ttl_seconds: Time-to-live; None keeps the entry until deleted
        """
        ...

    def delete(self, key: Hashable) -> None:
        """Remove ``key`` if present."""
        ...

    def cleanup_expired(self) -> int:
        """Remove expired entries.

        Returns:
            Number of entries removed
        """
        ...
