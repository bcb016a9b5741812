"""In-memory persistence implementations."""

from nutrisnap.infrastructure.persistence.in_memory.history_repository import (
    InMemoryHistoryRepository,
)

__all__ = [
    "InMemoryHistoryRepository",
]
