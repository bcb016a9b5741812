"""In-memory analysis history.

Provides an in-memory implementation of IHistoryRepository. Entries are
immutable models, so no copies are needed on read.
"""

from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional

from nutrisnap.domain.dish.models import DishAnalysis, HistoryEntry
from nutrisnap.domain.shared.value_objects import SubjectId


class InMemoryHistoryRepository:
    """
    In-memory implementation of IHistoryRepository port.

    Thread safety: NOT thread-safe (single event loop only)
    Persistence: Data lost on process restart (in-memory only)

    Example:
        >>> history = InMemoryHistoryRepository()
        >>> await history.add(42, analysis)
        >>> entries = await history.list_for(42)
    """

    def __init__(self, clock: Optional[Callable[[], datetime]] = None) -> None:
        """Initialize repository with empty storage."""
        self._clock = clock
        self._storage: Dict[SubjectId, List[HistoryEntry]] = {}

    async def add(self, subject_id: SubjectId, analysis: DishAnalysis) -> HistoryEntry:
        """
        Append an analysis to the subject's history.

        Args:
            subject_id: Subject identifier
            analysis: Delivered analysis

        Returns:
            Stored entry
        """
        recorded_at = self._clock() if self._clock else datetime.now(timezone.utc)
        entry = HistoryEntry(subject_id=subject_id, analysis=analysis, recorded_at=recorded_at)
        self._storage.setdefault(subject_id, []).append(entry)
        return entry

    async def list_for(self, subject_id: SubjectId) -> List[HistoryEntry]:
        """Entries for a subject, oldest first."""
        return list(self._storage.get(subject_id, []))

    def clear(self) -> None:
        """Clear all entries (for testing)."""
        self._storage.clear()
