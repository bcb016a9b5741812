"""Ports (interfaces) for vision AI providers and the analysis history."""

from typing import List, Protocol, runtime_checkable

from nutrisnap.domain.dish.models import DishAnalysis, HistoryEntry, ImageMimeType, VisionGuess
from nutrisnap.domain.shared.value_objects import SubjectId


@runtime_checkable
class IVisionProvider(Protocol):
    """
    Interface for vision AI providers.

    Implementations can be:
    - OpenAI GPT-4o (infrastructure.ai.openai_provider)
    - Stub provider (for tests and local runs)
    """

    async def analyze_dish_from_image(
        self, image: bytes, mime_type: ImageMimeType = ImageMimeType.JPEG
    ) -> VisionGuess:
        """
        Recognise the dish and estimate its portion.

        Args:
            image: Raw image bytes
            mime_type: Image format

        Returns:
            VisionGuess

        Raises:
            VisionInvalidError: If output is unparsable after one stricter retry
        """
        ...


@runtime_checkable
class IHistoryRepository(Protocol):
    """Append-only log of delivered analyses."""

    async def add(self, subject_id: SubjectId, analysis: DishAnalysis) -> HistoryEntry:
        """Record an analysis; returns the stored entry."""
        ...

    async def list_for(self, subject_id: SubjectId) -> List[HistoryEntry]:
        """Entries for a subject, oldest first."""
        ...
