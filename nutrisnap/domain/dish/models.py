"""
Dish domain models.

The vision guess produced once per photo and the user-facing analysis
aggregate built from it.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import List

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from nutrisnap.domain.nutrition.models import CaloriesRange
from nutrisnap.domain.shared.value_objects import Confidence, SubjectId

MAX_CANDIDATE_QUERIES = 5


class ImageMimeType(str, Enum):
    """Image formats accepted by the vision provider."""

    JPEG = "image/jpeg"
    PNG = "image/png"
    WEBP = "image/webp"

    @classmethod
    def from_path(cls, file_path: str) -> ImageMimeType:
        """
        Infer the MIME type from a file extension, defaulting to JPEG.

        Example:
            >>> assert ImageMimeType.from_path("photos/file_7.PNG") is ImageMimeType.PNG
            >>> assert ImageMimeType.from_path("photos/file_8") is ImageMimeType.JPEG
        """
        lower = file_path.lower()
        if lower.endswith(".png"):
            return cls.PNG
        if lower.endswith(".webp"):
            return cls.WEBP
        return cls.JPEG


class VisionGuess(BaseModel):
    """
    Vision provider output for one photo.

    ``dish`` is the display name (Russian); ``candidate_queries`` are
    English search strings for the nutrition database.

    Example:
        >>> guess = VisionGuess(
        ...     is_food=True,
        ...     dish="куриная грудка",
        ...     portion_grams=150,
        ...     candidate_queries=["chicken breast"],
        ...     confidence=Confidence.HIGH,
        ... )
        >>> assert guess.portion_grams == 150
    """

    model_config = ConfigDict(frozen=True)

    is_food: bool
    dish: str = ""
    portion_grams: int = Field(0, ge=0, description="Estimated portion weight")
    candidate_queries: List[str] = Field(default_factory=list)
    confidence: Confidence = Confidence.MEDIUM

    @field_validator("candidate_queries")
    @classmethod
    def cap_candidates(cls, v: List[str]) -> List[str]:
        """At most five candidate queries."""
        if len(v) > MAX_CANDIDATE_QUERIES:
            raise ValueError(f"At most {MAX_CANDIDATE_QUERIES} candidate queries, got {len(v)}")
        return v

    @model_validator(mode="after")
    def dish_required_for_food(self) -> VisionGuess:
        """Food guesses must name the dish."""
        if self.is_food and not self.dish.strip():
            raise ValueError("dish cannot be empty when is_food is true")
        return self


class DishAnalysis(BaseModel):
    """
    User-facing analysis of one photo.

    Immutable: corrections produce a new instance via ``model_copy``.
    """

    model_config = ConfigDict(frozen=True)

    is_food: bool
    dish: str
    weight_grams: int = Field(..., ge=0)
    calories: int = Field(..., ge=0)
    protein: float = Field(..., ge=0)
    fat: float = Field(..., ge=0)
    carbs: float = Field(..., ge=0)
    calories_range: CaloriesRange
    confidence: Confidence
    assumptions: List[str] = Field(default_factory=list)


class HistoryEntry(BaseModel):
    """One delivered analysis in a subject's history."""

    model_config = ConfigDict(frozen=True)

    subject_id: SubjectId
    analysis: DishAnalysis
    recorded_at: datetime
