"""
Nutrition domain models.

Search hits, per-reference-amount nutrient profiles, scaled macros, calorie
ranges and the final resolution result.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from nutrisnap.domain.shared.value_objects import Confidence


class SearchHit(BaseModel):
    """
    Single nutrition database search hit.

    Transient: ranked and discarded after the first usable detail fetch.

    Example:
        >>> hit = SearchHit(
        ...     external_id=171077,
        ...     description="Chicken, broiler, breast, meat only, raw",
        ...     data_source="Foundation",
        ... )
        >>> assert hit.relevance_score is None
    """

    model_config = ConfigDict(frozen=True)

    external_id: int = Field(..., description="FoodData Central ID")
    description: str = Field(..., description="Food description")
    data_source: Optional[str] = Field(None, description="USDA dataType tag")
    relevance_score: Optional[float] = Field(None, description="Search engine score")


class NutrientProfile(BaseModel):
    """
    Macronutrients of a database record per reference amount.

    Values are expected per 100 g. When the record reports a reference
    amount other than 100 g the values may be per serving instead; that
    ambiguity is exposed through ``may_be_per_serving`` and must lower the
    confidence of any estimate built on it.

    Example:
        >>> profile = NutrientProfile(
        ...     calories_per_100g=165,
        ...     protein_per_100g=31.0,
        ...     fat_per_100g=3.6,
        ...     carbs_per_100g=0.0,
        ... )
        >>> assert profile.is_valid()
        >>> assert not profile.may_be_per_serving
    """

    model_config = ConfigDict(frozen=True)

    calories_per_100g: float = Field(..., ge=0, description="Energy in kcal")
    protein_per_100g: float = Field(..., ge=0, description="Protein in g")
    fat_per_100g: float = Field(..., ge=0, description="Total fat in g")
    carbs_per_100g: float = Field(..., ge=0, description="Carbohydrates in g")
    reference_amount_g: Optional[float] = Field(
        None, description="Amount the values are stated per (servingSize)"
    )
    description: str = Field("", description="Database item description")

    @property
    def has_reference_amount(self) -> bool:
        """True when the record reported a reference amount."""
        return self.reference_amount_g is not None

    @property
    def may_be_per_serving(self) -> bool:
        """True when a positive reference amount other than 100 g was reported."""
        ref = self.reference_amount_g
        return ref is not None and ref > 0 and ref != 100

    def is_valid(self) -> bool:
        """A profile with every macro <= 0 is a missing record, not a food."""
        return not (
            self.calories_per_100g <= 0
            and self.protein_per_100g <= 0
            and self.fat_per_100g <= 0
            and self.carbs_per_100g <= 0
        )


class ScaledMacros(BaseModel):
    """
    Macros for a whole portion.

    Also the shape returned by the fallback estimator.
    """

    model_config = ConfigDict(frozen=True)

    calories: int = Field(..., ge=0, description="Energy in kcal")
    protein: float = Field(..., ge=0, description="Protein in g")
    fat: float = Field(..., ge=0, description="Total fat in g")
    carbs: float = Field(..., ge=0, description="Carbohydrates in g")


class CaloriesRange(BaseModel):
    """
    Uncertainty band around a calorie estimate.

    Example:
        >>> band = CaloriesRange(min=211, max=285)
        >>> assert band.min <= band.max
    """

    model_config = ConfigDict(frozen=True)

    min: int = Field(..., description="Lower bound in kcal")
    max: int = Field(..., description="Upper bound in kcal")

    @model_validator(mode="after")
    def check_bounds(self) -> CaloriesRange:
        """Ensure min <= max."""
        if self.min > self.max:
            raise ValueError(f"Range min {self.min} exceeds max {self.max}")
        return self


class NutritionResult(BaseModel):
    """
    Outcome of one nutrition resolution.

    Produced exactly once per analysis request.
    """

    model_config = ConfigDict(frozen=True)

    calories: int = Field(..., ge=0)
    protein: float = Field(..., ge=0)
    fat: float = Field(..., ge=0)
    carbs: float = Field(..., ge=0)
    calories_range: CaloriesRange
    confidence: Confidence
    assumptions: List[str] = Field(default_factory=list)
    from_database: bool = Field(..., description="False when LLM-estimated")
