"""
Confidence and calorie range calculation.
"""

from nutrisnap.domain.nutrition.models import CaloriesRange
from nutrisnap.domain.shared.value_objects import Confidence, round_half_up

# Half-width of the band as a share of calories, for database-backed values.
DATABASE_RANGE_PCT = {
    Confidence.HIGH: 0.15,
    Confidence.MEDIUM: 0.25,
    Confidence.LOW: 0.40,
}

# LLM-estimated values always get the widest band.
ESTIMATED_RANGE_PCT = 0.40

MIN_HALF_WIDTH_KCAL = 20


def range_for(calories: int, confidence: Confidence, from_database: bool) -> CaloriesRange:
    """
    Calorie uncertainty band.

    Args:
        calories: Point estimate in kcal
        confidence: Confidence of the estimate
        from_database: False for fallback (LLM) estimates

    Returns:
        CaloriesRange clamped at 0

    Example:
        >>> assert range_for(200, Confidence.HIGH, True) == CaloriesRange(min=170, max=230)
        >>> assert range_for(10, Confidence.HIGH, True) == CaloriesRange(min=0, max=30)
    """
    if calories <= 0:
        return CaloriesRange(min=0, max=0)
    pct = DATABASE_RANGE_PCT[Confidence(confidence)] if from_database else ESTIMATED_RANGE_PCT
    delta = max(MIN_HALF_WIDTH_KCAL, round_half_up(calories * pct))
    return CaloriesRange(min=max(0, calories - delta), max=calories + delta)


def downgrade(confidence: Confidence) -> Confidence:
    """One step toward LOW; LOW stays LOW."""
    if confidence == Confidence.HIGH:
        return Confidence.MEDIUM
    return Confidence.LOW
