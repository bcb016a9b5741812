"""
Clarification policy.

Decides whether to ask a follow-up question, which one, and how an answer
corrects the delivered analysis. Pure functions; dialog state lives in
application.clarification.dialog_service.
"""

from __future__ import annotations

from typing import Dict, Optional, Tuple

from nutrisnap.domain.clarification.models import AnswerOption, ClarificationQuestion
from nutrisnap.domain.dish.models import DishAnalysis
from nutrisnap.domain.nutrition.models import CaloriesRange
from nutrisnap.domain.shared.value_objects import (
    Confidence,
    round_half_up,
)

DISH_KEYWORDS = ("cake", "dessert", "salad", "pasta", "sandwich")

CREAM_QUESTION_ID = "cream"
SAUCE_QUESTION_ID = "sauce"

YES = "yes"
NO = "no"

_YES_NO_OPTIONS = [
    AnswerOption(label="Да", value=YES),
    AnswerOption(label="Нет", value=NO),
]

# question id -> (calories factor, fat factor) applied on a "yes" answer
CORRECTION_FACTORS: Dict[str, Tuple[float, float]] = {
    CREAM_QUESTION_ID: (1.25, 1.30),
    SAUCE_QUESTION_ID: (1.20, 1.25),
}


def should_ask(analysis: DishAnalysis) -> bool:
    """
    Whether a follow-up question is worth asking.

    True for any confidence below HIGH, or when the dish names a family
    whose hidden ingredients swing calories.
    """
    if analysis.confidence != Confidence.HIGH:
        return True
    dish_lower = analysis.dish.lower()
    return any(keyword in dish_lower for keyword in DISH_KEYWORDS)


def generate_question(analysis: DishAnalysis) -> Optional[ClarificationQuestion]:
    """
    Map the dish keyword family to a fixed question.

    Returns:
        The question, or None when no family matches (whatever the confidence)
    """
    dish_lower = analysis.dish.lower()
    if "cake" in dish_lower or "dessert" in dish_lower:
        return ClarificationQuestion(
            id=CREAM_QUESTION_ID,
            prompt_text="Есть ли крем или сливки?",
            options=list(_YES_NO_OPTIONS),
        )
    if "salad" in dish_lower:
        return ClarificationQuestion(
            id=SAUCE_QUESTION_ID,
            prompt_text="Добавлено ли масло или майонез?",
            options=list(_YES_NO_OPTIONS),
        )
    return None


def correction_factors(question_id: str, answer: str) -> Tuple[float, float]:
    """
    (calories factor, fat factor) for an answer.

    Anything other than a case-insensitive "yes" to a known question is 1.0.
    """
    if answer.strip().lower() != YES:
        return 1.0, 1.0
    return CORRECTION_FACTORS.get(question_id, (1.0, 1.0))


def apply_correction(base: DishAnalysis, answer: str, question_id: str) -> DishAnalysis:
    """
    Correct an analysis from a clarification answer.

    Not idempotent: applying it twice compounds the factor, so the caller
    must discard the dialog state right after use.

    Args:
        base: Delivered analysis (left untouched)
        answer: Raw answer value ("yes"/"no")
        question_id: Id of the answered question

    Returns:
        New DishAnalysis with scaled calories, range and fat

    Example:
        >>> corrected = apply_correction(cake_analysis, "yes", "cream")
        >>> assert corrected.calories == round_half_up(cake_analysis.calories * 1.25)
    """
    calories_factor, fat_factor = correction_factors(question_id, answer)
    if calories_factor == 1.0 and fat_factor == 1.0:
        return base.model_copy()

    return base.model_copy(
        update={
            "calories": round_half_up(base.calories * calories_factor),
            "fat": round_half_up(base.fat * fat_factor),
            "calories_range": CaloriesRange(
                min=round_half_up(base.calories_range.min * calories_factor),
                max=round_half_up(base.calories_range.max * calories_factor),
            ),
        }
    )
