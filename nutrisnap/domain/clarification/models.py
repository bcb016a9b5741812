"""
Clarification domain models.
"""

from __future__ import annotations

from datetime import datetime
from typing import List

from pydantic import BaseModel, ConfigDict, Field

from nutrisnap.domain.dish.models import DishAnalysis
from nutrisnap.domain.shared.value_objects import SubjectId


class AnswerOption(BaseModel):
    """One button of a clarification question."""

    model_config = ConfigDict(frozen=True)

    label: str
    value: str


class ClarificationQuestion(BaseModel):
    """
    Yes/no follow-up question generated from an analysis.

    Example:
        >>> q = ClarificationQuestion(
        ...     id="cream",
        ...     prompt_text="Есть ли крем или сливки?",
        ...     options=[AnswerOption(label="Да", value="yes")],
        ... )
        >>> assert q.id == "cream"
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    prompt_text: str
    options: List[AnswerOption] = Field(default_factory=list)


class DialogState(BaseModel):
    """Pending clarification for one subject."""

    model_config = ConfigDict(frozen=True)

    subject_id: SubjectId
    base_analysis: DishAnalysis
    question: ClarificationQuestion
    started_at: datetime
