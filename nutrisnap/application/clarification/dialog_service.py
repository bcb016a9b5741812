"""
Clarification Dialog Service.

Per-subject state machine NONE -> PENDING -> NONE around the pure policy in
domain.clarification.policy. State lives in an injected keyed store.
"""

from datetime import datetime, timezone
from typing import Callable, Optional

import structlog

from nutrisnap.domain.clarification.models import ClarificationQuestion, DialogState
from nutrisnap.domain.clarification.policy import (
    apply_correction,
    generate_question,
    should_ask,
)
from nutrisnap.domain.dish.models import DishAnalysis
from nutrisnap.domain.shared.ports import IKeyedStore
from nutrisnap.domain.shared.value_objects import SubjectId

logger = structlog.get_logger(__name__)

DEFAULT_DIALOG_TTL_SECONDS = 900


class ClarificationDialogService:
    """
    Offers at most one follow-up question per analysis and applies the answer.

    Example:
        >>> dialogs = ClarificationDialogService(InMemoryKeyedStore(name="dialogs"))
        >>> question = dialogs.offer(42, cake_analysis)
        >>> corrected = dialogs.answer(42, question.id, "yes")
    """

    def __init__(
        self,
        store: IKeyedStore[DialogState],
        ttl_seconds: Optional[float] = DEFAULT_DIALOG_TTL_SECONDS,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        """
        Args:
            store: Keyed store of pending dialogs
            ttl_seconds: Pending dialog lifetime (None keeps them forever)
            clock: UTC datetime source for ``started_at``
        """
        self.store = store
        self.ttl_seconds = ttl_seconds
        self._clock = clock

    def offer(self, subject_id: SubjectId, analysis: DishAnalysis) -> Optional[ClarificationQuestion]:
        """
        Open a dialog if the analysis warrants a question.

        Overwrites any dialog already pending for the subject.

        Returns:
            The question to show, or None
        """
        if not analysis.is_food or not should_ask(analysis):
            return None

        question = generate_question(analysis)
        if question is None:
            return None

        started_at = self._clock() if self._clock else datetime.now(timezone.utc)
        state = DialogState(
            subject_id=subject_id,
            base_analysis=analysis,
            question=question,
            started_at=started_at,
        )
        self.store.set(subject_id, state, ttl_seconds=self.ttl_seconds)
        logger.info("Clarification offered", subject_id=subject_id, question_id=question.id)
        return question

    def pending(self, subject_id: SubjectId) -> Optional[DialogState]:
        """Pending dialog for the subject, if any."""
        return self.store.get(subject_id)

    def answer(
        self, subject_id: SubjectId, question_id: str, answer_value: str
    ) -> Optional[DishAnalysis]:
        """
        Apply an answer to the pending dialog and close it.

        The state is cleared whatever the outcome, so a correction is applied
        at most once.

        Args:
            subject_id: Answering subject
            question_id: Question id carried by the answer event
            answer_value: Raw answer value ("yes"/"no")

        Returns:
            Corrected analysis, or None when nothing is pending
        """
        state = self.store.get(subject_id)
        if state is None:
            logger.info("No pending clarification", subject_id=subject_id)
            return None

        try:
            corrected = apply_correction(state.base_analysis, answer_value, question_id)
        finally:
            self.store.delete(subject_id)

        logger.info(
            "Clarification answered",
            subject_id=subject_id,
            question_id=question_id,
            answer=answer_value,
            calories=corrected.calories,
        )
        return corrected

    def cancel(self, subject_id: SubjectId) -> None:
        """Drop any pending dialog for the subject."""
        self.store.delete(subject_id)
