"""
Unit tests for Clarification Dialog Service.
"""

from datetime import datetime, timezone
from typing import Any
from unittest.mock import patch

import pytest

from nutrisnap.application.clarification.dialog_service import ClarificationDialogService
from nutrisnap.domain.dish.models import DishAnalysis
from nutrisnap.domain.shared.value_objects import Confidence
from nutrisnap.infrastructure.store.in_memory_store import InMemoryKeyedStore

STARTED = datetime(2025, 3, 1, 9, 30, tzinfo=timezone.utc)


class TestClarificationDialogService:
    """Test the NONE -> PENDING -> NONE state machine."""

    @pytest.fixture
    def store(self, fake_clock: Any) -> InMemoryKeyedStore:
        """Dialog store on a manual clock."""
        return InMemoryKeyedStore(name="dialogs", clock=fake_clock)

    @pytest.fixture
    def dialogs(self, store: InMemoryKeyedStore) -> ClarificationDialogService:
        """Service with the default TTL."""
        return ClarificationDialogService(store, clock=lambda: STARTED)

    def test_offer_stores_pending_state(
        self, dialogs: ClarificationDialogService, cake_analysis: DishAnalysis
    ) -> None:
        question = dialogs.offer(42, cake_analysis)

        assert question is not None
        assert question.id == "cream"
        state = dialogs.pending(42)
        assert state is not None
        assert state.base_analysis == cake_analysis
        assert state.question == question
        assert state.started_at == STARTED

    def test_no_offer_for_confident_plain_dish(
        self, dialogs: ClarificationDialogService, chicken_analysis: DishAnalysis
    ) -> None:
        assert dialogs.offer(42, chicken_analysis) is None
        assert dialogs.pending(42) is None

    def test_no_offer_for_non_food(self, dialogs: ClarificationDialogService, cake_analysis: DishAnalysis) -> None:
        assert dialogs.offer(42, cake_analysis.model_copy(update={"is_food": False})) is None

    def test_no_offer_without_question(
        self, dialogs: ClarificationDialogService, chicken_analysis: DishAnalysis
    ) -> None:
        """Low confidence alone asks, but no family maps to a question."""
        low = chicken_analysis.model_copy(update={"confidence": Confidence.LOW, "dish": "pasta"})

        assert dialogs.offer(42, low) is None
        assert dialogs.pending(42) is None

    def test_answer_yes_corrects_and_clears(
        self, dialogs: ClarificationDialogService, cake_analysis: DishAnalysis
    ) -> None:
        question = dialogs.offer(42, cake_analysis)

        corrected = dialogs.answer(42, question.id, "yes")

        assert corrected is not None
        assert corrected.calories == 464
        assert corrected.fat == 20
        assert dialogs.pending(42) is None

    def test_answer_no_leaves_values_and_clears(
        self, dialogs: ClarificationDialogService, cake_analysis: DishAnalysis
    ) -> None:
        question = dialogs.offer(42, cake_analysis)

        corrected = dialogs.answer(42, question.id, "no")

        assert corrected == cake_analysis
        assert dialogs.pending(42) is None

    def test_second_answer_is_ignored(
        self, dialogs: ClarificationDialogService, cake_analysis: DishAnalysis
    ) -> None:
        question = dialogs.offer(42, cake_analysis)
        dialogs.answer(42, question.id, "yes")

        assert dialogs.answer(42, question.id, "yes") is None

    def test_answer_without_dialog(self, dialogs: ClarificationDialogService) -> None:
        assert dialogs.answer(42, "cream", "yes") is None

    def test_answer_uses_event_question_id(
        self, dialogs: ClarificationDialogService, cake_analysis: DishAnalysis
    ) -> None:
        dialogs.offer(42, cake_analysis)

        corrected = dialogs.answer(42, "sauce", "yes")

        assert corrected.calories == 445

    def test_state_cleared_when_correction_fails(
        self, dialogs: ClarificationDialogService, cake_analysis: DishAnalysis
    ) -> None:
        dialogs.offer(42, cake_analysis)

        with patch(
            "nutrisnap.application.clarification.dialog_service.apply_correction",
            side_effect=RuntimeError("boom"),
        ):
            with pytest.raises(RuntimeError):
                dialogs.answer(42, "cream", "yes")

        assert dialogs.pending(42) is None

    def test_offer_overwrites_previous(
        self, dialogs: ClarificationDialogService, cake_analysis: DishAnalysis
    ) -> None:
        dialogs.offer(42, cake_analysis)
        salad = cake_analysis.model_copy(update={"dish": "caesar salad"})

        question = dialogs.offer(42, salad)

        assert question.id == "sauce"
        assert dialogs.pending(42).base_analysis.dish == "caesar salad"

    def test_cancel(self, dialogs: ClarificationDialogService, cake_analysis: DishAnalysis) -> None:
        dialogs.offer(42, cake_analysis)

        dialogs.cancel(42)

        assert dialogs.pending(42) is None

    def test_pending_dialog_expires(
        self, dialogs: ClarificationDialogService, cake_analysis: DishAnalysis, fake_clock: Any
    ) -> None:
        dialogs.offer(42, cake_analysis)

        fake_clock.advance(900)
        assert dialogs.pending(42) is not None

        fake_clock.advance(1)
        assert dialogs.pending(42) is None
        assert dialogs.answer(42, "cream", "yes") is None

    def test_no_ttl_keeps_dialogs(
        self, store: InMemoryKeyedStore, cake_analysis: DishAnalysis, fake_clock: Any
    ) -> None:
        dialogs = ClarificationDialogService(store, ttl_seconds=None)
        dialogs.offer(42, cake_analysis)

        fake_clock.advance(10**6)

        assert dialogs.pending(42) is not None
