"""
Unit tests for lenient LLM output parsing.
"""

import pytest

from nutrisnap.domain.shared.value_objects import Confidence
from nutrisnap.infrastructure.ai.response_parser import (
    coerce_count,
    extract_json,
    load_object,
    parse_macros_payload,
    parse_vision_payload,
)


class TestExtractJson:
    """Test JSON object extraction."""

    def test_strips_markdown_fence(self) -> None:
        assert extract_json('```json\n{"a": 1}\n```') == '{"a": 1}'

    def test_no_object(self) -> None:
        with pytest.raises(ValueError, match="No JSON"):
            extract_json("I cannot see any food")

    def test_array_is_not_an_object(self) -> None:
        with pytest.raises(ValueError):
            load_object('["a", "b"]')


class TestCoerceCount:
    """Test numeric coercion."""

    @pytest.mark.parametrize(
        "raw,expected",
        [(250, 250), (249.5, 250), ("300 g", 300), ("~200", 0), (-5, 0), (None, 0), (True, 0), ("abc", 0)],
    )
    def test_values(self, raw: object, expected: int) -> None:
        assert coerce_count(raw) == expected


class TestParseVisionPayload:
    """Test vision output parsing."""

    def test_full_payload(self) -> None:
        guess = parse_vision_payload(
            '{"is_food": true, "dish": "куриная грудка", "portion_grams": "150", '
            '"candidates": ["chicken breast", " ", "grilled chicken"], "confidence": "HIGH"}'
        )

        assert guess.is_food is True
        assert guess.dish == "куриная грудка"
        assert guess.portion_grams == 150
        assert guess.candidate_queries == ["chicken breast", "grilled chicken"]
        assert guess.confidence == Confidence.HIGH

    def test_candidates_default_to_dish(self) -> None:
        guess = parse_vision_payload('{"is_food": true, "dish": "борщ", "portion_grams": 300}')

        assert guess.candidate_queries == ["борщ"]
        assert guess.confidence == Confidence.MEDIUM

    def test_candidates_capped_at_five(self) -> None:
        guess = parse_vision_payload(
            '{"is_food": true, "dish": "x", "candidates": ["a", "b", "c", "d", "e", "f", "g"]}'
        )

        assert guess.candidate_queries == ["a", "b", "c", "d", "e"]

    def test_unknown_confidence_is_medium(self) -> None:
        guess = parse_vision_payload('{"is_food": true, "dish": "x", "confidence": "certain"}')

        assert guess.confidence == Confidence.MEDIUM

    def test_not_food(self) -> None:
        guess = parse_vision_payload('{"is_food": false, "dish": "", "portion_grams": 0}')

        assert guess.is_food is False
        assert guess.candidate_queries == []

    def test_food_without_dish_rejected(self) -> None:
        with pytest.raises(ValueError, match="rejected"):
            parse_vision_payload('{"is_food": true, "dish": ""}')

    def test_prose_rejected(self) -> None:
        with pytest.raises(ValueError):
            parse_vision_payload("Sorry, I can't help with that.")


class TestParseMacrosPayload:
    """Test estimate output parsing."""

    def test_rounds_and_clamps(self) -> None:
        macros = parse_macros_payload('Here: {"calories": 412.6, "protein": "18 g", "fat": -2, "carbs": 40}')

        assert macros.calories == 413
        assert macros.protein == 18
        assert macros.fat == 0
        assert macros.carbs == 40
