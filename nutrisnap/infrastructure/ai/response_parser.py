"""
Lenient parsing of LLM JSON output.

Models occasionally wrap JSON in prose or markdown fences, return numbers as
strings, or invent confidence labels. These helpers recover what they can
and raise ValueError when nothing usable is left.
"""

from __future__ import annotations

import json
import re
from typing import Any, Dict, List

from pydantic import ValidationError

from nutrisnap.domain.dish.models import MAX_CANDIDATE_QUERIES, VisionGuess
from nutrisnap.domain.nutrition.models import ScaledMacros
from nutrisnap.domain.shared.value_objects import Confidence, round_half_up

_LEADING_NUMBER = re.compile(r"^\s*[-+]?(\d+(\.\d*)?|\.\d+)")


def extract_json(text: str) -> str:
    """
    Cut the outermost ``{...}`` out of a response.

    Raises:
        ValueError: If no object is present

    Example:
        >>> assert extract_json('```json\\n{"a": 1}\\n```') == '{"a": 1}'
    """
    start = text.find("{")
    end = text.rfind("}") + 1
    if start == -1 or end <= start:
        raise ValueError("No JSON in response")
    return text[start:end]


def load_object(text: str) -> Dict[str, Any]:
    """Parse the embedded JSON object of a response."""
    try:
        data = json.loads(extract_json(text))
    except json.JSONDecodeError as e:
        raise ValueError("Invalid JSON") from e
    if not isinstance(data, dict):
        raise ValueError("Response is not an object")
    return data


def coerce_count(value: Any) -> int:
    """
    Non-negative integer from a number or numeric-prefixed string, else 0.

    Example:
        >>> assert coerce_count("250 g") == 250
        >>> assert coerce_count(-4) == 0
        >>> assert coerce_count(None) == 0
    """
    if isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        match = _LEADING_NUMBER.match(value)
        if not match:
            return 0
        number = float(match.group(0))
    else:
        return 0
    if number != number:  # NaN
        return 0
    return max(0, round_half_up(number))


def _candidates(raw: Any, dish: str) -> List[str]:
    candidates: List[str] = []
    if isinstance(raw, list):
        candidates = [c.strip() for c in raw if isinstance(c, str) and c.strip()]
    candidates = candidates[:MAX_CANDIDATE_QUERIES]
    if not candidates and dish:
        candidates = [dish]
    return candidates


def parse_vision_payload(text: str) -> VisionGuess:
    """
    Build a VisionGuess from model output.

    Raises:
        ValueError: If the output holds no usable object
    """
    data = load_object(text)
    is_food = str(data.get("is_food")).strip().lower() == "true"
    dish = str(data.get("dish") or "").strip()

    try:
        return VisionGuess(
            is_food=is_food,
            dish=dish,
            portion_grams=coerce_count(data.get("portion_grams")),
            candidate_queries=_candidates(data.get("candidates"), dish),
            confidence=Confidence.parse(data.get("confidence") or "medium"),
        )
    except ValidationError as e:
        raise ValueError(f"Vision payload rejected: {e.error_count()} errors") from e


def parse_macros_payload(text: str) -> ScaledMacros:
    """
    Build whole-portion macros from an estimate response.

    Values are rounded to integers and clamped at 0.

    Raises:
        ValueError: If the output holds no JSON object
    """
    data = load_object(text)
    return ScaledMacros(
        calories=coerce_count(data.get("calories")),
        protein=coerce_count(data.get("protein")),
        fat=coerce_count(data.get("fat")),
        carbs=coerce_count(data.get("carbs")),
    )
