"""
Shared value objects.

Immutable domain primitives used across nutrition, dish and clarification.
"""

from __future__ import annotations

import math
from enum import Enum
from typing import Union

# Telegram-style numeric ids and opaque string ids are both accepted.
SubjectId = Union[int, str]


class Confidence(str, Enum):
    """
    Qualitative confidence of an estimate.

    Only ever moves toward LOW (see ``downgrade`` in nutrition.confidence).
    """

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @classmethod
    def parse(cls, raw: object) -> Confidence:
        """
        Lenient parsing for provider output.

        Unknown values map to MEDIUM.

        Example:
            >>> assert Confidence.parse("HIGH") is Confidence.HIGH
            >>> assert Confidence.parse("sure") is Confidence.MEDIUM
        """
        value = str(raw or "").strip().lower()
        for member in cls:
            if member.value == value:
                return member
        return cls.MEDIUM


def round_half_up(value: float) -> int:
    """
    Round to the nearest integer, halves away from zero for positives.

    Python's ``round`` uses banker's rounding (``round(246.5) == 246``);
    nutrition figures round halves up.

    Example:
        >>> assert round_half_up(246.5) == 247
        >>> assert round_half_up(37.2) == 37
    """
    return int(math.floor(value + 0.5))


def round_one_decimal(value: float) -> float:
    """
    Round half-up to one decimal place.

    Example:
        >>> assert round_one_decimal(5.45) == 5.5
        >>> assert round_one_decimal(46.5) == 46.5
    """
    return math.floor(value * 10 + 0.5) / 10
