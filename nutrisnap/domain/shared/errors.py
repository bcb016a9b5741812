"""
Domain exceptions.

Typed exceptions for explicit error handling. Every error carries a stable
``code`` so callers (the messaging front-end) can map it to localized text
without parsing messages.
"""

from __future__ import annotations

from typing import Optional


# ═══════════════════════════════════════════════════════════
# BASE EXCEPTION
# ═══════════════════════════════════════════════════════════


class DomainError(Exception):
    """
    Base exception for all domain errors.

    Allows catching all domain errors with a single except clause.
    """

    code = "DOMAIN_ERROR"
    # Consulted by the retry classifier; domain outcomes are never transient.
    retryable: Optional[bool] = False


# ═══════════════════════════════════════════════════════════
# ANALYSIS EXCEPTIONS
# ═══════════════════════════════════════════════════════════


class SubjectRateLimitedError(DomainError):
    """
    Subject sent a new photo before its rate-limit interval elapsed.

    Recoverable: the user must wait. Never retried internally.

    Example:
        >>> err = SubjectRateLimitedError(7)
        >>> assert err.remaining_seconds == 7
    """

    code = "RATE_LIMITED"

    def __init__(self, remaining_seconds: int) -> None:
        self.remaining_seconds = remaining_seconds
        super().__init__(f"Rate limit: try again in {remaining_seconds}s")


class RecognitionError(DomainError):
    """Base exception for vision recognition failures."""

    code = "RECOGNITION_ERROR"


class VisionInvalidError(RecognitionError):
    """
    Vision output could not be parsed, even after the stricter retry.

    Example:
        >>> raise VisionInvalidError("Invalid JSON from vision")
    """

    code = "VISION_INVALID"


class EnrichmentError(DomainError):
    """Base exception for nutrition lookup failures."""

    code = "ENRICHMENT_ERROR"


class NoMatchError(EnrichmentError):
    """
    No database candidate produced usable nutrients and no fallback succeeded.

    Example:
        >>> raise NoMatchError("USDA_NO_MATCH")
    """

    code = "NO_MATCH"


class InvalidNutrientsError(EnrichmentError):
    """
    A database record has all four macros non-positive.

    Treated as a missing record, not as a zero-calorie food. Recovered
    locally by trying the next candidate; never surfaced directly.
    """

    code = "INVALID_NUTRIENTS"


# ═══════════════════════════════════════════════════════════
# EXTERNAL SERVICE EXCEPTIONS
# ═══════════════════════════════════════════════════════════


class ExternalServiceError(DomainError):
    """
    External service call failed.

    Base class for all outbound I/O errors. ``status`` holds the HTTP
    status when the failure came from a response.

    Example:
        >>> err = ExternalServiceError("USDA API error: 404", status=404)
        >>> assert err.status == 404
    """

    code = "EXTERNAL_SERVICE_ERROR"

    # None: decided by status (429 and 5xx retry)
    retryable: Optional[bool] = None

    def __init__(self, message: str, status: Optional[int] = None) -> None:
        self.status = status
        super().__init__(message)


class RateLimitError(ExternalServiceError):
    """Upstream API answered 429. Retryable."""

    code = "UPSTREAM_RATE_LIMITED"
    retryable = True

    def __init__(self, message: str, status: Optional[int] = 429) -> None:
        super().__init__(message, status=status)


class TimeoutError(ExternalServiceError):  # noqa: A001
    """
    API call timed out. Retryable.

    Example:
        >>> raise TimeoutError("USDA API timeout after 30s")
    """

    code = "UPSTREAM_TIMEOUT"
    retryable = True


class ServiceUnavailableError(ExternalServiceError):
    """
    Upstream returned 5xx or the connection could not be established.

    Retryable.
    """

    code = "UPSTREAM_UNAVAILABLE"
    retryable = True


class InvalidResponseError(ExternalServiceError):
    """Upstream body was not the expected JSON. Not retryable."""

    code = "UPSTREAM_INVALID_RESPONSE"
    retryable = False


# ═══════════════════════════════════════════════════════════
# CONFIGURATION EXCEPTIONS
# ═══════════════════════════════════════════════════════════


class ConfigurationError(DomainError):
    """Required setting missing or malformed."""

    code = "CONFIGURATION_ERROR"
