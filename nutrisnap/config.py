"""
Runtime configuration.

Settings are read from the environment after loading an optional .env file.
Real providers need their API keys; stubs need nothing.

Environment variables:
    USDA_API_KEY            FoodData Central key (NUTRITION_PROVIDER=usda)
    OPENAI_API_KEY          OpenAI key (VISION_PROVIDER=openai)
    OPENAI_MODEL            Vision-capable chat model (default: gpt-4o)
    ENABLE_AI_FALLBACK      Estimate nutrition when the database has no match
    HTTP_TIMEOUT_MS         Per-request timeout (default: 30000)
    RATE_LIMIT_INTERVAL_MS  Minimum interval between analyses (default: 10000)
    DIALOG_TTL_SECONDS      Pending clarification lifetime (default: 900, 0: never expire)
    VISION_PROVIDER         openai | stub (default: stub)
    NUTRITION_PROVIDER      usda | stub (default: stub)
    LOG_LEVEL               DEBUG | INFO | WARNING | ERROR (default: INFO)
    LOG_FORMAT              console | json (default: console)
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import load_dotenv

from nutrisnap.domain.shared.errors import ConfigurationError

VISION_PROVIDERS = ("openai", "stub")
NUTRITION_PROVIDERS = ("usda", "stub")
LOG_FORMATS = ("console", "json")

_TRUE_VALUES = ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    """Immutable runtime settings."""

    usda_api_key: Optional[str] = None
    openai_api_key: Optional[str] = None
    openai_model: str = "gpt-4o"
    enable_ai_fallback: bool = False
    http_timeout_ms: int = 30_000
    rate_limit_interval_ms: int = 10_000
    dialog_ttl_seconds: Optional[int] = 900
    vision_provider: str = "stub"
    nutrition_provider: str = "stub"
    log_level: str = "INFO"
    log_format: str = "console"

    @property
    def http_timeout_seconds(self) -> float:
        return self.http_timeout_ms / 1000


def _int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw.strip())
    except ValueError as e:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from e
    if value < 0:
        raise ConfigurationError(f"{name} must be non-negative, got {value}")
    return value


def _choice(env: Mapping[str, str], name: str, default: str, allowed: tuple) -> str:
    value = (env.get(name) or default).strip().lower()
    if value not in allowed:
        raise ConfigurationError(f"{name} must be one of {', '.join(allowed)}, got {value!r}")
    return value


def _optional(env: Mapping[str, str], name: str) -> Optional[str]:
    value = (env.get(name) or "").strip()
    return value or None


def settings_from_mapping(env: Mapping[str, str]) -> Settings:
    """
    Build settings from a mapping of environment variables.

    Raises:
        ConfigurationError: On malformed values or a real provider without key

    Example:
        >>> settings = settings_from_mapping({"RATE_LIMIT_INTERVAL_MS": "5000"})
        >>> assert settings.rate_limit_interval_ms == 5000
    """
    settings = Settings(
        usda_api_key=_optional(env, "USDA_API_KEY"),
        openai_api_key=_optional(env, "OPENAI_API_KEY"),
        openai_model=_optional(env, "OPENAI_MODEL") or "gpt-4o",
        enable_ai_fallback=(env.get("ENABLE_AI_FALLBACK") or "").strip().lower() in _TRUE_VALUES,
        http_timeout_ms=_int(env, "HTTP_TIMEOUT_MS", 30_000),
        rate_limit_interval_ms=_int(env, "RATE_LIMIT_INTERVAL_MS", 10_000),
        dialog_ttl_seconds=_int(env, "DIALOG_TTL_SECONDS", 900) or None,
        vision_provider=_choice(env, "VISION_PROVIDER", "stub", VISION_PROVIDERS),
        nutrition_provider=_choice(env, "NUTRITION_PROVIDER", "stub", NUTRITION_PROVIDERS),
        log_level=(env.get("LOG_LEVEL") or "INFO").strip().upper(),
        log_format=_choice(env, "LOG_FORMAT", "console", LOG_FORMATS),
    )

    if settings.vision_provider == "openai" and not settings.openai_api_key:
        raise ConfigurationError(
            "VISION_PROVIDER=openai but OPENAI_API_KEY not set. "
            "Set OPENAI_API_KEY in .env or use VISION_PROVIDER=stub"
        )
    if settings.nutrition_provider == "usda" and not settings.usda_api_key:
        raise ConfigurationError(
            "NUTRITION_PROVIDER=usda but USDA_API_KEY not set. "
            "Set USDA_API_KEY in .env or use NUTRITION_PROVIDER=stub"
        )
    return settings


def load_settings(env_file: Optional[str] = None) -> Settings:
    """
    Load settings from the process environment.

    Args:
        env_file: Explicit .env path (default: search from the working directory)

    Returns:
        Settings
    """
    load_dotenv(env_file)
    return settings_from_mapping(os.environ)
