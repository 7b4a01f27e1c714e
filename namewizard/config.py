"""App configuration — environment variable loading with typed defaults.

Loads settings from .env file (via python-dotenv) and os.environ.
Real environment variables take precedence over .env file values.

Model name env vars (e.g. VISION_MODEL=GEMINI_FLASH) are resolved to
registry ids at load time via MODEL_MAP from namewizard.models.

Usage:
    from namewizard.config import get_settings
    settings = get_settings()
    print(settings.vision_model)  # "gemini-flash"
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from namewizard.models import MODEL_MAP

# Only load .env from the project root — don't traverse parent directories.
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_DOTENV_PATH = _PROJECT_ROOT / ".env"
PROMPTS_DIR = Path(__file__).resolve().parent / "prompts"

_AI_BACKENDS = ("live", "mock")


@dataclass(frozen=True)
class Settings:
    """Typed configuration for the NameWizard analysis service.

    All fields have sensible defaults for local development.
    Model fields store registry ids (not family names).
    """

    # App
    app_env: str
    app_port: int
    log_level: str
    cors_origins: list[str]

    # AI
    ai_backend: str
    vision_model: str
    text_model: str
    google_api_key: str
    anthropic_api_key: str

    # Analysis
    analysis_timeout_seconds: float
    analysis_max_fallbacks: int


def _resolve_model(env_var: str, value: str) -> str:
    """Resolves a family-name string to a registry id via MODEL_MAP.

    Raises:
        ValueError: If the value doesn't match any key in MODEL_MAP.
    """
    if value in MODEL_MAP:
        return MODEL_MAP[value]
    valid = ", ".join(sorted(MODEL_MAP.keys()))
    raise ValueError(
        f"Invalid value for {env_var}: {value!r}. "
        f"Valid options: {valid}"
    )


def _parse_number(env_var: str, value: str, kind: type, minimum: float) -> int | float:
    """Parses a numeric env var and enforces a lower bound.

    Raises:
        ValueError: If the value is not a number of the given kind or is
            below the minimum.
    """
    try:
        parsed = kind(value)
    except ValueError:
        raise ValueError(
            f"Invalid value for {env_var}: {value!r}. Expected {kind.__name__}."
        ) from None
    if parsed < minimum:
        raise ValueError(f"Invalid value for {env_var}: {value!r}. Must be >= {minimum}.")
    return parsed


def _split_csv(value: str) -> list[str]:
    """Splits a comma-separated string into a list of stripped, non-empty values."""
    return [item.strip() for item in value.split(",") if item.strip()]


def _load_settings() -> Settings:
    """Loads configuration from .env file and environment variables."""
    load_dotenv(_DOTENV_PATH)

    ai_backend = os.environ.get("AI_BACKEND", "live")
    if ai_backend not in _AI_BACKENDS:
        raise ValueError(
            f"Invalid value for AI_BACKEND: {ai_backend!r}. "
            f"Valid options: {', '.join(_AI_BACKENDS)}"
        )

    return Settings(
        # App
        app_env=os.environ.get("APP_ENV", "development"),
        app_port=_parse_number("APP_PORT", os.environ.get("APP_PORT", "8000"), int, 1),
        log_level=os.environ.get("LOG_LEVEL", "info"),
        cors_origins=_split_csv(
            os.environ.get("CORS_ORIGINS", "http://localhost:3000,http://localhost:5173")
        ),
        # AI
        ai_backend=ai_backend,
        vision_model=_resolve_model(
            "VISION_MODEL",
            os.environ.get("VISION_MODEL", "GEMINI_FLASH"),
        ),
        text_model=_resolve_model(
            "TEXT_MODEL",
            os.environ.get("TEXT_MODEL", "GEMINI_FLASH"),
        ),
        google_api_key=os.environ.get("GOOGLE_API_KEY", ""),
        anthropic_api_key=os.environ.get("ANTHROPIC_API_KEY", ""),
        # Analysis
        analysis_timeout_seconds=_parse_number(
            "ANALYSIS_TIMEOUT_SECONDS",
            os.environ.get("ANALYSIS_TIMEOUT_SECONDS", "30"),
            float,
            0.001,
        ),
        analysis_max_fallbacks=_parse_number(
            "ANALYSIS_MAX_FALLBACKS",
            os.environ.get("ANALYSIS_MAX_FALLBACKS", "1"),
            int,
            0,
        ),
    )


_settings: Settings | None = None


def get_settings() -> Settings:
    """Returns the singleton Settings instance. Loads .env on first call."""
    global _settings
    if _settings is None:
        _settings = _load_settings()
    return _settings
