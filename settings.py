"""Planner settings read from environment variables (Gemini credentials, model and log level)."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

DEFAULT_MODEL = "gemini-2.0-flash"
DEFAULT_TEMPERATURE = 0.3
API_KEY_VARIABLES = ("GEMINI_API_KEY", "GOOGLE_API_KEY", "API_KEY")


@dataclass(frozen=True)
class Settings:
    gemini_api_key: Optional[str] = None
    gemini_model: str = DEFAULT_MODEL
    gemini_temperature: float = DEFAULT_TEMPERATURE
    log_level: str = "INFO"


def load_settings(env: Optional[Mapping[str, str]] = None) -> Settings:
    """Read settings from the environment; malformed values keep their defaults."""
    env = os.environ if env is None else env

    api_key = next((env[name] for name in API_KEY_VARIABLES if env.get(name)), None)
    try:
        temperature = float(env.get("SOP_GEMINI_TEMPERATURE", DEFAULT_TEMPERATURE))
    except ValueError:
        temperature = DEFAULT_TEMPERATURE

    return Settings(
        gemini_api_key=api_key,
        gemini_model=env.get("SOP_GEMINI_MODEL") or DEFAULT_MODEL,
        gemini_temperature=temperature,
        log_level=env.get("SOP_LOG_LEVEL") or "INFO",
    )
