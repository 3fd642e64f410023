"""Process configuration read from the environment."""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

API_KEY_ENV = "GEMINI_API_KEY"
MODEL_ENV = "GEMINI_MODEL"
LOG_LEVEL_ENV = "LOG_LEVEL"

DEFAULT_MODEL = "gemini-2.5-flash"


class ConfigurationError(RuntimeError):
    """Raised when the process cannot start with the current environment."""


@dataclass(frozen=True, slots=True)
class Settings:
    api_key: str
    model: str = DEFAULT_MODEL

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> Settings:
        env = os.environ if environ is None else environ
        api_key = (env.get(API_KEY_ENV) or "").strip()
        if not api_key:
            raise ConfigurationError(f"{API_KEY_ENV} environment variable is required")
        model = (env.get(MODEL_ENV) or "").strip() or DEFAULT_MODEL
        return cls(api_key=api_key, model=model)
