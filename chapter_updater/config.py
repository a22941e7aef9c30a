"""Process-wide configuration for the AI chapter generator."""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from chapter_updater.errors import ConfigurationError

AI_KEY_ENV_VARS = ("CHAPTER_UPDATER_AI_KEY", "GEMINI_API_KEY", "API_KEY")
AI_BASE_URL_ENV = "CHAPTER_UPDATER_AI_BASE_URL"
AI_MODEL_ENV = "CHAPTER_UPDATER_AI_MODEL"
AI_TIMEOUT_ENV = "CHAPTER_UPDATER_AI_TIMEOUT"

DEFAULT_AI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/openai"
DEFAULT_AI_MODEL = "gemini-2.5-flash"


def _env(environ: Mapping[str, str], name: str) -> Optional[str]:
    value = environ.get(name)
    if value is None or not value.strip():
        return None
    return value.strip()


def _parse_timeout(value: Optional[str]) -> Optional[float]:
    if value is None:
        return None
    try:
        timeout = float(value)
    except ValueError:
        return None
    return timeout if timeout > 0 else None


@dataclass(frozen=True)
class AIConfig:
    api_key: str = ""
    base_url: str = DEFAULT_AI_BASE_URL
    model: str = DEFAULT_AI_MODEL
    timeout: Optional[float] = None

    @property
    def available(self) -> bool:
        return bool(self.api_key)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "AIConfig":
        """Build the configuration from environment variables.

        The first non-empty variable in ``AI_KEY_ENV_VARS`` supplies the key.
        A missing key leaves ``available`` false rather than raising.
        """
        environ = os.environ if environ is None else environ
        api_key = next(
            (value for value in (_env(environ, name) for name in AI_KEY_ENV_VARS) if value),
            "",
        )
        return cls(
            api_key=api_key,
            base_url=_env(environ, AI_BASE_URL_ENV) or DEFAULT_AI_BASE_URL,
            model=_env(environ, AI_MODEL_ENV) or DEFAULT_AI_MODEL,
            timeout=_parse_timeout(_env(environ, AI_TIMEOUT_ENV)),
        )

    def require_available(self) -> None:
        if not self.available:
            raise ConfigurationError(
                "No AI API key is configured. Set "
                f"{AI_KEY_ENV_VARS[0]} to enable chapter generation."
            )


__all__ = [
    "AIConfig",
    "AI_KEY_ENV_VARS",
    "DEFAULT_AI_BASE_URL",
    "DEFAULT_AI_MODEL",
]
