from __future__ import annotations


class ValidationError(ValueError):
    """Raised when required form input is missing or malformed."""


class ConfigurationError(RuntimeError):
    """Raised when an AI-backed action runs without an AI credential."""


class GenerationError(RuntimeError):
    """Raised when the model output cannot be used as a chapter body."""


class NetworkError(RuntimeError):
    """Raised when the target endpoint cannot be reached or read."""
