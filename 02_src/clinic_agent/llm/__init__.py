"""LLM module."""

from .bundle import PromptBundle
from .errors import (
    AuthError,
    ConfigurationError,
    ErrorKind,
    GenerationError,
    QuotaExceeded,
    RateLimited,
    TransientError,
    UnknownError,
)
from .router import Backend, GenerationRouter, IGenerationRouter

__all__ = [
    "AuthError",
    "Backend",
    "ConfigurationError",
    "ErrorKind",
    "GenerationError",
    "GenerationRouter",
    "IGenerationRouter",
    "PromptBundle",
    "QuotaExceeded",
    "RateLimited",
    "TransientError",
    "UnknownError",
]
