"""Chat-completion backends used for entry analysis."""

from .base import (
    LLMAuthError,
    LLMEmptyResponseError,
    LLMError,
    LLMProvider,
    LLMRateLimitError,
)
from .factory import create_llm_provider

__all__ = [
    "LLMProvider",
    "create_llm_provider",
    "LLMError",
    "LLMAuthError",
    "LLMRateLimitError",
    "LLMEmptyResponseError",
]
