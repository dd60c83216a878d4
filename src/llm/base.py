"""Provider interface shared by the entry-analysis backends."""

import time
from abc import ABC, abstractmethod

import structlog

logger = structlog.get_logger()

DEFAULT_MAX_TOKENS = 1024


class LLMError(Exception):
    """Provider call failed."""


class LLMRateLimitError(LLMError):
    """Provider throttled the call.

    ``retry_after`` carries the server's Retry-After hint in seconds when it
    sent one.
    """

    def __init__(self, message: str, retry_after: float | None = None):
        super().__init__(message)
        self.retry_after = retry_after


class LLMAuthError(LLMError):
    """Key missing, invalid, or without access to the model."""


class LLMEmptyResponseError(LLMError):
    """Provider answered with no text (safety block, content filter)."""


def parse_retry_after(response) -> float | None:
    """Read a numeric Retry-After header off an SDK error's HTTP response."""
    headers = getattr(response, "headers", None)
    if headers is None:
        return None
    value = headers.get("retry-after")
    if not isinstance(value, (str, int, float)):
        return None
    try:
        return max(0.0, float(value))
    except ValueError:
        return None


class LLMProvider(ABC):
    """One chat-completion backend.

    Subclasses implement ``_complete``; ``generate`` wraps it with the
    empty-reply check and timing log every caller relies on.
    """

    provider_name: str = "base"
    default_model: str = ""

    def __init__(self, model: str | None = None):
        self.model = model or self.default_model

    def generate(
        self,
        messages: list[dict],
        system: str | None = None,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        temperature: float | None = None,
        json_reply: bool = False,
    ) -> str:
        """Send a conversation and return the reply text.

        Args:
            messages: List of {"role": "user"|"assistant", "content": ...} dicts
            system: Optional system prompt
            max_tokens: Max response tokens
            temperature: Sampling temperature (None = provider default)
            json_reply: Ask the backend to answer with a bare JSON object

        Raises:
            LLMEmptyResponseError: the backend produced no text
        """
        started = time.monotonic()
        text = self._complete(messages, system, max_tokens, temperature, json_reply)
        if not text or not text.strip():
            logger.warning("llm.empty_reply", provider=self.provider_name, model=self.model)
            raise LLMEmptyResponseError(f"{self.provider_name} returned an empty reply")

        logger.debug(
            "llm.reply",
            provider=self.provider_name,
            model=self.model,
            chars=len(text),
            elapsed_ms=round((time.monotonic() - started) * 1000),
        )
        return text

    @abstractmethod
    def _complete(
        self,
        messages: list[dict],
        system: str | None,
        max_tokens: int,
        temperature: float | None,
        json_reply: bool,
    ) -> str | None:
        ...
