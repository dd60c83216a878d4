"""Anthropic Claude backend."""

import structlog

from ..base import LLMAuthError, LLMError, LLMProvider, LLMRateLimitError, parse_retry_after

logger = structlog.get_logger()


class ClaudeProvider(LLMProvider):
    provider_name = "claude"
    default_model = "claude-sonnet-4-6"

    def __init__(self, api_key: str | None = None, model: str | None = None, client=None):
        super().__init__(model)
        if client is not None:
            self.client = client
            return

        try:
            from anthropic import Anthropic
        except ImportError as e:
            raise LLMError("anthropic package not installed. Run: pip install anthropic") from e

        self.client = Anthropic(api_key=api_key)

    def _raise_mapped(self, e: Exception):
        from anthropic import (
            APIConnectionError,
            APIError,
            AuthenticationError,
            PermissionDeniedError,
            RateLimitError,
        )

        if isinstance(e, (AuthenticationError, PermissionDeniedError)):
            raise LLMAuthError(f"Claude auth failed: {e}") from e
        if isinstance(e, RateLimitError):
            raise LLMRateLimitError(
                f"Claude rate limit: {e}", retry_after=parse_retry_after(getattr(e, "response", None))
            ) from e
        if isinstance(e, APIConnectionError):
            raise LLMError(f"Claude unreachable: {e}") from e
        if isinstance(e, APIError):
            raise LLMError(f"Claude API error: {e}") from e
        raise LLMError(f"Claude error: {e}") from e

    def _complete(self, messages, system, max_tokens, temperature, json_reply):
        if json_reply:
            # No native JSON mode; prefill the opening brace
            messages = [*messages, {"role": "assistant", "content": "{"}]

        kwargs = {"model": self.model, "max_tokens": max_tokens, "messages": messages}
        if system:
            kwargs["system"] = system
        if temperature is not None:
            kwargs["temperature"] = temperature

        try:
            response = self.client.messages.create(**kwargs)
        except Exception as e:
            self._raise_mapped(e)

        if getattr(response, "stop_reason", None) == "max_tokens":
            logger.warning("llm.truncated", provider=self.provider_name, max_tokens=max_tokens)
        text = "".join(getattr(block, "text", "") for block in response.content)
        if json_reply and text:
            return "{" + text
        return text
