"""OpenAI chat-completions backend."""

import structlog

from ..base import LLMAuthError, LLMError, LLMProvider, LLMRateLimitError, parse_retry_after

logger = structlog.get_logger()


def _raise_mapped(e: Exception):
    from openai import APIConnectionError, APIError, AuthenticationError, PermissionDeniedError, RateLimitError

    if isinstance(e, (AuthenticationError, PermissionDeniedError)):
        raise LLMAuthError(f"OpenAI auth failed: {e}") from e
    if isinstance(e, RateLimitError):
        raise LLMRateLimitError(
            f"OpenAI rate limit: {e}", retry_after=parse_retry_after(getattr(e, "response", None))
        ) from e
    if isinstance(e, APIConnectionError):
        raise LLMError(f"OpenAI unreachable: {e}") from e
    if isinstance(e, APIError):
        raise LLMError(f"OpenAI API error: {e}") from e
    raise LLMError(f"OpenAI error: {e}") from e


class OpenAIProvider(LLMProvider):
    provider_name = "openai"
    default_model = "gpt-4o-mini"

    def __init__(self, api_key: str | None = None, model: str | None = None, client=None):
        super().__init__(model)
        if client is not None:
            self.client = client
            return

        try:
            from openai import OpenAI
        except ImportError as e:
            raise LLMError("openai package not installed. Run: pip install openai") from e

        self.client = OpenAI(api_key=api_key)

    def _complete(self, messages, system, max_tokens, temperature, json_reply):
        chat = [{"role": "system", "content": system}] if system else []
        chat.extend(messages)

        kwargs = {"model": self.model, "max_tokens": max_tokens, "messages": chat}
        if temperature is not None:
            kwargs["temperature"] = temperature
        if json_reply:
            kwargs["response_format"] = {"type": "json_object"}

        try:
            response = self.client.chat.completions.create(**kwargs)
        except Exception as e:
            _raise_mapped(e)

        choice = response.choices[0]
        if choice.finish_reason == "content_filter":
            logger.warning("llm.filtered", provider=self.provider_name, model=self.model)
            return None
        return choice.message.content
