"""Google Gemini backend (google-genai SDK)."""

from ..base import LLMAuthError, LLMError, LLMProvider, LLMRateLimitError


def _raise_mapped(e: Exception):
    # google-genai errors carry the HTTP status only in their text
    err_str = str(e).lower()
    if "api key" in err_str or "authentication" in err_str or "permission" in err_str:
        raise LLMAuthError(f"Gemini auth failed: {e}") from e
    if "429" in err_str or "resource_exhausted" in err_str or "rate limit" in err_str:
        raise LLMRateLimitError(f"Gemini rate limit: {e}") from e
    raise LLMError(f"Gemini API error: {e}") from e


def _to_contents(messages: list[dict]):
    """A lone user turn goes as plain text; conversations as role/parts dicts."""
    if len(messages) == 1 and messages[0].get("role", "user") == "user":
        return messages[0]["content"]
    return [
        {
            "role": "model" if m.get("role") == "assistant" else "user",
            "parts": [{"text": m["content"]}],
        }
        for m in messages
    ]


class GeminiProvider(LLMProvider):
    provider_name = "gemini"
    default_model = "gemini-2.0-flash"

    def __init__(self, api_key: str | None = None, model: str | None = None, client=None):
        super().__init__(model)
        if client is not None:
            self.client = client
            return

        try:
            from google import genai
        except ImportError as e:
            raise LLMError("google-genai package not installed. Run: pip install google-genai") from e

        self.client = genai.Client(api_key=api_key)

    def _complete(self, messages, system, max_tokens, temperature, json_reply):
        from google.genai import types

        config = types.GenerateContentConfig(
            max_output_tokens=max_tokens,
            system_instruction=system,
            temperature=temperature,
            response_mime_type="application/json" if json_reply else None,
        )
        try:
            response = self.client.models.generate_content(
                model=self.model,
                contents=_to_contents(messages),
                config=config,
            )
        except Exception as e:
            _raise_mapped(e)

        # .text is None when every candidate was blocked
        return response.text
