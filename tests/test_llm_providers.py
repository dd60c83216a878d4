"""Tests for the Claude, OpenAI and Gemini backends."""

from unittest.mock import MagicMock

import pytest

from llm import LLMAuthError, LLMEmptyResponseError, LLMError, LLMRateLimitError
from llm.base import parse_retry_after
from llm.providers.claude import ClaudeProvider
from llm.providers.gemini import GeminiProvider
from llm.providers.openai import OpenAIProvider

HI = [{"role": "user", "content": "hi"}]


def _claude(text="Hello from Claude"):
    client = MagicMock()
    client.messages.create.return_value = MagicMock(content=[MagicMock(text=text)], stop_reason="end_turn")
    return ClaudeProvider(client=client), client


def _openai(text="Hello from GPT", finish_reason="stop"):
    client = MagicMock()
    choice = MagicMock(message=MagicMock(content=text), finish_reason=finish_reason)
    client.chat.completions.create.return_value = MagicMock(choices=[choice])
    return OpenAIProvider(client=client), client


def _gemini(text="Hello from Gemini"):
    client = MagicMock()
    client.models.generate_content.return_value = MagicMock(text=text)
    return GeminiProvider(client=client), client


class TestClaudeProvider:
    def test_generate(self):
        provider, client = _claude()
        result = provider.generate(messages=HI, system="Be kind", max_tokens=100)

        assert result == "Hello from Claude"
        client.messages.create.assert_called_once_with(
            model="claude-sonnet-4-6",
            max_tokens=100,
            messages=HI,
            system="Be kind",
        )

    def test_optional_kwargs_omitted(self):
        provider, client = _claude()
        provider.generate(messages=HI)

        kwargs = client.messages.create.call_args.kwargs
        assert "system" not in kwargs
        assert "temperature" not in kwargs
        assert kwargs["max_tokens"] == 1024

    def test_temperature_passed(self):
        provider, client = _claude()
        provider.generate(messages=HI, temperature=0.3)
        assert client.messages.create.call_args.kwargs["temperature"] == 0.3

    def test_json_reply_prefills_brace(self):
        provider, client = _claude(text='"mood": "calm"}')
        result = provider.generate(messages=HI, json_reply=True)

        assert result == '{"mood": "calm"}'
        sent = client.messages.create.call_args.kwargs["messages"]
        assert sent[-1] == {"role": "assistant", "content": "{"}
        assert HI == [{"role": "user", "content": "hi"}]

    def test_empty_reply(self):
        provider, _ = _claude(text="")
        with pytest.raises(LLMEmptyResponseError):
            provider.generate(messages=HI)

    def test_auth_error(self):
        from anthropic import AuthenticationError

        provider, client = _claude()
        client.messages.create.side_effect = AuthenticationError(
            message="bad key", response=MagicMock(status_code=401), body={}
        )
        with pytest.raises(LLMAuthError):
            provider.generate(messages=HI)

    def test_rate_limit_carries_retry_after(self):
        from anthropic import RateLimitError

        provider, client = _claude()
        response = MagicMock(status_code=429, headers={"retry-after": "7"})
        client.messages.create.side_effect = RateLimitError(message="rate limited", response=response, body={})

        with pytest.raises(LLMRateLimitError) as exc_info:
            provider.generate(messages=HI)
        assert exc_info.value.retry_after == 7.0

    def test_api_error(self):
        from anthropic import APIError

        provider, client = _claude()
        client.messages.create.side_effect = APIError(message="server error", request=MagicMock(), body=None)
        with pytest.raises(LLMError):
            provider.generate(messages=HI)


class TestOpenAIProvider:
    def test_system_prepended(self):
        provider, client = _openai()
        assert provider.generate(messages=HI, system="Be kind") == "Hello from GPT"

        kwargs = client.chat.completions.create.call_args.kwargs
        assert kwargs["messages"][0] == {"role": "system", "content": "Be kind"}
        assert kwargs["messages"][1] == HI[0]
        assert "response_format" not in kwargs

    def test_no_system(self):
        provider, client = _openai()
        provider.generate(messages=HI)
        assert len(client.chat.completions.create.call_args.kwargs["messages"]) == 1

    def test_json_mode(self):
        provider, client = _openai(text='{"mood": "calm"}')
        provider.generate(messages=HI, json_reply=True)
        kwargs = client.chat.completions.create.call_args.kwargs
        assert kwargs["response_format"] == {"type": "json_object"}

    def test_content_filter_is_empty_reply(self):
        provider, _ = _openai(text=None, finish_reason="content_filter")
        with pytest.raises(LLMEmptyResponseError):
            provider.generate(messages=HI)

    def test_unexpected_error_wrapped(self):
        provider, client = _openai()
        client.chat.completions.create.side_effect = RuntimeError("socket closed")
        with pytest.raises(LLMError, match="socket closed"):
            provider.generate(messages=HI)


class TestGeminiProvider:
    def test_generate(self):
        provider, client = _gemini()
        result = provider.generate(messages=HI, system="Be kind")

        assert result == "Hello from Gemini"
        kwargs = client.models.generate_content.call_args.kwargs
        assert kwargs["contents"] == "hi"
        assert kwargs["model"] == "gemini-2.0-flash"
        assert kwargs["config"].system_instruction == "Be kind"
        assert kwargs["config"].response_mime_type is None

    def test_no_system(self):
        provider, client = _gemini()
        provider.generate(messages=HI)
        assert client.models.generate_content.call_args.kwargs["config"].system_instruction is None

    def test_json_mode(self):
        provider, client = _gemini(text="{}")
        provider.generate(messages=HI, json_reply=True)
        config = client.models.generate_content.call_args.kwargs["config"]
        assert config.response_mime_type == "application/json"

    def test_conversation_maps_roles(self):
        provider, client = _gemini()
        provider.generate(
            messages=[
                {"role": "user", "content": "I had a rough day"},
                {"role": "assistant", "content": "Want to talk about it?"},
                {"role": "user", "content": "Yes"},
            ]
        )
        contents = client.models.generate_content.call_args.kwargs["contents"]
        assert [c["role"] for c in contents] == ["user", "model", "user"]
        assert contents[1]["parts"] == [{"text": "Want to talk about it?"}]

    def test_blocked_reply(self):
        provider, _ = _gemini(text=None)
        with pytest.raises(LLMEmptyResponseError):
            provider.generate(messages=HI)

    @pytest.mark.parametrize(
        "message,error",
        [
            ("API key not valid", LLMAuthError),
            ("429 RESOURCE_EXHAUSTED", LLMRateLimitError),
            ("something broke", LLMError),
        ],
    )
    def test_error_mapping(self, message, error):
        provider, client = _gemini()
        client.models.generate_content.side_effect = Exception(message)
        with pytest.raises(error):
            provider.generate(messages=HI)


@pytest.mark.parametrize(
    "headers,expected",
    [({"retry-after": "12"}, 12.0), ({"retry-after": "soon"}, None), ({}, None), (None, None)],
)
def test_parse_retry_after(headers, expected):
    response = MagicMock(headers=headers) if headers is not None else None
    assert parse_retry_after(response) == expected
