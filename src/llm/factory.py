"""Pick and build the analysis backend from config, explicit keys or env."""

import os

import structlog

from .base import LLMAuthError, LLMError, LLMProvider

logger = structlog.get_logger()

# Env vars per backend, in auto-detect order. Gemini first: the analysis
# prompts were tuned against Gemini Flash.
_PROVIDER_KEYS = {
    "gemini": ("GEMINI_API_KEY", "GOOGLE_API_KEY"),
    "claude": ("ANTHROPIC_API_KEY",),
    "openai": ("OPENAI_API_KEY",),
}

_KEY_PREFIXES = (("sk-ant-", "claude"), ("sk-", "openai"), ("AI", "gemini"))


def _provider_class(name: str) -> type[LLMProvider]:
    # SDK imports stay lazy so only the chosen backend is loaded
    if name == "gemini":
        from .providers.gemini import GeminiProvider

        return GeminiProvider
    if name == "claude":
        from .providers.claude import ClaudeProvider

        return ClaudeProvider
    from .providers.openai import OpenAIProvider

    return OpenAIProvider


def _env_key(name: str) -> str | None:
    for var in _PROVIDER_KEYS[name]:
        value = os.getenv(var)
        if value:
            return value
    return None


def create_llm_provider(
    provider: str | None = None,
    api_key: str | None = None,
    model: str | None = None,
    client=None,
) -> LLMProvider:
    """Create a backend.

    Args:
        provider: "gemini", "claude", "openai", "auto", or None (auto-detect)
        api_key: Explicit API key (overrides env vars)
        model: Model name (None = backend default)
        client: Pre-built SDK client, used by tests

    Raises:
        LLMError: unknown provider name, or no key anywhere for auto-detect
        LLMAuthError: the chosen backend has no key
    """
    name = (provider or "auto").lower()
    if name == "auto":
        name = _auto_detect_provider(api_key)
    if name not in _PROVIDER_KEYS:
        raise LLMError(f"Unknown provider: {name}. Use: {', '.join(_PROVIDER_KEYS)}")

    if not api_key and client is None:
        api_key = _env_key(name)
        if not api_key:
            raise LLMAuthError(f"No API key for {name}. Set {' or '.join(_PROVIDER_KEYS[name])}")

    cls = _provider_class(name)
    instance = cls(api_key=api_key, model=model, client=client)
    logger.debug("llm.provider_created", provider=name, model=instance.model)
    return instance


def _auto_detect_provider(api_key: str | None = None) -> str:
    """Explicit key prefix first, then the first backend with a key in env."""
    if api_key:
        for prefix, name in _KEY_PREFIXES:
            if api_key.startswith(prefix):
                return name

    for name in _PROVIDER_KEYS:
        if _env_key(name):
            return name
    raise LLMError(
        "No LLM API key found. Set one of: "
        + ", ".join(var for keys in _PROVIDER_KEYS.values() for var in keys)
    )
