"""LLM Client Package"""

from acommit.llm.base import (
    LLMClient, LLMResponse, Completion,
    LLMError, NetworkError, AuthError, ProviderError, EmptyResponseError,
    SYSTEM_INSTRUCTION, clean_commit_message, is_conventional,
)
from acommit.llm.gemini import GeminiClient
from acommit.llm.ollama import OllamaClient
from acommit.llm.openai import OpenAIClient

PROVIDERS = {
    "gemini": GeminiClient,
    "ollama": OllamaClient,
    "openai": OpenAIClient,
}


def get_client(config, trace=None) -> LLMClient:
    """Build the client for the config's active provider.

    No network traffic happens here; missing credentials fail immediately.
    """
    try:
        client_class = PROVIDERS[config.provider]
    except KeyError:
        raise LLMError(f"Unknown provider: {config.provider}. Use one of: {', '.join(PROVIDERS)}.")

    settings = config.settings
    kwargs = {"model": settings.model, "url": settings.url, "timeout": config.timeout, "trace": trace}
    if client_class is not OllamaClient:
        kwargs["api_key"] = settings.api_key
    return client_class(**kwargs)


__all__ = [
    "LLMClient",
    "LLMResponse",
    "Completion",
    "LLMError",
    "NetworkError",
    "AuthError",
    "ProviderError",
    "EmptyResponseError",
    "GeminiClient",
    "OllamaClient",
    "OpenAIClient",
    "PROVIDERS",
    "SYSTEM_INSTRUCTION",
    "clean_commit_message",
    "is_conventional",
    "get_client",
]
