from typing import Protocol, runtime_checkable

from blog_agent_bot.messages import LLMResponse, Message


@runtime_checkable
class LLMProvider(Protocol):
    async def invoke(self, messages: list[Message], tools: list[dict]) -> LLMResponse:
        """Send the conversation and tool schemas, return text and/or tool calls.

        ``messages`` may start with a system message. ``tools`` are
        provider-neutral dicts with ``name``, ``description`` and
        ``input_schema``.
        """
        ...

    async def close(self) -> None:
        """Release the underlying HTTP client."""
        ...


def create_provider(
    provider_name: str,
    api_key: str,
    *,
    model: str,
    max_tokens: int,
    temperature: float,
    timeout: float,
) -> LLMProvider:
    """Factory: create an LLMProvider by name."""
    name = provider_name.strip().lower()
    if name == "anthropic":
        from blog_agent_bot.providers.anthropic_provider import AnthropicProvider
        return AnthropicProvider(
            api_key, model=model, max_tokens=max_tokens, temperature=temperature, timeout=timeout,
        )
    if name == "openai":
        from blog_agent_bot.providers.openai_provider import OpenAIProvider
        return OpenAIProvider(
            api_key, model=model, max_tokens=max_tokens, temperature=temperature, timeout=timeout,
        )
    raise ValueError(f"Unknown provider: {provider_name!r}. Supported: 'anthropic', 'openai'")
