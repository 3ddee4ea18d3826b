import json

import openai
from loguru import logger
from tenacity import retry

from blog_agent_bot.messages import LLMResponse, Message, ToolCall
from blog_agent_bot.providers.common import default_retry_kwargs


def _to_openai_messages(messages: list[Message]) -> list[dict]:
    """Convert internal messages to OpenAI chat format."""
    out: list[dict] = []
    for msg in messages:
        if msg.role == "assistant" and msg.tool_calls:
            out.append({
                "role": "assistant",
                "content": msg.content or None,
                "tool_calls": [
                    {
                        "id": call.id,
                        "type": "function",
                        "function": {"name": call.name, "arguments": call.arguments_json},
                    }
                    for call in msg.tool_calls
                ],
            })
        elif msg.role == "tool":
            out.append({"role": "tool", "tool_call_id": msg.tool_call_id, "content": msg.content})
        else:
            out.append({"role": msg.role, "content": msg.content})
    return out


def _to_openai_tools(tools: list[dict]) -> list[dict]:
    """Convert provider-neutral tool dicts to OpenAI function-calling format."""
    return [
        {
            "type": "function",
            "function": {
                "name": t["name"],
                "description": t.get("description", ""),
                "parameters": t.get("input_schema", {}),
            },
        }
        for t in tools
    ]


def _parse_arguments(raw_args: str | None) -> dict:
    if not raw_args:
        return {}
    try:
        parsed = json.loads(raw_args)
    except json.JSONDecodeError:
        logger.warning(f"Failed to parse tool call arguments: {raw_args[:200]}")
        return {}
    return parsed if isinstance(parsed, dict) else {}


class OpenAIProvider:
    """OpenAI chat completions. Also serves any OpenAI-compatible endpoint via ``base_url``."""

    def __init__(
        self,
        api_key: str,
        *,
        model: str,
        max_tokens: int = 8192,
        temperature: float = 0.7,
        timeout: float = 120.0,
        base_url: str | None = None,
        client: openai.AsyncOpenAI | None = None,
    ):
        self._client = client or openai.AsyncOpenAI(api_key=api_key, base_url=base_url, timeout=timeout)
        self._model = model
        self._max_tokens = max_tokens
        self._temperature = temperature

    @property
    def model(self) -> str:
        return self._model

    async def close(self) -> None:
        await self._client.close()

    @retry(**default_retry_kwargs((
        openai.RateLimitError,
        openai.APIConnectionError,
        openai.APITimeoutError,
    )))
    async def invoke(self, messages: list[Message], tools: list[dict]) -> LLMResponse:
        oai_messages = _to_openai_messages(messages)
        oai_tools = _to_openai_tools(tools)

        logger.debug(
            f"API request: model={self._model}, max_tokens={self._max_tokens}, "
            f"messages={len(oai_messages)}, tools={len(oai_tools)}"
        )
        kwargs: dict = dict(
            model=self._model,
            max_tokens=self._max_tokens,
            temperature=self._temperature,
            messages=oai_messages,
        )
        if oai_tools:
            kwargs["tools"] = oai_tools
            kwargs["tool_choice"] = "auto"

        response = await self._client.chat.completions.create(**kwargs)
        if not response.choices:
            logger.warning("API response had no choices")
            return LLMResponse()

        choice = response.choices[0]
        message = choice.message
        tool_calls = tuple(
            ToolCall(
                id=tc.id,
                name=tc.function.name,
                arguments=_parse_arguments(tc.function.arguments),
            )
            for tc in (message.tool_calls or [])
        )

        logger.debug(
            f"API response: finish_reason={choice.finish_reason}, "
            f"text_len={len(message.content or '')}, tool_calls={len(tool_calls)}"
        )
        return LLMResponse(text=message.content or None, tool_calls=tool_calls)
