from __future__ import annotations

from typing import Protocol, runtime_checkable

import openai
from loguru import logger
from tenacity import retry

from blog_agent_bot.providers.common import default_retry_kwargs


@runtime_checkable
class ImageGenerator(Protocol):
    async def generate(self, prompt: str) -> str:
        """Generate an image and return its URL."""
        ...


class OpenAIImageGenerator:
    def __init__(self, api_key: str, *, model: str = "dall-e-3", timeout: float = 120.0):
        self._client = openai.AsyncOpenAI(api_key=api_key, timeout=timeout)
        self._model = model

    async def close(self) -> None:
        await self._client.close()

    @retry(**default_retry_kwargs((
        openai.RateLimitError,
        openai.APIConnectionError,
        openai.APITimeoutError,
    )))
    async def generate(self, prompt: str) -> str:
        logger.debug(f"Image generation request: model={self._model}, prompt_len={len(prompt)}")
        response = await self._client.images.generate(model=self._model, prompt=prompt, n=1)
        url = response.data[0].url if response.data else None
        if not url:
            raise RuntimeError("Image generation returned no URL")
        return url
