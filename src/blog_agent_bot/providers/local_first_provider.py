from __future__ import annotations

import asyncio
from typing import Callable

from loguru import logger

from blog_agent_bot.messages import LLMResponse, Message
from blog_agent_bot.provider import LLMProvider
from blog_agent_bot.providers.openai_provider import OpenAIProvider
from blog_agent_bot.tools.settings import settings_store as keys
from blog_agent_bot.tools.settings.settings_store import SettingsStore

LOCAL_TIMEOUT_SECONDS = 60.0
DEFAULT_LOCAL_MODEL = "default"

LocalTarget = tuple[str, str, str]
LocalProviderFactory = Callable[[str, str, str], LLMProvider]


def _openai_compatible(endpoint: str, model: str, api_key: str) -> LLMProvider:
    return OpenAIProvider(
        api_key or "not-needed",
        model=model,
        base_url=f"{endpoint.rstrip('/')}/v1",
        timeout=LOCAL_TIMEOUT_SECONDS,
    )


class LocalFirstProvider:
    """Prefers a self-hosted OpenAI-compatible model when enabled in settings.

    Settings are read on every call, so switching ``llm_use_local`` takes
    effect on the next message. Any local failure falls back to ``fallback``.
    One local provider is kept per (endpoint, model, api_key) and closed when
    those settings change or local mode is switched off.
    """

    def __init__(
        self,
        settings: SettingsStore,
        fallback: LLMProvider,
        *,
        local_factory: LocalProviderFactory = _openai_compatible,
        local_timeout: float = LOCAL_TIMEOUT_SECONDS,
    ):
        self._settings = settings
        self._fallback = fallback
        self._local_factory = local_factory
        self._local_timeout = local_timeout
        self._local: LLMProvider | None = None
        self._local_key: LocalTarget | None = None
        self._local_lock = asyncio.Lock()

    def _local_target(self) -> LocalTarget | None:
        if (self._settings.get(keys.LLM_USE_LOCAL) or "").lower() != "true":
            return None
        endpoint = self._settings.get(keys.LLM_ENDPOINT)
        if not endpoint:
            return None
        model = self._settings.get(keys.LLM_MODEL) or DEFAULT_LOCAL_MODEL
        return endpoint, model, self._settings.get(keys.LLM_API_KEY) or ""

    async def _local_for(self, target: LocalTarget | None) -> LLMProvider | None:
        async with self._local_lock:
            if target != self._local_key:
                await self._close_local()
                if target is not None:
                    self._local = self._local_factory(*target)
                    self._local_key = target
                    logger.info(f"Local LLM configured: endpoint={target[0]}, model={target[1]}")
            return self._local

    async def _close_local(self) -> None:
        local, self._local, self._local_key = self._local, None, None
        if local is not None:
            await local.close()

    async def invoke(self, messages: list[Message], tools: list[dict]) -> LLMResponse:
        target = self._local_target()
        local = await self._local_for(target)
        if local is not None:
            try:
                return await asyncio.wait_for(local.invoke(messages, tools), timeout=self._local_timeout)
            except Exception as ex:
                logger.warning(f"Local LLM at {target[0]} failed, falling back: {type(ex).__name__}: {ex}")
        return await self._fallback.invoke(messages, tools)

    async def close(self) -> None:
        async with self._local_lock:
            await self._close_local()
        await self._fallback.close()
