from __future__ import annotations

from dataclasses import dataclass

from blog_agent_bot.access_policy import AccessPolicy
from blog_agent_bot.agent import Agent
from blog_agent_bot.agent_config import AgentConfig
from blog_agent_bot.app_config import AppConfig, RuntimeEnv
from blog_agent_bot.cleanup_scheduler import CleanupScheduler
from blog_agent_bot.logging_config import setup_logging
from blog_agent_bot.provider import LLMProvider, create_provider
from blog_agent_bot.providers.local_first_provider import LocalFirstProvider
from blog_agent_bot.system_prompt import get_system_prompt
from blog_agent_bot.tool import Tool
from blog_agent_bot.tool_registry import build_tools
from blog_agent_bot.tools.articles.article_store import InMemoryArticleStore
from blog_agent_bot.tools.articles.hugo_client import HugoClient
from blog_agent_bot.tools.images.image_generator import OpenAIImageGenerator
from blog_agent_bot.tools.settings import settings_store as keys
from blog_agent_bot.tools.settings.settings_store import InMemorySettingsStore, SettingsStore


@dataclass
class AppRuntime:
    agent: Agent
    scheduler: CleanupScheduler
    settings: SettingsStore
    tools: list[Tool]
    log_descriptions: list[str]
    provider: LLMProvider
    image_generator: OpenAIImageGenerator | None = None

    async def close(self) -> None:
        await self.scheduler.stop()
        await self.provider.close()
        if self.image_generator is not None:
            await self.image_generator.close()


def build_settings(app: AppConfig, env: RuntimeEnv) -> InMemorySettingsStore:
    return InMemorySettingsStore({
        keys.HUGO_BASE_URL: env.hugo_base_url,
        keys.HUGO_API_KEY: env.hugo_api_key,
        keys.UNSPLASH_API_KEY: env.unsplash_api_key,
        keys.PIXABAY_API_KEY: env.pixabay_api_key,
        keys.LLM_ENDPOINT: app.llm_endpoint,
        keys.LLM_MODEL: app.llm_model,
        keys.LLM_API_KEY: env.llm_api_key,
        keys.LLM_USE_LOCAL: "true" if app.llm_use_local else None,
    })


async def bootstrap_runtime(app: AppConfig, env: RuntimeEnv) -> AppRuntime:
    log_descriptions = setup_logging(level=app.log_level, consumers=app.log_consumers)

    settings = build_settings(app, env)
    hugo_client = HugoClient(
        settings,
        default_base_url=env.hugo_base_url or "",
        timeout=app.tool_timeout_seconds,
    )

    image_generator = None
    if app.image_generation_enabled and env.openai_api_key:
        image_generator = OpenAIImageGenerator(env.openai_api_key, model=app.image_model)

    tools = build_tools(
        InMemoryArticleStore(),
        hugo_client,
        settings,
        image_generator,
    )

    primary = create_provider(
        app.provider_name,
        env.provider_api_key,
        model=app.model,
        max_tokens=app.max_tokens,
        temperature=app.temperature,
        timeout=app.llm_timeout_seconds,
    )

    provider = LocalFirstProvider(settings, primary)

    agent = Agent(
        AgentConfig(
            max_context_messages=app.max_context_messages,
            max_iterations=app.max_iterations,
            session_ttl_seconds=app.session_ttl_seconds,
            max_sessions=app.max_sessions,
            rate_window_seconds=app.rate_window_seconds,
            max_messages_per_window=app.max_messages_per_window,
            tool_timeout_seconds=app.tool_timeout_seconds,
            llm_timeout_seconds=app.llm_timeout_seconds,
            cleanup_interval_seconds=app.cleanup_interval_seconds,
            system_prompt=get_system_prompt(),
        ),
        provider=provider,
        tools=tools,
        access_policy=AccessPolicy(set(env.allowed_users)),
    )

    scheduler = CleanupScheduler(
        agent.session_store,
        agent.rate_limiter,
        interval_seconds=app.cleanup_interval_seconds,
    )
    await scheduler.start()

    return AppRuntime(
        agent=agent,
        scheduler=scheduler,
        settings=settings,
        tools=tools,
        log_descriptions=log_descriptions,
        provider=provider,
        image_generator=image_generator,
    )
