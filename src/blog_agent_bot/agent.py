from __future__ import annotations

import asyncio
import weakref
from typing import Any

from loguru import logger

from blog_agent_bot.access_policy import AccessPolicy
from blog_agent_bot.agent_config import AgentConfig
from blog_agent_bot.clock import Clock, SystemClock
from blog_agent_bot.commands.router import CommandRouter
from blog_agent_bot.messages import AgentReply, ImageAttachment, Message, ToolResult
from blog_agent_bot.provider import LLMProvider
from blog_agent_bot.rate_limiter import RateLimiter
from blog_agent_bot.session_store import SessionStore
from blog_agent_bot.tool import Tool
from blog_agent_bot.tool_registry import ToolRegistry
from blog_agent_bot.turn_engine import TurnEngine

NO_ACCESS_TEXT = "You do not have access to this bot."
RATE_LIMITED_TEXT = "Too many messages. Please wait a minute before your next request."
NEW_CONVERSATION_TEXT = "Context cleared. Starting a new conversation!"
START_TEXT = (
    "AI Blog Bot\n\n"
    "I help you manage your Hugo blog. Just tell me what you need.\n\n"
    "Examples:\n"
    "- Show the list of articles\n"
    "- Write an article about AI in 2025\n"
    "- Find images for an article about technology\n"
    "- Generate a cover image for the blog"
)
HELP_TEXT = (
    "Commands:\n\n"
    "/start - Main menu\n"
    "/articles - List articles\n"
    "/stats - Blog statistics\n"
    "/sync - Sync with Hugo\n"
    "/settings - Settings\n"
    "/new - New conversation\n"
    "/help - This help\n\n"
    "Or just write your request in plain language!"
)

MAX_SEARCH_IMAGES_PER_RESULT = 4


def collect_images(tool_results: list[tuple[str, ToolResult]]) -> list[ImageAttachment]:
    images: list[ImageAttachment] = []
    for _, result in tool_results:
        metadata: dict[str, Any] = result.metadata or {}
        kind = metadata.get("type")
        if kind == "images":
            for img in (metadata.get("images") or [])[:MAX_SEARCH_IMAGES_PER_RESULT]:
                url = img.get("url") or img.get("thumb")
                if url:
                    images.append(ImageAttachment(url=url, caption=img.get("description")))
        elif kind == "generated_image" and metadata.get("url"):
            images.append(ImageAttachment(url=metadata["url"], caption=metadata.get("prompt")))
    return images


class Agent:
    """Per-user conversational front door: access, rate limit, session, loop."""

    def __init__(
        self,
        config: AgentConfig,
        *,
        provider: LLMProvider,
        tools: list[Tool],
        session_store: SessionStore | None = None,
        rate_limiter: RateLimiter | None = None,
        access_policy: AccessPolicy | None = None,
        clock: Clock | None = None,
    ):
        clock = clock or SystemClock()
        self._config = config
        self._session_store = session_store or SessionStore(
            max_context_messages=config.max_context_messages,
            max_sessions=config.max_sessions,
            session_ttl=config.session_ttl_seconds,
            clock=clock,
        )
        self._rate_limiter = rate_limiter or RateLimiter(
            max_messages_per_window=config.max_messages_per_window,
            window_seconds=config.rate_window_seconds,
            clock=clock,
        )
        self._access_policy = access_policy or AccessPolicy()
        self._registry = ToolRegistry(tools, timeout=config.tool_timeout_seconds)
        self._turn_engine = TurnEngine(
            provider=provider,
            registry=self._registry,
            system_prompt=config.system_prompt,
            max_iterations=config.max_iterations,
            llm_timeout=config.llm_timeout_seconds,
        )
        self._locks: weakref.WeakValueDictionary[str, asyncio.Lock] = weakref.WeakValueDictionary()

        self._command_router = CommandRouter(
            on_start=self._on_start,
            on_new=self._on_new,
            on_help=self._on_help,
            on_prompt=self.run,
            on_unknown=self._on_unknown_command,
        )

    @property
    def session_store(self) -> SessionStore:
        return self._session_store

    @property
    def rate_limiter(self) -> RateLimiter:
        return self._rate_limiter

    @property
    def registry(self) -> ToolRegistry:
        return self._registry

    async def handle(self, user_key: str, text: str) -> AgentReply:
        """Entry point for a platform message: commands first, then the loop."""
        if not self._access_policy.is_allowed(user_key):
            logger.warning(f"Access denied for user {user_key}")
            return AgentReply(NO_ACCESS_TEXT)
        reply = await self._command_router.try_handle(user_key, text)
        if reply is not None:
            return reply
        return await self.run(user_key, text)

    async def run(self, user_key: str, text: str) -> AgentReply:
        if not self._access_policy.is_allowed(user_key):
            logger.warning(f"Access denied for user {user_key}")
            return AgentReply(NO_ACCESS_TEXT)

        if not self._rate_limiter.allow(user_key):
            return AgentReply(RATE_LIMITED_TEXT, rate_limited=True)

        lock = self._lock_for(user_key)
        async with lock:
            return await self._run_inner(user_key, text)

    async def _run_inner(self, user_key: str, text: str) -> AgentReply:
        self._session_store.append(user_key, Message.user(text))
        history = self._session_store.messages(user_key)

        def append(message: Message) -> None:
            self._session_store.append(user_key, message)

        outcome = await self._turn_engine.run(history, on_append_message=append)
        self._session_store.append(user_key, Message.assistant(outcome.text))

        logger.info(
            f"Turn complete for user {user_key}: iterations={outcome.iterations}, "
            f"tool_calls={len(outcome.tool_results)}, model_failed={outcome.model_failed}"
        )
        return AgentReply(text=outcome.text, images=collect_images(outcome.tool_results))

    async def reset(self, user_key: str) -> None:
        """Start a new conversation once any in-flight turn for the user has finished."""
        async with self._lock_for(user_key):
            self._session_store.reset(user_key)

    def _lock_for(self, user_key: str) -> asyncio.Lock:
        lock = self._locks.get(user_key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[user_key] = lock
        return lock

    async def _on_start(self, user_key: str) -> AgentReply:
        await self.reset(user_key)
        return AgentReply(START_TEXT)

    async def _on_new(self, user_key: str) -> AgentReply:
        await self.reset(user_key)
        return AgentReply(NEW_CONVERSATION_TEXT)

    async def _on_help(self, user_key: str) -> AgentReply:
        return AgentReply(HELP_TEXT)

    async def _on_unknown_command(self, user_key: str, command: str) -> AgentReply:
        return AgentReply(f"Unknown command: {command}. Send /help for the list of commands.")
