from __future__ import annotations

from collections.abc import Awaitable, Callable

from blog_agent_bot.messages import AgentReply

# Commands that are shortcuts for a natural-language request.
CANNED_PROMPTS = {
    "/articles": "Show the list of all articles",
    "/stats": "Show the blog statistics",
    "/sync": "Sync articles with Hugo",
    "/settings": "Show the current settings",
}


class CommandRouter:
    def __init__(
        self,
        *,
        on_start: Callable[[str], Awaitable[AgentReply]],
        on_new: Callable[[str], Awaitable[AgentReply]],
        on_help: Callable[[str], Awaitable[AgentReply]],
        on_prompt: Callable[[str, str], Awaitable[AgentReply]],
        on_unknown: Callable[[str, str], Awaitable[AgentReply]],
    ) -> None:
        self._on_start = on_start
        self._on_new = on_new
        self._on_help = on_help
        self._on_prompt = on_prompt
        self._on_unknown = on_unknown

    async def try_handle(self, user_key: str, user_message: str) -> AgentReply | None:
        trimmed = user_message.strip()
        if not trimmed.startswith("/"):
            return None

        # "/help@my_bot" addresses a bot by name in group chats.
        command = trimmed.split()[0].split("@", 1)[0].lower()

        if command == "/start":
            return await self._on_start(user_key)
        if command == "/new":
            return await self._on_new(user_key)
        if command == "/help":
            return await self._on_help(user_key)
        prompt = CANNED_PROMPTS.get(command)
        if prompt is not None:
            return await self._on_prompt(user_key, prompt)

        return await self._on_unknown(user_key, command)
