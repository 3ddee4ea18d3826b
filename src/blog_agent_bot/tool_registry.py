from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Callable

from loguru import logger

from blog_agent_bot.messages import ToolResult
from blog_agent_bot.providers.common import tool_schemas
from blog_agent_bot.sanitizer import sanitize_error_for_user
from blog_agent_bot.tool import Tool
from blog_agent_bot.tools.articles.create_article_tool import CreateArticleTool
from blog_agent_bot.tools.articles.delete_article_tool import DeleteArticleTool
from blog_agent_bot.tools.articles.edit_article_tool import EditArticleTool
from blog_agent_bot.tools.articles.get_article_tool import GetArticleTool
from blog_agent_bot.tools.articles.get_stats_tool import GetStatsTool
from blog_agent_bot.tools.articles.list_articles_tool import ListArticlesTool
from blog_agent_bot.tools.articles.sync_articles_tool import SyncArticlesTool
from blog_agent_bot.tools.images.image_search_tool import SearchImagesTool
from blog_agent_bot.tools.settings.get_settings_tool import GetSettingsTool
from blog_agent_bot.tools.settings.save_settings_tool import SaveSettingsTool

DEFAULT_TOOL_TIMEOUT_SECONDS = 30.0


@dataclass(frozen=True)
class ToolGroup:
    enabled: Callable[[dict], bool]
    build: Callable[[dict], list[Tool]]


def _always(_: dict) -> bool:
    return True


def _article_tools(ctx: dict) -> list[Tool]:
    store = ctx["article_store"]
    hugo = ctx["hugo_client"]
    return [
        ListArticlesTool(store),
        GetArticleTool(store),
        CreateArticleTool(hugo, store),
        EditArticleTool(hugo, store),
        DeleteArticleTool(hugo, store),
        SyncArticlesTool(hugo, store),
        GetStatsTool(store),
    ]


def _settings_backed_tools(ctx: dict) -> list[Tool]:
    settings = ctx["settings"]
    return [
        SearchImagesTool(settings),
        GetSettingsTool(settings),
        SaveSettingsTool(settings),
    ]


def _image_generation_enabled(ctx: dict) -> bool:
    return ctx.get("image_generator") is not None


def _image_generation_tools(ctx: dict) -> list[Tool]:
    from blog_agent_bot.tools.images.generate_image_tool import GenerateImageTool

    return [GenerateImageTool(ctx["image_generator"])]


_GROUPS = [
    ToolGroup(enabled=_always, build=_article_tools),
    ToolGroup(enabled=_always, build=_settings_backed_tools),
    ToolGroup(enabled=_image_generation_enabled, build=_image_generation_tools),
]


def build_tools(
    article_store,
    hugo_client,
    settings,
    image_generator=None,
) -> list[Tool]:
    ctx = {
        "article_store": article_store,
        "hugo_client": hugo_client,
        "settings": settings,
        "image_generator": image_generator,
    }

    tools: list[Tool] = []
    for group in _GROUPS:
        if group.enabled(ctx):
            tools.extend(group.build(ctx))
    return tools


class ToolRegistry:
    """Name-indexed tool catalogue with bounded, failure-isolated execution.

    ``execute`` never raises: unknown names, timeouts and tool exceptions all
    come back as a ``ToolResult`` whose text the model can read.
    """

    def __init__(self, tools: list[Tool], *, timeout: float = DEFAULT_TOOL_TIMEOUT_SECONDS):
        if timeout <= 0:
            raise ValueError("timeout must be positive")
        self._tools: dict[str, Tool] = {}
        for tool in tools:
            if tool.name in self._tools:
                raise ValueError(f"Duplicate tool name: {tool.name!r}")
            self._tools[tool.name] = tool
        self._timeout = timeout

    def __len__(self) -> int:
        return len(self._tools)

    def schemas(self) -> list[dict]:
        return tool_schemas(self._tools.values())

    async def execute(self, name: str, args: dict[str, Any]) -> ToolResult:
        tool = self._tools.get(name)
        if tool is None:
            logger.warning(f"Model requested unknown tool: {name}")
            return ToolResult(f"Unknown tool: {name}")

        try:
            result = await asyncio.wait_for(tool.execute(args), timeout=self._timeout)
        except asyncio.TimeoutError:
            logger.error(f'Tool "{name}" timed out after {self._timeout:.0f}s')
            return ToolResult(f'Error executing tool "{name}": timed out after {self._timeout:.0f}s')
        except Exception as ex:
            logger.error(f'Tool "{name}" failed: {type(ex).__name__}: {ex}')
            return ToolResult(f'Error executing tool "{name}": {sanitize_error_for_user(ex)}')

        logger.debug(f'Tool "{name}" returned {len(result.text)} chars')
        return result
