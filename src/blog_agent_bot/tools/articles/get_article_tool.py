from dataclasses import asdict
from typing import Any

from blog_agent_bot.messages import ToolResult
from blog_agent_bot.tools.articles.article_formatter import format_article_detail
from blog_agent_bot.tools.articles.article_store import ArticleStore


class GetArticleTool:
    def __init__(self, store: ArticleStore):
        self._store = store

    @property
    def name(self) -> str:
        return "get_article"

    @property
    def description(self) -> str:
        return "Get the full content of an article by its filename."

    @property
    def input_schema(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "filename": {"type": "string", "description": "Article filename"},
            },
            "required": ["filename"],
        }

    async def execute(self, tool_input: dict[str, Any]) -> ToolResult:
        filename = (tool_input.get("filename") or "").strip()
        if not filename:
            return ToolResult("Error: filename is required")

        article = self._store.get(filename)
        if article is None:
            return ToolResult(f'Article "{filename}" not found.')
        return ToolResult(
            format_article_detail(article),
            metadata={"type": "article", "article": asdict(article)},
        )
