from typing import Any

from loguru import logger

from blog_agent_bot.messages import ToolResult
from blog_agent_bot.sanitizer import sanitize_error_for_user
from blog_agent_bot.tools.articles.article_store import ArticleStore
from blog_agent_bot.tools.articles.hugo_client import HugoClient


class DeleteArticleTool:
    def __init__(self, hugo: HugoClient, store: ArticleStore):
        self._hugo = hugo
        self._store = store

    @property
    def name(self) -> str:
        return "delete_article"

    @property
    def description(self) -> str:
        return "Delete an article from the blog. This cannot be undone; confirm with the user first."

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

        try:
            await self._hugo.delete_post(filename)
        except Exception as ex:
            logger.error(f"delete_article failed for {filename}: {ex}")
            return ToolResult(f"Error deleting article: {sanitize_error_for_user(ex)}")

        self._store.delete(filename)
        return ToolResult(f'Article "{filename}" deleted.')
