from dataclasses import replace
from datetime import UTC, datetime
from typing import Any

from loguru import logger

from blog_agent_bot.messages import ToolResult
from blog_agent_bot.sanitizer import sanitize_error_for_user
from blog_agent_bot.tools.articles.article_store import ArticleStore
from blog_agent_bot.tools.articles.hugo_client import HugoClient

_EDITABLE_FIELDS = ("title", "content", "description", "tags", "categories", "draft")


class EditArticleTool:
    def __init__(self, hugo: HugoClient, store: ArticleStore):
        self._hugo = hugo
        self._store = store

    @property
    def name(self) -> str:
        return "edit_article"

    @property
    def description(self) -> str:
        return "Edit an existing article. Only the provided fields are changed."

    @property
    def input_schema(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "filename": {"type": "string", "description": "Article filename"},
                "title": {"type": "string", "description": "New title"},
                "content": {"type": "string", "description": "New Markdown content"},
                "description": {"type": "string", "description": "New description"},
                "tags": {"type": "string", "description": "New comma-separated tags"},
                "categories": {"type": "string", "description": "New comma-separated categories"},
                "draft": {"type": "boolean", "description": "Draft (true) or published (false)"},
            },
            "required": ["filename"],
        }

    async def execute(self, tool_input: dict[str, Any]) -> ToolResult:
        filename = (tool_input.get("filename") or "").strip()
        if not filename:
            return ToolResult("Error: filename is required")
        changes = {k: tool_input[k] for k in _EDITABLE_FIELDS if k in tool_input}

        try:
            await self._hugo.edit_post(filename, changes)
        except Exception as ex:
            logger.error(f"edit_article failed for {filename}: {ex}")
            return ToolResult(f"Error editing article: {sanitize_error_for_user(ex)}")

        existing = self._store.get(filename)
        if existing is not None:
            self._store.upsert(replace(existing, **changes, synced_at=datetime.now(UTC)))
        return ToolResult(f'Article "{filename}" updated.')
