from dataclasses import asdict
from typing import Any

from blog_agent_bot.messages import ToolResult
from blog_agent_bot.tools.articles.article_formatter import format_article_line
from blog_agent_bot.tools.articles.article_store import ArticleStore

_DEFAULT_LIMIT = 10


class ListArticlesTool:
    def __init__(self, store: ArticleStore):
        self._store = store

    @property
    def name(self) -> str:
        return "list_articles"

    @property
    def description(self) -> str:
        return "List blog articles, optionally filtered by a search term matched against titles and tags."

    @property
    def input_schema(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "search": {"type": "string", "description": "Search term"},
                "limit": {"type": "number", "description": "Maximum number of articles (default 10)"},
            },
            "required": [],
        }

    async def execute(self, tool_input: dict[str, Any]) -> ToolResult:
        search = (tool_input.get("search") or "").strip() or None
        limit = int(tool_input.get("limit") or _DEFAULT_LIMIT)

        items, total = self._store.list_articles(search=search, limit=limit)
        if not items:
            return ToolResult("No articles found.")

        listing = "\n".join(format_article_line(i, a) for i, a in enumerate(items, 1))
        return ToolResult(
            f"Found {total} article(s):\n\n{listing}",
            metadata={"type": "articles", "items": [asdict(a) for a in items]},
        )
