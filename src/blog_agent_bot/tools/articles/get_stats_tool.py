from dataclasses import asdict
from typing import Any

from blog_agent_bot.messages import ToolResult
from blog_agent_bot.tools.articles.article_store import ArticleStore


class GetStatsTool:
    def __init__(self, store: ArticleStore):
        self._store = store

    @property
    def name(self) -> str:
        return "get_stats"

    @property
    def description(self) -> str:
        return "Get blog statistics: total, published and draft article counts."

    @property
    def input_schema(self) -> dict[str, Any]:
        return {"type": "object", "properties": {}, "required": []}

    async def execute(self, tool_input: dict[str, Any]) -> ToolResult:
        stats = self._store.stats()
        return ToolResult(
            "Blog statistics:\n\n"
            f"- Total articles: {stats.total}\n"
            f"- Published: {stats.published}\n"
            f"- Drafts: {stats.drafts}",
            metadata={"type": "stats", "stats": asdict(stats)},
        )
