from datetime import UTC, datetime
from typing import Any

from loguru import logger

from blog_agent_bot.messages import ToolResult
from blog_agent_bot.sanitizer import sanitize_error_for_user
from blog_agent_bot.tools.articles.article_store import Article, ArticleStore
from blog_agent_bot.tools.articles.hugo_client import HugoClient


def _optional_str(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, list):
        return ", ".join(str(v) for v in value)
    return str(value)


class SyncArticlesTool:
    def __init__(self, hugo: HugoClient, store: ArticleStore):
        self._hugo = hugo
        self._store = store

    @property
    def name(self) -> str:
        return "sync_articles"

    @property
    def description(self) -> str:
        return "Pull all posts from the Hugo blog into the local article list."

    @property
    def input_schema(self) -> dict[str, Any]:
        return {"type": "object", "properties": {}, "required": []}

    async def execute(self, tool_input: dict[str, Any]) -> ToolResult:
        try:
            posts = await self._hugo.list_posts()
        except Exception as ex:
            logger.error(f"sync_articles failed: {ex}")
            return ToolResult(f"Error syncing articles: {sanitize_error_for_user(ex)}")

        now = datetime.now(UTC)
        for index, post in enumerate(posts):
            self._store.upsert(Article(
                filename=post.get("filename") or post.get("slug") or f"post-{index}",
                title=post.get("title") or "Untitled",
                slug=post.get("slug"),
                description=post.get("description"),
                content=post.get("content"),
                tags=_optional_str(post.get("tags")),
                categories=_optional_str(post.get("categories")),
                draft=bool(post.get("draft", False)),
                hugo_url=post.get("url"),
                synced_at=now,
            ))
        logger.info(f"Synced {len(posts)} article(s) from Hugo")
        return ToolResult(f"Sync complete. Loaded {len(posts)} article(s).")
