from datetime import UTC, datetime
from typing import Any

from loguru import logger

from blog_agent_bot.messages import ToolResult
from blog_agent_bot.sanitizer import sanitize_error_for_user
from blog_agent_bot.tools.articles.article_formatter import slugify
from blog_agent_bot.tools.articles.article_store import Article, ArticleStore
from blog_agent_bot.tools.articles.hugo_client import HugoClient


class CreateArticleTool:
    def __init__(self, hugo: HugoClient, store: ArticleStore):
        self._hugo = hugo
        self._store = store

    @property
    def name(self) -> str:
        return "create_article"

    @property
    def description(self) -> str:
        return (
            "Create a new article on the Hugo blog. If the Hugo API is unavailable "
            "the article is kept locally as a draft."
        )

    @property
    def input_schema(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "title": {"type": "string", "description": "Article title"},
                "content": {"type": "string", "description": "Article body in Markdown"},
                "description": {"type": "string", "description": "Short SEO description"},
                "tags": {"type": "string", "description": "Comma-separated tags"},
                "categories": {"type": "string", "description": "Comma-separated categories"},
                "draft": {"type": "boolean", "description": "Save as draft (true) or publish (false)"},
            },
            "required": ["title", "content"],
        }

    async def execute(self, tool_input: dict[str, Any]) -> ToolResult:
        title = (tool_input.get("title") or "").strip()
        if not title:
            return ToolResult("Error: title is required")
        content = tool_input.get("content") or ""
        description = tool_input.get("description") or ""
        tags = tool_input.get("tags") or ""
        categories = tool_input.get("categories") or ""
        draft = bool(tool_input.get("draft", False))

        try:
            data = await self._hugo.create_post({
                "title": title,
                "content": content,
                "description": description,
                "tags": tags,
                "categories": categories,
                "draft": draft,
            })
        except Exception as ex:
            logger.warning(f"create_article: Hugo create failed, keeping local draft: {ex}")
            self._store.upsert(Article(
                filename=slugify(title),
                title=title,
                content=content,
                description=description,
                tags=tags,
                categories=categories,
                draft=True,
                synced_at=datetime.now(UTC),
            ))
            return ToolResult(
                f"Article saved locally as a draft. Hugo error: {sanitize_error_for_user(ex)}"
            )

        filename = data.get("filename") or data.get("slug") or title.lower().replace(" ", "-")
        self._store.upsert(Article(
            filename=filename,
            title=title,
            slug=data.get("slug"),
            content=content,
            description=description,
            tags=tags,
            categories=categories,
            draft=draft,
            hugo_url=data.get("url"),
            synced_at=datetime.now(UTC),
        ))
        return ToolResult(f'Article "{title}" created ({filename}).')
