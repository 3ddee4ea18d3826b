from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Protocol, runtime_checkable


@dataclass(frozen=True)
class Article:
    filename: str
    title: str
    slug: str | None = None
    description: str | None = None
    content: str | None = None
    tags: str | None = None
    categories: str | None = None
    draft: bool = False
    hugo_url: str | None = None
    synced_at: datetime | None = None


@dataclass(frozen=True)
class ArticleStats:
    total: int
    published: int
    drafts: int


@runtime_checkable
class ArticleStore(Protocol):
    """Local cache of blog articles mirrored from the Hugo CMS."""

    def list_articles(self, search: str | None = None, limit: int = 10) -> tuple[list[Article], int]:
        """Return (page of articles, total matching count)."""
        ...

    def get(self, filename: str) -> Article | None: ...

    def upsert(self, article: Article) -> None: ...

    def delete(self, filename: str) -> bool: ...

    def stats(self) -> ArticleStats: ...


class InMemoryArticleStore:
    def __init__(self, articles: list[Article] | None = None):
        self._articles: dict[str, Article] = {a.filename: a for a in articles or []}

    def list_articles(self, search: str | None = None, limit: int = 10) -> tuple[list[Article], int]:
        items = list(self._articles.values())
        if search:
            needle = search.casefold()
            items = [
                a for a in items
                if needle in a.title.casefold() or needle in (a.tags or "").casefold()
            ]
        items.sort(key=lambda a: a.synced_at.timestamp() if a.synced_at else 0.0, reverse=True)
        return items[: max(0, limit)], len(items)

    def get(self, filename: str) -> Article | None:
        return self._articles.get(filename)

    def upsert(self, article: Article) -> None:
        existing = self._articles.get(article.filename)
        if existing is not None and article.slug is None and existing.slug is not None:
            article = replace(article, slug=existing.slug)
        self._articles[article.filename] = article

    def delete(self, filename: str) -> bool:
        return self._articles.pop(filename, None) is not None

    def stats(self) -> ArticleStats:
        total = len(self._articles)
        drafts = sum(1 for a in self._articles.values() if a.draft)
        return ArticleStats(total=total, published=total - drafts, drafts=drafts)
