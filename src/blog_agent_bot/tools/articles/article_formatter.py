import re

from blog_agent_bot.tools.articles.article_store import Article

MAX_PREVIEW_CHARS = 3000


def status_label(article: Article) -> str:
    return "draft" if article.draft else "published"


def format_article_line(index: int, article: Article) -> str:
    return f"{index}. {article.title} ({article.filename}) - {status_label(article)}"


def format_article_detail(article: Article) -> str:
    """Full article view with content capped at MAX_PREVIEW_CHARS."""
    content = article.content or ""
    body = content[:MAX_PREVIEW_CHARS] if content else "(empty)"
    lines = [
        article.title,
        "",
        f"File: {article.filename}",
        f"Status: {status_label(article)}",
        f"Tags: {article.tags or 'none'}",
        f"Categories: {article.categories or 'none'}",
        f"Description: {article.description or 'none'}",
        "",
        "---",
        "",
        body,
    ]
    if len(content) > MAX_PREVIEW_CHARS:
        lines.append("")
        lines.append("...(content truncated)")
    return "\n".join(lines)


def slugify(title: str) -> str:
    slug = re.sub(r"[\W_]+", "-", title.lower()).strip("-")
    return slug or "untitled"
