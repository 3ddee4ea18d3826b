from typing import Any

import httpx
from loguru import logger

from blog_agent_bot.messages import ToolResult
from blog_agent_bot.sanitizer import sanitize_error_for_user
from blog_agent_bot.tools.settings import settings_store as keys
from blog_agent_bot.tools.settings.settings_store import SettingsStore

_UNSPLASH_SEARCH_URL = "https://api.unsplash.com/search/photos"
_PIXABAY_SEARCH_URL = "https://pixabay.com/api/"
_TIMEOUT_SECONDS = 30
_DEFAULT_COUNT = 6
_MAX_COUNT = 20


class SearchImagesTool:
    def __init__(
        self,
        settings: SettingsStore,
        *,
        timeout: float = _TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._settings = settings
        self._timeout = timeout
        self._transport = transport

    @property
    def name(self) -> str:
        return "search_images"

    @property
    def description(self) -> str:
        return "Search free stock images (Unsplash or Pixabay). Write the query in English."

    @property
    def input_schema(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "query": {"type": "string", "description": "Search query in English"},
                "count": {"type": "number", "description": "Number of images (default 6, max 20)"},
            },
            "required": ["query"],
        }

    async def execute(self, tool_input: dict[str, Any]) -> ToolResult:
        query = (tool_input.get("query") or "").strip()
        if not query:
            return ToolResult("Error: query must not be empty")
        count = max(1, min(_MAX_COUNT, int(tool_input.get("count") or _DEFAULT_COUNT)))

        unsplash_key = self._settings.get(keys.UNSPLASH_API_KEY)
        pixabay_key = self._settings.get(keys.PIXABAY_API_KEY)
        if not unsplash_key and not pixabay_key:
            return ToolResult(
                "No image search API key is configured (Unsplash or Pixabay). "
                "Configure one in the settings or use generate_image instead."
            )

        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                if unsplash_key:
                    images = await self._search_unsplash(client, unsplash_key, query, count)
                else:
                    images = await self._search_pixabay(client, pixabay_key or "", query, count)
        except Exception as ex:
            logger.error(f"search_images failed: {ex}")
            return ToolResult(f"Error searching images: {sanitize_error_for_user(ex)}")

        return ToolResult(
            f'Found {len(images)} image(s) for "{query}"',
            metadata={"type": "images", "images": images},
        )

    async def _search_unsplash(
        self, client: httpx.AsyncClient, api_key: str, query: str, count: int
    ) -> list[dict[str, Any]]:
        response = await client.get(
            _UNSPLASH_SEARCH_URL,
            params={"query": query, "per_page": count},
            headers={"Authorization": f"Client-ID {api_key}"},
        )
        response.raise_for_status()
        return [
            {
                "url": img.get("urls", {}).get("regular", ""),
                "thumb": img.get("urls", {}).get("thumb", ""),
                "description": img.get("description") or img.get("alt_description") or query,
                "author": img.get("user", {}).get("name", ""),
            }
            for img in response.json().get("results", [])
        ]

    async def _search_pixabay(
        self, client: httpx.AsyncClient, api_key: str, query: str, count: int
    ) -> list[dict[str, Any]]:
        # Pixabay rejects per_page below 3.
        response = await client.get(
            _PIXABAY_SEARCH_URL,
            params={"key": api_key, "q": query, "per_page": max(3, count), "image_type": "photo"},
        )
        response.raise_for_status()
        return [
            {
                "url": img.get("largeImageURL", ""),
                "thumb": img.get("previewURL", ""),
                "description": img.get("tags") or query,
                "author": img.get("user", ""),
            }
            for img in response.json().get("hits", [])[:count]
        ]
