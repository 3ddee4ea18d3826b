from __future__ import annotations

from typing import Any
from urllib.parse import quote

import httpx
from loguru import logger

from blog_agent_bot.tools.settings import settings_store as keys
from blog_agent_bot.tools.settings.settings_store import SettingsStore

_TIMEOUT_SECONDS = 30


class HugoNotConfiguredError(RuntimeError):
    pass


class HugoApiError(RuntimeError):
    def __init__(self, status_code: int, operation: str):
        super().__init__(f"Hugo API: HTTP {status_code} ({operation})")
        self.status_code = status_code
        self.operation = operation


class HugoClient:
    """REST client for the Hugo admin API.

    Base URL and key are read from the settings store on every call so that
    ``save_settings`` takes effect without a restart.
    """

    def __init__(
        self,
        settings: SettingsStore,
        *,
        default_base_url: str = "",
        timeout: float = _TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._settings = settings
        self._default_base_url = default_base_url
        self._timeout = timeout
        self._transport = transport

    async def create_post(self, payload: dict[str, Any]) -> dict[str, Any]:
        data = await self._request("POST", "/api/posts/create", "create", json=payload)
        return data if isinstance(data, dict) else {}

    async def edit_post(self, filename: str, payload: dict[str, Any]) -> None:
        await self._request("PUT", f"/api/posts/edit/{quote(filename, safe='')}", "edit", json=payload)

    async def delete_post(self, filename: str) -> None:
        await self._request("DELETE", f"/api/posts/delete/{quote(filename, safe='')}", "delete")

    async def list_posts(self) -> list[dict[str, Any]]:
        data = await self._request("GET", "/api/posts/list", "list")
        if not isinstance(data, list):
            return []
        return [p for p in data if isinstance(p, dict)]

    def _config(self) -> tuple[str, str]:
        base_url = (self._settings.get(keys.HUGO_BASE_URL) or self._default_base_url).rstrip("/")
        api_key = self._settings.get(keys.HUGO_API_KEY) or ""
        if not base_url:
            raise HugoNotConfiguredError("Hugo base URL is not configured. Use save_settings to set it.")
        if not api_key:
            raise HugoNotConfiguredError("Hugo API key is not configured. Use save_settings to set it.")
        return base_url, api_key

    async def _request(self, method: str, path: str, operation: str, **kwargs: Any) -> Any:
        base_url, api_key = self._config()
        logger.debug(f"Hugo API request: {method} {path}")
        async with httpx.AsyncClient(
            base_url=base_url,
            headers={"X-API-Key": api_key, "Accept": "application/json"},
            timeout=self._timeout,
            transport=self._transport,
        ) as client:
            response = await client.request(method, path, **kwargs)

        if response.status_code >= 400:
            raise HugoApiError(response.status_code, operation)
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return None
