from __future__ import annotations

from typing import Protocol, runtime_checkable

HUGO_BASE_URL = "hugo_base_url"
HUGO_API_KEY = "hugo_api_key"
LLM_ENDPOINT = "llm_endpoint"
LLM_MODEL = "llm_model"
LLM_API_KEY = "llm_api_key"
LLM_USE_LOCAL = "llm_use_local"
UNSPLASH_API_KEY = "unsplash_api_key"
PIXABAY_API_KEY = "pixabay_api_key"


@runtime_checkable
class SettingsStore(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...


class InMemorySettingsStore:
    def __init__(self, initial: dict[str, str | None] | None = None):
        self._values: dict[str, str] = {
            k: v for k, v in (initial or {}).items() if v is not None and v != ""
        }

    def get(self, key: str) -> str | None:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value
