from typing import Any

from loguru import logger

from blog_agent_bot.messages import ToolResult
from blog_agent_bot.tools.settings import settings_store as keys
from blog_agent_bot.tools.settings.settings_store import SettingsStore

# (argument name, settings key, label)
_STRING_FIELDS = [
    ("hugo_base_url", keys.HUGO_BASE_URL, "Hugo URL"),
    ("hugo_api_key", keys.HUGO_API_KEY, "Hugo API key"),
    ("llm_endpoint", keys.LLM_ENDPOINT, "LLM endpoint"),
    ("llm_model", keys.LLM_MODEL, "LLM model"),
    ("llm_api_key", keys.LLM_API_KEY, "LLM API key"),
]


class SaveSettingsTool:
    def __init__(self, settings: SettingsStore):
        self._settings = settings

    @property
    def name(self) -> str:
        return "save_settings"

    @property
    def description(self) -> str:
        return "Save connection settings for the Hugo API and the LLM. Only the provided fields are changed."

    @property
    def input_schema(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "hugo_base_url": {"type": "string", "description": "Hugo API base URL"},
                "hugo_api_key": {"type": "string", "description": "Hugo API key"},
                "llm_endpoint": {"type": "string", "description": "OpenAI-compatible LLM endpoint URL"},
                "llm_model": {"type": "string", "description": "Model name for the LLM endpoint"},
                "llm_api_key": {"type": "string", "description": "API key for the LLM endpoint"},
                "llm_use_local": {"type": "boolean", "description": "Use the configured LLM endpoint first"},
            },
            "required": [],
        }

    async def execute(self, tool_input: dict[str, Any]) -> ToolResult:
        saved: list[str] = []
        for arg, key, label in _STRING_FIELDS:
            value = tool_input.get(arg)
            if isinstance(value, str) and value.strip():
                self._settings.set(key, value.strip())
                saved.append(label)

        use_local = tool_input.get("llm_use_local")
        if isinstance(use_local, bool):
            self._settings.set(keys.LLM_USE_LOCAL, "true" if use_local else "false")
            saved.append("Use local LLM")

        if not saved:
            return ToolResult("Nothing to save.")
        logger.info(f"Settings updated: {', '.join(saved)}")
        return ToolResult(f"Updated: {', '.join(saved)}")
