from typing import Any

from blog_agent_bot.messages import ToolResult
from blog_agent_bot.tools.settings import settings_store as keys
from blog_agent_bot.tools.settings.settings_store import SettingsStore


def _flag(value: str | None) -> str:
    return "configured" if value else "not configured"


class GetSettingsTool:
    def __init__(self, settings: SettingsStore):
        self._settings = settings

    @property
    def name(self) -> str:
        return "get_settings"

    @property
    def description(self) -> str:
        return "Show the current system settings (Hugo API, LLM, image providers). Secrets are never revealed."

    @property
    def input_schema(self) -> dict[str, Any]:
        return {"type": "object", "properties": {}, "required": []}

    async def execute(self, tool_input: dict[str, Any]) -> ToolResult:
        s = self._settings
        use_local = s.get(keys.LLM_USE_LOCAL) == "true"
        lines = [
            "Settings:",
            "",
            "Hugo API:",
            f"- URL: {s.get(keys.HUGO_BASE_URL) or 'not configured'}",
            f"- Key: {_flag(s.get(keys.HUGO_API_KEY))}",
            "",
            "LLM:",
            f"- Endpoint: {s.get(keys.LLM_ENDPOINT) or 'not configured'}",
            f"- Model: {s.get(keys.LLM_MODEL) or 'not configured'}",
            f"- Key: {_flag(s.get(keys.LLM_API_KEY))}",
            f"- Use local: {'on' if use_local else 'off'}",
            "",
            "Images:",
            f"- Unsplash: {_flag(s.get(keys.UNSPLASH_API_KEY))}",
            f"- Pixabay: {_flag(s.get(keys.PIXABAY_API_KEY))}",
        ]
        return ToolResult("\n".join(lines))
