from typing import Any

from loguru import logger

from blog_agent_bot.messages import ToolResult
from blog_agent_bot.sanitizer import sanitize_error_for_user
from blog_agent_bot.tools.images.image_generator import ImageGenerator


class GenerateImageTool:
    def __init__(self, generator: ImageGenerator):
        self._generator = generator

    @property
    def name(self) -> str:
        return "generate_image"

    @property
    def description(self) -> str:
        return "Generate an AI image from a description. Write the prompt in English."

    @property
    def input_schema(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "prompt": {"type": "string", "description": "Image description in English"},
                "style": {"type": "string", "description": "Style: realistic, illustration, digital-art"},
            },
            "required": ["prompt"],
        }

    async def execute(self, tool_input: dict[str, Any]) -> ToolResult:
        prompt = (tool_input.get("prompt") or "").strip()
        if not prompt:
            return ToolResult("Error: prompt must not be empty")
        style = (tool_input.get("style") or "").strip()
        full_prompt = f"{prompt}, {style} style" if style else prompt

        try:
            url = await self._generator.generate(full_prompt)
        except Exception as ex:
            logger.error(f"generate_image failed: {ex}")
            return ToolResult(f"Error generating image: {sanitize_error_for_user(ex)}")

        return ToolResult(
            "Image generated.",
            metadata={"type": "generated_image", "url": url, "prompt": prompt},
        )
