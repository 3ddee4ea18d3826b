from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass, field

from loguru import logger

from blog_agent_bot.messages import Message, ToolCall, ToolResult
from blog_agent_bot.provider import LLMProvider
from blog_agent_bot.sanitizer import sanitize_error_for_user, sanitize_tool_args
from blog_agent_bot.tool_registry import ToolRegistry

NO_ANSWER_TEXT = "I could not get an answer this time. Please try again."


@dataclass
class TurnOutcome:
    text: str
    tool_results: list[tuple[str, ToolResult]] = field(default_factory=list)
    iterations: int = 0
    model_failed: bool = False


def context_window(history: list[Message]) -> list[Message]:
    """History as the model should see it.

    FIFO trimming can cut the head of an exchange away, leaving tool results
    or assistant messages with no user turn before them. The window starts
    at the first ``user`` message.
    """
    start = next((i for i, m in enumerate(history) if m.role == "user"), len(history))
    if start:
        logger.debug(f"Dropped {start} orphaned message(s) from the context window")
    return history[start:]


class TurnEngine:
    def __init__(
        self,
        *,
        provider: LLMProvider,
        registry: ToolRegistry,
        system_prompt: str,
        max_iterations: int,
        llm_timeout: float,
    ) -> None:
        if max_iterations <= 0:
            raise ValueError("max_iterations must be positive")
        self._provider = provider
        self._registry = registry
        self._system_prompt = system_prompt
        self._max_iterations = max_iterations
        self._llm_timeout = llm_timeout

    async def run(
        self,
        history: list[Message],
        *,
        on_append_message: Callable[[Message], None],
    ) -> TurnOutcome:
        """Drive the model until it answers, fails, or hits the iteration cap.

        ``history`` already ends with the inbound user message. Assistant
        tool-call messages and tool results are reported through
        ``on_append_message`` as they happen; the final answer is returned,
        not appended.
        """
        working: list[Message] = [Message.system(self._system_prompt), *context_window(history)]
        schemas = self._registry.schemas()
        outcome = TurnOutcome(text="")
        last_model_text: str | None = None

        while outcome.iterations < self._max_iterations:
            outcome.iterations += 1
            try:
                response = await asyncio.wait_for(
                    self._provider.invoke(working, schemas), timeout=self._llm_timeout,
                )
            except asyncio.TimeoutError:
                logger.error(f"Model call timed out after {self._llm_timeout:.0f}s")
                outcome.model_failed = True
                outcome.text = f"AI error: {sanitize_error_for_user(f'timed out after {self._llm_timeout:.0f}s')}"
                return outcome
            except Exception as ex:
                logger.error(f"Model call failed: {type(ex).__name__}: {ex}")
                outcome.model_failed = True
                outcome.text = f"AI error: {sanitize_error_for_user(ex)}"
                return outcome

            if response.text:
                last_model_text = response.text

            if not response.has_tool_calls:
                if response.text:
                    outcome.text = response.text
                    return outcome
                break

            assistant = Message.assistant(response.text or "", response.tool_calls)
            working.append(assistant)
            on_append_message(assistant)

            for call in response.tool_calls:
                result = await self._execute(call)
                outcome.tool_results.append((call.name, result))
                tool_message = Message.tool(result.text, call.id)
                working.append(tool_message)
                on_append_message(tool_message)
        else:
            logger.warning(
                f"Reached the iteration limit ({self._max_iterations}) without a final answer"
            )

        outcome.text = self._fallback_text(last_model_text, outcome.tool_results)
        return outcome

    async def _execute(self, call: ToolCall) -> ToolResult:
        safe_args = sanitize_tool_args(call.arguments)
        logger.info(f"Tool call: {call.name}")
        return await self._registry.execute(call.name, safe_args)

    @staticmethod
    def _fallback_text(
        last_model_text: str | None,
        tool_results: list[tuple[str, ToolResult]],
    ) -> str:
        if last_model_text:
            return last_model_text
        texts = [result.text for _, result in tool_results if result.text]
        if texts:
            return "\n\n".join(texts)
        return NO_ANSWER_TEXT
