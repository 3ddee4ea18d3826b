import asyncio
import unittest
from typing import Any

from blog_agent_bot.messages import LLMResponse, Message, ToolCall, ToolResult
from blog_agent_bot.tool_registry import ToolRegistry
from blog_agent_bot.turn_engine import NO_ANSWER_TEXT, TurnEngine, context_window


class _RecordingTool:
    def __init__(self, name: str = "list_articles", text: str = "2 articles found") -> None:
        self._name = name
        self._text = text
        self.calls: list[dict[str, Any]] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def description(self) -> str:
        return self._name

    @property
    def input_schema(self) -> dict[str, Any]:
        return {"type": "object", "properties": {}}

    async def execute(self, tool_input: dict[str, Any]) -> ToolResult:
        self.calls.append(tool_input)
        return ToolResult(self._text)


class _ScriptedProvider:
    """Returns queued responses in order; repeats the last one when exhausted."""

    def __init__(self, *responses: LLMResponse | Exception) -> None:
        self._responses = list(responses)
        self.calls: list[list[Message]] = []

    async def invoke(self, messages: list[Message], tools: list[dict]) -> LLMResponse:
        self.calls.append(list(messages))
        response = self._responses.pop(0) if len(self._responses) > 1 else self._responses[0]
        if isinstance(response, Exception):
            raise response
        return response


class _SlowProvider:
    async def invoke(self, messages: list[Message], tools: list[dict]) -> LLMResponse:
        await asyncio.sleep(1)
        return LLMResponse(text="too late")


def _tool_call(name: str = "list_articles", call_id: str = "c1", **arguments: Any) -> LLMResponse:
    return LLMResponse(tool_calls=(ToolCall(id=call_id, name=name, arguments=arguments),))


class TurnEngineTests(unittest.TestCase):
    def _engine(self, provider, *tools, max_iterations: int = 5, llm_timeout: float = 5.0) -> TurnEngine:
        return TurnEngine(
            provider=provider,
            registry=ToolRegistry(list(tools)),
            system_prompt="You manage a blog.",
            max_iterations=max_iterations,
            llm_timeout=llm_timeout,
        )

    def _run(self, engine: TurnEngine, history: list[Message]):
        appended: list[Message] = []
        outcome = asyncio.run(engine.run(history, on_append_message=appended.append))
        return outcome, appended

    def test_final_text_without_tools(self) -> None:
        provider = _ScriptedProvider(LLMResponse(text="Hello!"))
        outcome, appended = self._run(self._engine(provider), [Message.user("hi")])
        self.assertEqual("Hello!", outcome.text)
        self.assertEqual(1, outcome.iterations)
        self.assertEqual([], appended)

    def test_system_prompt_is_sent_first(self) -> None:
        provider = _ScriptedProvider(LLMResponse(text="ok"))
        self._run(self._engine(provider), [Message.user("hi")])
        sent = provider.calls[0]
        self.assertEqual("system", sent[0].role)
        self.assertEqual("You manage a blog.", sent[0].content)
        self.assertEqual("hi", sent[1].content)

    def test_tool_call_then_answer(self) -> None:
        tool = _RecordingTool()
        provider = _ScriptedProvider(_tool_call(), LLMResponse(text="Here are your 2 articles."))
        outcome, appended = self._run(self._engine(provider, tool), [Message.user("list my articles")])

        self.assertEqual("Here are your 2 articles.", outcome.text)
        self.assertEqual(2, outcome.iterations)
        self.assertEqual(["assistant", "tool"], [m.role for m in appended])
        self.assertEqual("list_articles", appended[0].tool_calls[0].name)
        self.assertEqual("c1", appended[1].tool_call_id)
        self.assertEqual("2 articles found", appended[1].content)
        self.assertEqual(1, len(tool.calls))

    def test_arguments_are_sanitized_before_execution(self) -> None:
        tool = _RecordingTool()
        provider = _ScriptedProvider(
            _tool_call(limit=5000, search="x" * 60_000, nested={"a": 1}),
            LLMResponse(text="done"),
        )
        self._run(self._engine(provider, tool), [Message.user("go")])
        args = tool.calls[0]
        self.assertEqual(1000, args["limit"])
        self.assertEqual(50_000, len(args["search"]))
        self.assertNotIn("nested", args)

    def test_always_tool_calling_model_is_bounded(self) -> None:
        tool = _RecordingTool()
        provider = _ScriptedProvider(_tool_call())
        outcome, _ = self._run(self._engine(provider, tool, max_iterations=5), [Message.user("loop")])

        self.assertEqual(5, len(provider.calls))
        self.assertEqual(5, outcome.iterations)
        self.assertTrue(outcome.text)
        self.assertEqual("\n\n".join(["2 articles found"] * 5), outcome.text)

    def test_iteration_limit_prefers_last_model_text(self) -> None:
        provider = _ScriptedProvider(
            LLMResponse(text="Checking...", tool_calls=(ToolCall("c1", "list_articles", {}),)),
        )
        outcome, _ = self._run(self._engine(provider, _RecordingTool(), max_iterations=2), [Message.user("x")])
        self.assertEqual("Checking...", outcome.text)

    def test_empty_answer_falls_back_to_fixed_message(self) -> None:
        provider = _ScriptedProvider(LLMResponse())
        outcome, _ = self._run(self._engine(provider), [Message.user("x")])
        self.assertEqual(NO_ANSWER_TEXT, outcome.text)

    def test_model_failure_is_sanitized(self) -> None:
        provider = _ScriptedProvider(RuntimeError("auth failed: Bearer sk-live-123"))
        outcome, _ = self._run(self._engine(provider), [Message.user("x")])
        self.assertTrue(outcome.model_failed)
        self.assertTrue(outcome.text.startswith("AI error: "))
        self.assertNotIn("sk-live-123", outcome.text)

    def test_model_timeout_is_a_failure(self) -> None:
        outcome, _ = self._run(self._engine(_SlowProvider(), llm_timeout=0.01), [Message.user("x")])
        self.assertTrue(outcome.model_failed)
        self.assertIn("timed out", outcome.text)

    def test_unknown_tool_result_is_fed_back(self) -> None:
        provider = _ScriptedProvider(_tool_call(name="publish_everywhere"), LLMResponse(text="Sorry."))
        outcome, appended = self._run(self._engine(provider), [Message.user("x")])
        self.assertEqual("Unknown tool: publish_everywhere", appended[1].content)
        self.assertEqual("Sorry.", outcome.text)

    def test_rejects_non_positive_iterations(self) -> None:
        with self.assertRaises(ValueError):
            self._engine(_ScriptedProvider(LLMResponse(text="x")), max_iterations=0)


class ContextWindowTests(unittest.TestCase):
    def test_drops_leading_orphaned_tool_results(self) -> None:
        history = [
            Message.tool("stale", "c0"),
            Message.tool("stale", "c1"),
            Message.user("hi"),
            Message.assistant("", (ToolCall("c2", "get_stats", {}),)),
            Message.tool("fresh", "c2"),
        ]
        window = context_window(history)
        self.assertEqual(["user", "assistant", "tool"], [m.role for m in window])

    def test_drops_leading_assistant_messages(self) -> None:
        history = [
            Message.assistant("", (ToolCall("c0", "list_articles", {}),)),
            Message.tool("stale", "c0"),
            Message.assistant("old answer"),
            Message.user("hi"),
            Message.assistant("hello"),
        ]
        window = context_window(history)
        self.assertEqual(["user", "assistant"], [m.role for m in window])
        self.assertEqual("hi", window[0].content)

    def test_keeps_clean_history(self) -> None:
        history = [Message.user("a"), Message.assistant("b")]
        self.assertEqual(history, context_window(history))


if __name__ == "__main__":
    unittest.main()
