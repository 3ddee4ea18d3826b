import asyncio
import json
import unittest
from types import SimpleNamespace

from blog_agent_bot.messages import Message, ToolCall
from blog_agent_bot.providers.openai_provider import (
    OpenAIProvider,
    _parse_arguments,
    _to_openai_messages,
    _to_openai_tools,
)


class _FakeCompletions:
    def __init__(self, response):
        self._response = response
        self.kwargs: dict | None = None

    async def create(self, **kwargs):
        self.kwargs = kwargs
        return self._response


class _FakeClient:
    def __init__(self, response):
        self.chat = SimpleNamespace(completions=_FakeCompletions(response))
        self.closed = False

    async def close(self) -> None:
        self.closed = True


def _response(content=None, tool_calls=None, finish_reason="stop"):
    return SimpleNamespace(choices=[
        SimpleNamespace(
            finish_reason=finish_reason,
            message=SimpleNamespace(content=content, tool_calls=tool_calls),
        )
    ])


class ToOpenAIMessagesTests(unittest.TestCase):
    def test_plain_roles_pass_through(self) -> None:
        result = _to_openai_messages([Message.system("sys"), Message.user("hi"), Message.assistant("hello")])
        self.assertEqual(
            [
                {"role": "system", "content": "sys"},
                {"role": "user", "content": "hi"},
                {"role": "assistant", "content": "hello"},
            ],
            result,
        )

    def test_assistant_tool_calls(self) -> None:
        call = ToolCall(id="call_1", name="get_article", arguments={"filename": "post.md"})
        result = _to_openai_messages([Message.assistant("", (call,))])
        self.assertIsNone(result[0]["content"])
        tc = result[0]["tool_calls"][0]
        self.assertEqual("call_1", tc["id"])
        self.assertEqual("function", tc["type"])
        self.assertEqual("get_article", tc["function"]["name"])
        self.assertEqual({"filename": "post.md"}, json.loads(tc["function"]["arguments"]))

    def test_tool_result(self) -> None:
        result = _to_openai_messages([Message.tool("found it", "call_1")])
        self.assertEqual([{"role": "tool", "tool_call_id": "call_1", "content": "found it"}], result)


class ToOpenAIToolsTests(unittest.TestCase):
    def test_converts_neutral_tools_to_functions(self) -> None:
        tools = [{"name": "get_stats", "description": "Stats", "input_schema": {"type": "object"}}]
        self.assertEqual(
            [{
                "type": "function",
                "function": {"name": "get_stats", "description": "Stats", "parameters": {"type": "object"}},
            }],
            _to_openai_tools(tools),
        )


class ParseArgumentsTests(unittest.TestCase):
    def test_valid_json_object(self) -> None:
        self.assertEqual({"limit": 3}, _parse_arguments('{"limit": 3}'))

    def test_malformed_or_non_object_json_is_empty(self) -> None:
        self.assertEqual({}, _parse_arguments('{"limit": '))
        self.assertEqual({}, _parse_arguments("[1, 2]"))
        self.assertEqual({}, _parse_arguments(None))


class OpenAIProviderInvokeTests(unittest.TestCase):
    def _provider(self, response) -> tuple[OpenAIProvider, _FakeClient]:
        client = _FakeClient(response)
        return OpenAIProvider("key", model="gpt-4o-mini", max_tokens=100, temperature=0.2, client=client), client

    def test_close_closes_client(self) -> None:
        provider, client = self._provider(_response(content="Hello"))
        asyncio.run(provider.close())
        self.assertTrue(client.closed)

    def test_text_response(self) -> None:
        provider, client = self._provider(_response(content="Hello"))
        result = asyncio.run(provider.invoke([Message.user("hi")], []))
        self.assertEqual("Hello", result.text)
        self.assertFalse(result.has_tool_calls)
        kwargs = client.chat.completions.kwargs
        self.assertEqual("gpt-4o-mini", kwargs["model"])
        self.assertEqual(100, kwargs["max_tokens"])
        self.assertNotIn("tools", kwargs)

    def test_tool_call_response(self) -> None:
        tool_calls = [
            SimpleNamespace(id="call_9", function=SimpleNamespace(name="list_articles", arguments='{"limit": 5}')),
        ]
        provider, client = self._provider(_response(tool_calls=tool_calls, finish_reason="tool_calls"))
        tools = [{"name": "list_articles", "description": "", "input_schema": {"type": "object"}}]

        result = asyncio.run(provider.invoke([Message.user("list")], tools))

        self.assertIsNone(result.text)
        self.assertEqual((ToolCall("call_9", "list_articles", {"limit": 5}),), result.tool_calls)
        self.assertEqual("auto", client.chat.completions.kwargs["tool_choice"])

    def test_empty_choices(self) -> None:
        provider, _ = self._provider(SimpleNamespace(choices=[]))
        result = asyncio.run(provider.invoke([Message.user("hi")], []))
        self.assertIsNone(result.text)
        self.assertEqual((), result.tool_calls)


if __name__ == "__main__":
    unittest.main()
