import asyncio
import json
import os
import tempfile
import unittest
from pathlib import Path
from unittest.mock import AsyncMock, patch

from blog_agent_bot.access_policy import AccessPolicy
from blog_agent_bot.agent_config import AgentConfig
from blog_agent_bot.app_config import load_json_config, parse_app_config, resolve_runtime_env
from blog_agent_bot.bootstrap import AppRuntime, build_settings
from blog_agent_bot.cleanup_scheduler import CleanupScheduler
from blog_agent_bot.rate_limiter import RateLimiter
from blog_agent_bot.session_store import SessionStore
from blog_agent_bot.tools.settings.settings_store import InMemorySettingsStore
from blog_agent_bot.tools.settings import settings_store as keys


class ParseAppConfigTests(unittest.TestCase):
    def test_defaults(self) -> None:
        app = parse_app_config({})
        self.assertEqual("openai", app.provider_name)
        self.assertEqual("gpt-4o-mini", app.model)
        self.assertEqual(20, app.max_context_messages)
        self.assertEqual(5, app.max_iterations)
        self.assertEqual(3600, app.session_ttl_seconds)
        self.assertEqual(500, app.max_sessions)
        self.assertEqual(60, app.rate_window_seconds)
        self.assertEqual(10, app.max_messages_per_window)
        self.assertEqual(30, app.tool_timeout_seconds)
        self.assertEqual(300, app.cleanup_interval_seconds)
        self.assertEqual(4000, app.max_reply_length)
        self.assertFalse(app.llm_use_local)
        self.assertIsNone(app.log_consumers)

    def test_anthropic_default_model(self) -> None:
        app = parse_app_config({"Provider": " Anthropic "})
        self.assertEqual("anthropic", app.provider_name)
        self.assertTrue(app.model.startswith("claude"))

    def test_overrides(self) -> None:
        app = parse_app_config({
            "Model": "gpt-4o",
            "MaxContextMessages": "8",
            "LlmUseLocal": "yes",
            "LlmEndpoint": " http://localhost:11434 ",
            "LogConsumers": [{"type": "console"}],
        })
        self.assertEqual("gpt-4o", app.model)
        self.assertEqual(8, app.max_context_messages)
        self.assertTrue(app.llm_use_local)
        self.assertEqual("http://localhost:11434", app.llm_endpoint)
        self.assertEqual([{"type": "console"}], app.log_consumers)

    def test_load_json_config_missing_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            self.assertEqual({}, load_json_config(Path(tmp) / "config.json"))

    def test_load_json_config(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "config.json"
            path.write_text(json.dumps({"Provider": "anthropic"}), encoding="utf-8")
            self.assertEqual({"Provider": "anthropic"}, load_json_config(path))


class ResolveRuntimeEnvTests(unittest.TestCase):
    def test_reads_provider_key_and_allow_list(self) -> None:
        env_vars = {
            "OPENAI_API_KEY": "sk-test",
            "HUGO_BASE_URL": "https://blog.example.com",
            "ALLOWED_USERS": "42, 7,,",
        }
        with patch.dict(os.environ, env_vars, clear=True):
            env = resolve_runtime_env("openai")
        self.assertEqual("sk-test", env.provider_api_key)
        self.assertEqual("OPENAI_API_KEY", env.provider_env_var)
        self.assertEqual("https://blog.example.com", env.hugo_base_url)
        self.assertIsNone(env.hugo_api_key)
        self.assertEqual(["42", "7"], env.allowed_users)

    def test_anthropic_key(self) -> None:
        with patch.dict(os.environ, {"ANTHROPIC_API_KEY": "a-key"}, clear=True):
            env = resolve_runtime_env("anthropic")
        self.assertEqual("a-key", env.provider_api_key)
        self.assertEqual("ANTHROPIC_API_KEY", env.provider_env_var)
        self.assertIsNone(env.openai_api_key)

    def test_build_settings_seeds_known_keys(self) -> None:
        app = parse_app_config({"LlmUseLocal": True, "LlmEndpoint": "http://gpu:8000"})
        with patch.dict(os.environ, {"HUGO_API_KEY": "hk"}, clear=True):
            env = resolve_runtime_env("openai")
        settings = build_settings(app, env)
        self.assertEqual("hk", settings.get(keys.HUGO_API_KEY))
        self.assertEqual("true", settings.get(keys.LLM_USE_LOCAL))
        self.assertEqual("http://gpu:8000", settings.get(keys.LLM_ENDPOINT))
        self.assertIsNone(settings.get(keys.UNSPLASH_API_KEY))


class AgentConfigTests(unittest.TestCase):
    def test_rejects_non_positive_limits(self) -> None:
        with self.assertRaises(ValueError):
            AgentConfig(max_iterations=0)
        with self.assertRaises(ValueError):
            AgentConfig(rate_window_seconds=-1)


class AccessPolicyTests(unittest.TestCase):
    def test_empty_allow_list_admits_everyone(self) -> None:
        policy = AccessPolicy()
        self.assertTrue(policy.is_allowed("anyone"))

    def test_allow_list(self) -> None:
        policy = AccessPolicy({" 42", "7 ", ""})
        self.assertTrue(policy.is_allowed("42"))
        self.assertTrue(policy.is_allowed("7"))
        self.assertFalse(policy.is_allowed("8"))


class AppRuntimeTests(unittest.TestCase):
    def test_close_stops_scheduler_and_releases_clients(self) -> None:
        provider = AsyncMock()
        image_generator = AsyncMock()
        scheduler = CleanupScheduler(SessionStore(), RateLimiter(), interval_seconds=60)
        runtime = AppRuntime(
            agent=None,
            scheduler=scheduler,
            settings=InMemorySettingsStore(),
            tools=[],
            log_descriptions=[],
            provider=provider,
            image_generator=image_generator,
        )

        async def scenario() -> None:
            await scheduler.start()
            await runtime.close()

        asyncio.run(scenario())
        self.assertFalse(scheduler.running)
        provider.close.assert_awaited_once()
        image_generator.close.assert_awaited_once()


if __name__ == "__main__":
    unittest.main()
