from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path

_DEFAULT_MODELS = {
    "openai": "gpt-4o-mini",
    "anthropic": "claude-sonnet-4-5-20250929",
}


@dataclass
class RuntimeEnv:
    provider_api_key: str
    provider_env_var: str
    openai_api_key: str | None
    hugo_base_url: str | None
    hugo_api_key: str | None
    unsplash_api_key: str | None
    pixabay_api_key: str | None
    llm_api_key: str | None
    allowed_users: list[str] = field(default_factory=list)


@dataclass
class AppConfig:
    provider_name: str
    model: str
    max_tokens: int
    temperature: float
    max_context_messages: int
    max_iterations: int
    session_ttl_seconds: float
    max_sessions: int
    rate_window_seconds: float
    max_messages_per_window: int
    tool_timeout_seconds: float
    llm_timeout_seconds: float
    cleanup_interval_seconds: float
    max_reply_length: int
    image_generation_enabled: bool
    image_model: str
    llm_use_local: bool
    llm_endpoint: str | None
    llm_model: str | None
    log_level: str
    log_consumers: list | None


def load_json_config(path: Path | None = None) -> dict:
    config_path = path or Path.cwd() / "config.json"
    if config_path.exists():
        with open(config_path, encoding="utf-8") as f:
            return json.load(f)
    return {}


def _to_bool(value: object, default: bool = False) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"1", "true", "yes", "on"}:
            return True
        if lowered in {"0", "false", "no", "off"}:
            return False
    return bool(value)


def _optional_str(value: object) -> str | None:
    if value is None:
        return None
    return str(value).strip() or None


def parse_app_config(config: dict) -> AppConfig:
    provider_name = str(config.get("Provider", "openai")).strip().lower()
    return AppConfig(
        provider_name=provider_name,
        model=config.get("Model") or _DEFAULT_MODELS.get(provider_name, _DEFAULT_MODELS["openai"]),
        max_tokens=int(config.get("MaxTokens", 8192)),
        temperature=float(config.get("Temperature", 0.7)),
        max_context_messages=int(config.get("MaxContextMessages", 20)),
        max_iterations=int(config.get("MaxIterations", 5)),
        session_ttl_seconds=float(config.get("SessionTtlSeconds", 3600)),
        max_sessions=int(config.get("MaxSessions", 500)),
        rate_window_seconds=float(config.get("RateWindowSeconds", 60)),
        max_messages_per_window=int(config.get("MaxMessagesPerWindow", 10)),
        tool_timeout_seconds=float(config.get("ToolTimeoutSeconds", 30)),
        llm_timeout_seconds=float(config.get("LlmTimeoutSeconds", 120)),
        cleanup_interval_seconds=float(config.get("CleanupIntervalSeconds", 300)),
        max_reply_length=int(config.get("MaxReplyLength", 4000)),
        image_generation_enabled=_to_bool(config.get("ImageGenerationEnabled", True), default=True),
        image_model=config.get("ImageModel", "dall-e-3"),
        llm_use_local=_to_bool(config.get("LlmUseLocal", False), default=False),
        llm_endpoint=_optional_str(config.get("LlmEndpoint")),
        llm_model=_optional_str(config.get("LlmModel")),
        log_level=config.get("LogLevel", "INFO"),
        log_consumers=config.get("LogConsumers"),
    )


def resolve_runtime_env(provider_name: str) -> RuntimeEnv:
    if provider_name == "anthropic":
        provider_env_var = "ANTHROPIC_API_KEY"
    else:
        provider_env_var = "OPENAI_API_KEY"

    allowed = os.environ.get("ALLOWED_USERS", "")
    return RuntimeEnv(
        provider_api_key=os.environ.get(provider_env_var, ""),
        provider_env_var=provider_env_var,
        openai_api_key=os.environ.get("OPENAI_API_KEY") or None,
        hugo_base_url=os.environ.get("HUGO_BASE_URL") or None,
        hugo_api_key=os.environ.get("HUGO_API_KEY") or None,
        unsplash_api_key=os.environ.get("UNSPLASH_API_KEY") or None,
        pixabay_api_key=os.environ.get("PIXABAY_API_KEY") or None,
        llm_api_key=os.environ.get("LLM_API_KEY") or None,
        allowed_users=[part.strip() for part in allowed.split(",") if part.strip()],
    )
