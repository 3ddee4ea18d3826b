from dataclasses import dataclass


@dataclass
class AgentConfig:
    max_context_messages: int = 20
    max_iterations: int = 5
    session_ttl_seconds: float = 3600.0
    max_sessions: int = 500
    rate_window_seconds: float = 60.0
    max_messages_per_window: int = 10
    tool_timeout_seconds: float = 30.0
    llm_timeout_seconds: float = 120.0
    cleanup_interval_seconds: float = 300.0
    system_prompt: str = ""

    def __post_init__(self) -> None:
        for name in (
            "max_context_messages",
            "max_iterations",
            "session_ttl_seconds",
            "max_sessions",
            "rate_window_seconds",
            "max_messages_per_window",
            "tool_timeout_seconds",
            "llm_timeout_seconds",
            "cleanup_interval_seconds",
        ):
            value = getattr(self, name)
            if value <= 0:
                raise ValueError(f"{name} must be positive, got {value!r}")
