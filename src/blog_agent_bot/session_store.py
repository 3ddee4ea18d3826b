from __future__ import annotations

import threading
from collections import OrderedDict
from dataclasses import dataclass, field

from loguru import logger

from blog_agent_bot.clock import Clock, SystemClock
from blog_agent_bot.messages import Message


@dataclass
class Session:
    user_key: str
    last_activity_at: float
    messages: list[Message] = field(default_factory=list)


class SessionStore:
    """Per-user conversation buffers held in memory.

    Bounded three ways: each history is trimmed FIFO to
    ``2 * max_context_messages``, the number of sessions is capped at
    ``max_sessions`` (least recently active evicted first) and sessions idle
    longer than ``session_ttl`` are dropped by :meth:`sweep`.
    """

    def __init__(
        self,
        *,
        max_context_messages: int = 20,
        max_sessions: int = 500,
        session_ttl: float = 3600.0,
        clock: Clock | None = None,
    ):
        if max_context_messages <= 0:
            raise ValueError("max_context_messages must be positive")
        if max_sessions <= 0:
            raise ValueError("max_sessions must be positive")
        if session_ttl <= 0:
            raise ValueError("session_ttl must be positive")
        self._max_history = max_context_messages * 2
        self._max_sessions = max_sessions
        self._session_ttl = session_ttl
        self._clock = clock or SystemClock()
        self._sessions: OrderedDict[str, Session] = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def __contains__(self, user_key: object) -> bool:
        with self._lock:
            return user_key in self._sessions

    def get_or_create(self, user_key: str) -> list[Message]:
        with self._lock:
            return self._touch(user_key).messages

    def messages(self, user_key: str) -> list[Message]:
        with self._lock:
            return list(self._touch(user_key).messages)

    def append(self, user_key: str, message: Message) -> None:
        with self._lock:
            history = self._touch(user_key).messages
            history.append(message)
            overflow = len(history) - self._max_history
            if overflow > 0:
                del history[:overflow]
                logger.debug(f"Session {user_key}: trimmed {overflow} oldest message(s)")

    def reset(self, user_key: str) -> None:
        with self._lock:
            self._touch(user_key).messages = []
        logger.info(f"Session {user_key}: conversation reset")

    def sweep(self, now: float | None = None) -> int:
        now = self._clock.now() if now is None else now
        with self._lock:
            expired = [
                key
                for key, session in self._sessions.items()
                if now - session.last_activity_at > self._session_ttl
            ]
            for key in expired:
                del self._sessions[key]
        if expired:
            logger.info(f"Session sweep removed {len(expired)} idle session(s)")
        return len(expired)

    def _touch(self, user_key: str) -> Session:
        # Caller holds self._lock.
        now = self._clock.now()
        session = self._sessions.get(user_key)
        if session is None:
            if len(self._sessions) >= self._max_sessions:
                self._evict_least_recent()
            session = Session(user_key=user_key, last_activity_at=now)
            self._sessions[user_key] = session
        else:
            session.last_activity_at = now
            self._sessions.move_to_end(user_key)
        return session

    def _evict_least_recent(self) -> None:
        # Entries are kept in activity order, oldest first.
        _, oldest = self._sessions.popitem(last=False)
        logger.info(
            f"Session store at capacity ({self._max_sessions}); evicted least recent session {oldest.user_key}"
        )
