from __future__ import annotations

import threading
from collections import deque

from loguru import logger

from blog_agent_bot.clock import Clock, SystemClock


class RateLimiter:
    """Sliding-window limiter: at most N accepted calls in any trailing window."""

    def __init__(
        self,
        *,
        max_messages_per_window: int = 10,
        window_seconds: float = 60.0,
        clock: Clock | None = None,
    ):
        if max_messages_per_window <= 0:
            raise ValueError("max_messages_per_window must be positive")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")
        self._max_messages = max_messages_per_window
        self._window = window_seconds
        self._clock = clock or SystemClock()
        self._windows: dict[str, deque[float]] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._windows)

    def allow(self, user_key: str, now: float | None = None) -> bool:
        now = self._clock.now() if now is None else now
        with self._lock:
            timestamps = self._windows.setdefault(user_key, deque())
            self._prune(timestamps, now)
            if len(timestamps) >= self._max_messages:
                logger.warning(
                    f"Rate limit hit for {user_key}: {len(timestamps)} messages in {self._window:g}s"
                )
                return False
            timestamps.append(now)
            return True

    def remaining(self, user_key: str, now: float | None = None) -> int:
        now = self._clock.now() if now is None else now
        with self._lock:
            timestamps = self._windows.get(user_key)
            if timestamps is None:
                return self._max_messages
            self._prune(timestamps, now)
            return max(0, self._max_messages - len(timestamps))

    def reset(self, user_key: str) -> None:
        with self._lock:
            self._windows.pop(user_key, None)

    def sweep(self, now: float | None = None) -> int:
        now = self._clock.now() if now is None else now
        with self._lock:
            empty = []
            for key, timestamps in self._windows.items():
                self._prune(timestamps, now)
                if not timestamps:
                    empty.append(key)
            for key in empty:
                del self._windows[key]
        if empty:
            logger.debug(f"Rate limiter sweep dropped {len(empty)} idle window(s)")
        return len(empty)

    def _prune(self, timestamps: deque[float], now: float) -> None:
        while timestamps and now - timestamps[0] >= self._window:
            timestamps.popleft()
