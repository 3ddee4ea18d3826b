from __future__ import annotations

import asyncio

from loguru import logger

from blog_agent_bot.rate_limiter import RateLimiter
from blog_agent_bot.session_store import SessionStore

DEFAULT_CLEANUP_INTERVAL_SECONDS = 300.0


class CleanupScheduler:
    """Background task that expires idle sessions and empty rate windows."""

    def __init__(
        self,
        session_store: SessionStore,
        rate_limiter: RateLimiter,
        *,
        interval_seconds: float = DEFAULT_CLEANUP_INTERVAL_SECONDS,
    ):
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self._session_store = session_store
        self._rate_limiter = rate_limiter
        self._interval_seconds = interval_seconds
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        if self._task is None:
            self._task = asyncio.create_task(self._run())
            logger.debug(f"Cleanup scheduler started (every {self._interval_seconds:.0f}s)")

    async def stop(self) -> None:
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
            logger.debug("Cleanup scheduler stopped")

    def run_once(self) -> tuple[int, int]:
        """Sweep both stores now. Returns (sessions removed, windows removed)."""
        sessions = self._session_store.sweep()
        windows = self._rate_limiter.sweep()
        if sessions or windows:
            logger.info(f"Cleanup: removed {sessions} idle session(s), {windows} empty rate window(s)")
        return sessions, windows

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self._interval_seconds)
            try:
                self.run_once()
            except Exception as ex:
                logger.error(f"Cleanup sweep failed: {type(ex).__name__}: {ex}")
