"""Client-side coalescing of rapid increments into one POST per quiet period.

Every `mutate` call updates the caller's optimistic state immediately; only
the network request is delayed and merged. Keys are independent: each has its
own accumulator and its own timer on the running asyncio loop.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable

import aiohttp

logger = logging.getLogger(__name__)

DEFAULT_QUIET_PERIOD_MS = 500
DEFAULT_TIMEOUT_S = 10


class FlushError(Exception):
    def __init__(self, message: str, status: int | None = None, key: str | None = None):
        super().__init__(message)
        self.status = status
        self.key = key


class ThrottledMutation:
    """Accumulate increments per key and flush them after `quiet_period_ms` of inactivity.

    Must be used from inside a running event loop. A failed flush is not
    retried and its increment is dropped; `on_error(error, increment)` gets the
    dropped amount so the caller can revert its optimistic update.
    """

    def __init__(
        self,
        endpoint: str,
        build_payload: Callable[[str, int], Any],
        *,
        on_optimistic_update: Callable[[int], None] | None = None,
        on_error: Callable[[FlushError, int], None] | None = None,
        on_success: Callable[[], None] | None = None,
        quiet_period_ms: float = DEFAULT_QUIET_PERIOD_MS,
        session: aiohttp.ClientSession | None = None,
        timeout_s: float = DEFAULT_TIMEOUT_S,
    ):
        self.endpoint = endpoint
        self.timeout_s = timeout_s
        self.quiet_period_ms = quiet_period_ms
        self._build_payload = build_payload
        self._on_optimistic_update = on_optimistic_update
        self._on_error = on_error
        self._on_success = on_success
        self._session = session
        self._owns_session = session is None
        self._pending: dict[str, int] = {}
        self._timers: dict[str, asyncio.TimerHandle] = {}
        self._inflight: set[asyncio.Task] = set()

    def mutate(self, key: str, increment: int = 1) -> None:
        loop = asyncio.get_running_loop()

        if self._on_optimistic_update:
            self._on_optimistic_update(increment)

        self._pending[key] = self._pending.get(key, 0) + increment

        existing = self._timers.get(key)
        if existing is not None:
            existing.cancel()

        self._timers[key] = loop.call_later(self.quiet_period_ms / 1000.0, self._fire, key)

    def _fire(self, key: str) -> None:
        # A cancelled handle never runs, so the entry for `key` is this timer.
        self._timers.pop(key, None)
        total = self._pending.get(key, 0)
        if total <= 0:
            return
        # Zero before the request goes out; a mutate() during the await starts a new cycle.
        self._pending[key] = 0
        task = asyncio.get_running_loop().create_task(self._flush(key, total))
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)

    async def _flush(self, key: str, total: int) -> None:
        try:
            payload = self._build_payload(key, total)
            session = self._get_session()
            async with session.post(self.endpoint, json=payload) as resp:
                status = resp.status
                result = await resp.json(content_type=None)
        except Exception as e:
            logger.warning("flush failed: endpoint=%s key=%s increment=%s error=%s", self.endpoint, key, total, e)
            self._notify_error(FlushError(str(e) or e.__class__.__name__, key=key), total)
            return

        if not isinstance(result, dict) or not result.get("success"):
            message = "Failed to execute mutation"
            if isinstance(result, dict) and result.get("error"):
                message = str(result["error"])
            logger.warning(
                "flush rejected: endpoint=%s key=%s increment=%s status=%s error=%s",
                self.endpoint,
                key,
                total,
                status,
                message,
            )
            self._notify_error(FlushError(message, status=status, key=key), total)
            return

        logger.debug("flushed: endpoint=%s key=%s increment=%s", self.endpoint, key, total)
        if self._on_success:
            self._on_success()

    def _notify_error(self, error: FlushError, total: int) -> None:
        if self._on_error:
            self._on_error(error, total)

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            self._session = aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=self.timeout_s))
        return self._session

    def clear_pending(self) -> None:
        """Cancel every scheduled flush and forget accumulated increments. Nothing is sent."""
        for timer in self._timers.values():
            timer.cancel()
        self._timers.clear()
        self._pending.clear()

    def pending(self, key: str) -> int:
        return self._pending.get(key, 0)

    def has_timer(self, key: str) -> bool:
        return key in self._timers

    async def wait_idle(self) -> None:
        """Wait for flushes that are already on the wire."""
        if self._inflight:
            await asyncio.gather(*list(self._inflight), return_exceptions=True)

    async def aclose(self) -> None:
        self.clear_pending()
        await self.wait_idle()
        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None

    async def __aenter__(self) -> ThrottledMutation:
        return self

    async def __aexit__(self, *exc) -> None:
        await self.aclose()
