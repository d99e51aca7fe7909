from __future__ import annotations

import logging
import time
from collections import deque
from dataclasses import dataclass, field
from threading import Lock

logger = logging.getLogger(__name__)

CLEANUP_MAX_AGE_MS = 60 * 60 * 1000


@dataclass(frozen=True, slots=True)
class RateLimit:
    interval_ms: int
    max_requests: int


# Per-endpoint quotas. Each scope gets its own counters (see guard.enforce_rate_limit).
RATE_LIMITS: dict[str, RateLimit] = {
    "dislike": RateLimit(interval_ms=60_000, max_requests=100),
    "emoji_reaction": RateLimit(interval_ms=60_000, max_requests=100),
    "dead_game_react": RateLimit(interval_ms=60_000, max_requests=100),
}


@dataclass(frozen=True, slots=True)
class RateLimitResult:
    success: bool
    remaining: int
    reset_at: float  # epoch ms


def now_ms() -> float:
    return time.time() * 1000.0


@dataclass(slots=True)
class SlidingWindowRateLimiter:
    """In-memory sliding window log.

    Keeps the timestamps of accepted requests per identifier. A request is
    admitted while fewer than `max_requests` of them fall inside the trailing
    `interval_ms` window. Counters live in this process only; N replicas admit
    up to N times the quota.
    """

    _events: dict[str, deque[float]] = field(default_factory=dict)
    _lock: Lock = field(default_factory=Lock)

    def check(
        self,
        identifier: str,
        interval_ms: float,
        max_requests: int,
        now: float | None = None,
    ) -> RateLimitResult:
        if now is None:
            now = now_ms()

        window_start = now - interval_ms
        with self._lock:
            q = self._events.get(identifier)
            if q is None:
                q = deque()
                self._events[identifier] = q

            while q and q[0] <= window_start:
                q.popleft()

            if len(q) >= max_requests:
                reset_at = q[0] + interval_ms if q else now + interval_ms
                return RateLimitResult(success=False, remaining=0, reset_at=reset_at)

            q.append(now)
            return RateLimitResult(
                success=True,
                remaining=max_requests - len(q),
                reset_at=now + interval_ms,
            )

    def cleanup(self, now: float | None = None, max_age_ms: float = CLEANUP_MAX_AGE_MS) -> int:
        """Drop stale timestamps and forget identifiers with none left.

        Returns how many identifiers were removed.
        """
        if now is None:
            now = now_ms()
        cutoff = now - max_age_ms
        removed = 0
        with self._lock:
            for k in list(self._events.keys()):
                q = self._events[k]
                while q and q[0] <= cutoff:
                    q.popleft()
                if not q:
                    del self._events[k]
                    removed += 1
        logger.debug("rate limit cleanup: removed=%s tracked=%s", removed, len(self._events))
        return removed

    def tracked(self) -> int:
        with self._lock:
            return len(self._events)

    def count(self, identifier: str) -> int:
        with self._lock:
            q = self._events.get(identifier)
            return len(q) if q else 0
