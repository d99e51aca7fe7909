import logging
import math
from datetime import datetime, timezone

from fastapi import Request, Response

from gamediss.client_ip import client_ip
from gamediss.rate_limit import RateLimit, RateLimitResult, SlidingWindowRateLimiter, now_ms

logger = logging.getLogger(__name__)


class RateLimitExceeded(Exception):
    def __init__(self, limit: RateLimit, result: RateLimitResult, now: float):
        super().__init__("Too many requests. Please try again later.")
        self.limit = limit
        self.result = result
        self.now = now

    def headers(self) -> dict[str, str]:
        out = rate_limit_headers(self.limit, self.result)
        out["Retry-After"] = str(retry_after_seconds(self.result.reset_at, self.now))
        return out


def iso_from_ms(ms: float) -> str:
    dt = datetime.fromtimestamp(ms / 1000.0, tz=timezone.utc)
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def retry_after_seconds(reset_at: float, now: float) -> int:
    return max(0, math.ceil((reset_at - now) / 1000.0))


def rate_limit_headers(limit: RateLimit, result: RateLimitResult) -> dict[str, str]:
    return {
        "X-RateLimit-Limit": str(limit.max_requests),
        "X-RateLimit-Remaining": str(result.remaining),
        "X-RateLimit-Reset": iso_from_ms(result.reset_at),
    }


def enforce_rate_limit(
    request: Request,
    response: Response,
    scope: str,
) -> RateLimitResult:
    """Count this request against `scope` and raise RateLimitExceeded when over quota.

    The limiter and quota table come from app.state so every app instance
    owns its counters. Accepted responses get the X-RateLimit-* headers.
    """
    limiter: SlidingWindowRateLimiter = request.app.state.rate_limiter
    limit: RateLimit = request.app.state.rate_limits[scope]
    identifier = f"{scope}:{client_ip(request)}"
    now = now_ms()
    result = limiter.check(identifier, limit.interval_ms, limit.max_requests, now=now)
    if not result.success:
        logger.info("rate limited: scope=%s id=%s reset_at=%s", scope, identifier, result.reset_at)
        raise RateLimitExceeded(limit, result, now)
    response.headers.update(rate_limit_headers(limit, result))
    return result


def rate_limited(scope: str):
    """Route dependency enforcing the quota of `scope` before the body is parsed."""

    def dependency(request: Request, response: Response) -> RateLimitResult:
        return enforce_rate_limit(request, response, scope)

    return dependency


def body_too_large(request: Request, max_bytes: int) -> bool:
    raw = request.headers.get("content-length")
    if not raw:
        return False
    try:
        return int(raw) > max_bytes
    except ValueError:
        return False
