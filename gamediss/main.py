import asyncio
import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from gamediss.config import DATA_DIR, LOG_LEVEL, MAX_BODY_BYTES, RATE_LIMIT_CLEANUP_INTERVAL_S
from gamediss.guard import RateLimitExceeded, body_too_large
from gamediss.rate_limit import RATE_LIMITS, RateLimit, SlidingWindowRateLimiter
from gamediss.routes import dead_games, games, health, stats
from gamediss.storage import CounterStore

logger = logging.getLogger(__name__)


async def _cleanup_loop(limiter: SlidingWindowRateLimiter, interval_s: float):
    while True:
        await asyncio.sleep(interval_s)
        removed = limiter.cleanup()
        if removed:
            logger.info("rate limit cleanup removed %s identifiers", removed)


@asynccontextmanager
async def lifespan(app: FastAPI):
    interval_s = app.state.cleanup_interval_s
    task = None
    if interval_s > 0:
        task = asyncio.create_task(_cleanup_loop(app.state.rate_limiter, interval_s))
    try:
        yield
    finally:
        if task is not None:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass


def create_app(
    data_dir: Path | None = None,
    rate_limiter: SlidingWindowRateLimiter | None = None,
    rate_limits: dict[str, RateLimit] | None = None,
    cleanup_interval_s: float = RATE_LIMIT_CLEANUP_INTERVAL_S,
) -> FastAPI:
    logging.basicConfig(level=LOG_LEVEL)

    app = FastAPI(title="gamediss", docs_url=None, redoc_url=None, openapi_url=None, lifespan=lifespan)
    app.state.store = CounterStore(data_dir or DATA_DIR)
    app.state.rate_limiter = rate_limiter or SlidingWindowRateLimiter()
    app.state.rate_limits = {**RATE_LIMITS, **(rate_limits or {})}
    app.state.cleanup_interval_s = cleanup_interval_s

    @app.middleware("http")
    async def body_size_middleware(request: Request, call_next):
        if request.method in ("POST", "PUT", "PATCH") and body_too_large(request, MAX_BODY_BYTES):
            return JSONResponse(
                {"success": False, "error": f"Request body too large. Maximum size is {MAX_BODY_BYTES} bytes"},
                status_code=413,
            )
        return await call_next(request)

    @app.middleware("http")
    async def referrer_policy_middleware(request: Request, call_next):
        response = await call_next(request)
        response.headers["Referrer-Policy"] = "no-referrer"
        return response

    @app.exception_handler(RateLimitExceeded)
    async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
        return JSONResponse(
            {"success": False, "error": str(exc)},
            status_code=429,
            headers=exc.headers(),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            {"success": False, "error": str(exc.detail)},
            status_code=exc.status_code,
            headers=exc.headers,
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        message = errors[0].get("msg", "invalid request") if errors else "invalid request"
        return JSONResponse({"success": False, "error": message}, status_code=400)

    @app.get("/robots.txt", include_in_schema=False)
    def robots_txt():
        return PlainTextResponse(
            "User-agent: *\nDisallow: /api/\n",
            media_type="text/plain; charset=utf-8",
        )

    app.include_router(health.router)
    app.include_router(games.router)
    app.include_router(dead_games.router)
    app.include_router(stats.router)
    return app


app = create_app()
