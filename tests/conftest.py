import asyncio
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from gamediss.main import create_app
from gamediss.rate_limit import SlidingWindowRateLimiter


class FakeResponse:
    def __init__(self, body, status: int = 200, exc: Exception | None = None):
        self._body = body
        self.status = status
        self._exc = exc

    async def json(self, content_type=None):
        if isinstance(self._body, Exception):
            raise self._body
        return self._body

    async def __aenter__(self):
        if self._exc is not None:
            raise self._exc
        return self

    async def __aexit__(self, *exc):
        return False


class FakeSession:
    """Stands in for aiohttp.ClientSession; records every POST."""

    def __init__(self, body=None, status: int = 200, exc: Exception | None = None):
        self.body = {"success": True} if body is None else body
        self.status = status
        self.exc = exc
        self.calls: list[tuple[str, dict]] = []
        self.call_times: list[float] = []

    def post(self, url, json=None):
        self.calls.append((url, json))
        self.call_times.append(asyncio.get_running_loop().time())
        return FakeResponse(self.body, self.status, self.exc)

    async def close(self):
        pass


@pytest.fixture()
def fake_session() -> FakeSession:
    return FakeSession()


@pytest.fixture()
def data_dir(tmp_path: Path) -> Path:
    d = tmp_path / "data"
    d.mkdir(parents=True, exist_ok=True)
    return d


@pytest.fixture()
def limiter() -> SlidingWindowRateLimiter:
    return SlidingWindowRateLimiter()


@pytest.fixture()
def app(data_dir: Path, limiter: SlidingWindowRateLimiter):
    return create_app(data_dir=data_dir, rate_limiter=limiter, cleanup_interval_s=0)


@pytest.fixture()
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def make_session():
    return FakeSession
