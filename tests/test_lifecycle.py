import time

from fastapi.testclient import TestClient

from gamediss.main import create_app
from gamediss.rate_limit import SlidingWindowRateLimiter


def test_background_cleanup_forgets_stale_identifiers(data_dir):
    limiter = SlidingWindowRateLimiter()
    limiter.check("1.2.3.4", 60_000, 10, now=0.0)
    assert limiter.tracked() == 1

    app = create_app(data_dir=data_dir, rate_limiter=limiter, cleanup_interval_s=0.02)
    with TestClient(app):
        deadline = time.monotonic() + 2.0
        while limiter.tracked() and time.monotonic() < deadline:
            time.sleep(0.02)

    assert limiter.tracked() == 0


def test_apps_do_not_share_counters(data_dir):
    a = create_app(data_dir=data_dir, cleanup_interval_s=0)
    b = create_app(data_dir=data_dir, cleanup_interval_s=0)
    assert a.state.rate_limiter is not b.state.rate_limiter
