from fastapi import FastAPI
from fastapi.testclient import TestClient

from booking_api.infrastructure.rate_limit.memory_rate_limiter import InMemoryRateLimiter
from booking_api.middleware import RateLimitMiddleware


def test_memory_rate_limiter_allows_then_blocks():
    rl = InMemoryRateLimiter()
    key = "k1"
    assert rl.allow(key, max_requests=2, window_seconds=60) is True
    assert rl.allow(key, max_requests=2, window_seconds=60) is True
    assert rl.allow(key, max_requests=2, window_seconds=60) is False
    # other keys have their own window
    assert rl.allow("k2", max_requests=2, window_seconds=60) is True


def test_memory_rate_limiter_window_expires(monkeypatch):
    from booking_api.infrastructure.rate_limit import memory_rate_limiter as mod

    now = [1000.0]
    monkeypatch.setattr(mod.time, "time", lambda: now[0])
    rl = InMemoryRateLimiter()
    assert rl.allow("k", max_requests=1, window_seconds=60) is True
    assert rl.allow("k", max_requests=1, window_seconds=60) is False
    now[0] += 61
    assert rl.allow("k", max_requests=1, window_seconds=60) is True


def test_rate_limit_middleware_returns_429():
    app = FastAPI()
    app.add_middleware(RateLimitMiddleware, rate_limit=2)

    @app.get("/ping")
    def ping():
        return {"ok": True}

    client = TestClient(app)
    assert client.get("/ping").status_code == 200
    assert client.get("/ping").status_code == 200
    res = client.get("/ping")
    assert res.status_code == 429
    assert res.json()["success"] is False


def test_memory_rate_limiter_forgets_idle_clients(monkeypatch):
    from booking_api.infrastructure.rate_limit import memory_rate_limiter as mod

    now = [1000.0]
    monkeypatch.setattr(mod.time, "time", lambda: now[0])
    rl = InMemoryRateLimiter()
    for ip in ("10.0.0.1", "10.0.0.2", "10.0.0.3"):
        assert rl.allow(ip, max_requests=5, window_seconds=60) is True
    assert len(rl._store) == 3

    now[0] += 61
    assert rl.allow("10.0.0.9", max_requests=5, window_seconds=60) is True
    assert set(rl._store) == {"10.0.0.9"}
