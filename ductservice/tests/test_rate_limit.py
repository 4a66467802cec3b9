"""Tests for the per-client rate limiter."""

from fastapi import FastAPI
from fastapi.testclient import TestClient

from ductservice.middleware.rate_limit import RateLimitMiddleware


def _app(limit, **options):
    app = FastAPI()
    app.add_middleware(RateLimitMiddleware, requests_per_minute=limit, **options)

    @app.get("/api/ping")
    async def ping():
        return {"ok": True}

    @app.get("/api/health")
    async def health():
        return {"status": "healthy"}

    return app


class TestRateLimit:

    def test_blocks_after_limit(self):
        client = TestClient(_app(2))
        assert client.get("/api/ping").status_code == 200
        assert client.get("/api/ping").status_code == 200
        response = client.get("/api/ping")
        assert response.status_code == 429
        assert "Rate limit" in response.json()["detail"]

    def test_health_not_limited(self):
        client = TestClient(_app(1))
        for _ in range(5):
            assert client.get("/api/health").status_code == 200

    def test_forwarded_clients_counted_separately(self):
        client = TestClient(_app(1))
        assert client.get("/api/ping", headers={"x-forwarded-for": "10.0.0.1"}).status_code == 200
        assert client.get("/api/ping", headers={"x-forwarded-for": "10.0.0.2"}).status_code == 200
        assert client.get("/api/ping", headers={"x-forwarded-for": "10.0.0.1"}).status_code == 429

    def test_remaining_budget_headers(self):
        client = TestClient(_app(3))
        first = client.get("/api/ping")
        second = client.get("/api/ping")
        assert first.headers["X-RateLimit-Limit"] == "3"
        assert first.headers["X-RateLimit-Remaining"] == "2"
        assert second.headers["X-RateLimit-Remaining"] == "1"

    def test_limited_response_has_retry_after(self):
        client = TestClient(_app(1))
        client.get("/api/ping")
        response = client.get("/api/ping")
        assert response.status_code == 429
        assert 1 <= int(response.headers["Retry-After"]) <= 60
        assert response.headers["X-RateLimit-Remaining"] == "0"

    def test_custom_exempt_paths(self):
        client = TestClient(_app(1, exempt_paths=("/api/ping",)))
        for _ in range(3):
            assert client.get("/api/ping").status_code == 200
        assert client.get("/api/health").status_code == 200
        assert client.get("/api/health").status_code == 429


class TestSlidingWindow:

    def test_budget_returns_as_hits_expire(self):
        limiter = RateLimitMiddleware(None, requests_per_minute=2, window_seconds=10)
        assert limiter._admit("a", 0.0)[0]
        assert limiter._admit("a", 4.0)[0]

        allowed, remaining, retry_after = limiter._admit("a", 6.0)
        assert not allowed
        assert remaining == 0
        assert retry_after == 4

        assert limiter._admit("a", 10.5)[0]
        assert not limiter._admit("a", 11.0)[0]

    def test_sweep_forgets_idle_clients(self):
        limiter = RateLimitMiddleware(None, requests_per_minute=5, window_seconds=10)
        limiter._next_sweep = 0.0
        limiter._admit("idle", 1.0)
        limiter._admit("busy", 95.0)
        limiter._sweep(100.0)
        assert "idle" not in limiter._hits
        assert "busy" in limiter._hits
