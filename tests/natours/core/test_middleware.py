"""Tests for rate limiting, body size capping and request logging."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from natours.core.error_handlers import register_error_handlers
from natours.core.middleware import BodySizeLimitMiddleware, RateLimiter, RateLimitMiddleware


def _limited_app(limiter: RateLimiter) -> FastAPI:
    app = FastAPI()
    app.add_middleware(RateLimitMiddleware, limiter=limiter)

    @app.get("/api/ping")
    async def ping() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    return app


def test_rate_limiter_counts_down():
    """Test that each request consumes one unit of the budget."""
    limiter = RateLimiter(limit=3, window=60)

    assert limiter.check("1.2.3.4") == {"allowed": True, "remaining": 2, "limit": 3}
    assert limiter.check("1.2.3.4")["remaining"] == 1
    assert limiter.check("1.2.3.4")["remaining"] == 0

    blocked = limiter.check("1.2.3.4")
    assert blocked["allowed"] is False
    assert 0 < blocked["retry_after"] <= 61


def test_rate_limiter_keys_are_independent():
    """Test that one client exhausting its budget does not affect another."""
    limiter = RateLimiter(limit=1, window=60)

    assert limiter.check("a")["allowed"] is True
    assert limiter.check("a")["allowed"] is False
    assert limiter.check("b")["allowed"] is True


def test_rate_limiter_window_expires(monkeypatch):
    """Test that the counter starts over once the window has passed."""
    clock = [1000.0]
    monkeypatch.setattr("natours.core.middleware.time.monotonic", lambda: clock[0])
    limiter = RateLimiter(limit=1, window=60)

    assert limiter.check("a")["allowed"] is True
    assert limiter.check("a")["allowed"] is False

    clock[0] += 60
    assert limiter.check("a")["allowed"] is True


def test_rate_limiter_reset():
    """Test that reset clears every counter."""
    limiter = RateLimiter(limit=1, window=60)
    limiter.check("a")

    limiter.reset()

    assert limiter.check("a")["allowed"] is True


def test_rate_limit_middleware_blocks_after_limit():
    """Test that the middleware answers 429 with the failure envelope."""
    client = TestClient(_limited_app(RateLimiter(limit=2, window=3600)))

    first = client.get("/api/ping")
    assert first.status_code == 200
    assert first.headers["X-RateLimit-Limit"] == "2"
    assert first.headers["X-RateLimit-Remaining"] == "1"
    assert client.get("/api/ping").status_code == 200

    response = client.get("/api/ping")

    assert response.status_code == 429
    assert response.json() == {
        "status": "fail",
        "message": "Too many requests from this IP, please try again in an hour!",
    }
    assert "Retry-After" in response.headers


def test_rate_limit_middleware_ignores_other_paths():
    """Test that only /api routes count against the budget."""
    client = TestClient(_limited_app(RateLimiter(limit=1, window=3600)))

    for _ in range(3):
        assert client.get("/health").status_code == 200
    assert client.get("/api/ping").status_code == 200


def test_rate_limiter_forgets_idle_clients(monkeypatch):
    """Test that windows of clients that went quiet are dropped."""
    clock = [1000.0]
    monkeypatch.setattr("natours.core.middleware.time.monotonic", lambda: clock[0])
    limiter = RateLimiter(limit=5, window=60)

    for index in range(10_000):
        limiter.check(f"10.0.{index // 256}.{index % 256}")
    assert limiter.tracked_clients == 10_000

    clock[0] += 61
    limiter.check("192.168.0.1")

    assert limiter.tracked_clients == 1


def test_rate_limiter_keeps_active_windows(monkeypatch):
    """Test that the sweep only drops windows that have ended."""
    clock = [1000.0]
    monkeypatch.setattr("natours.core.middleware.time.monotonic", lambda: clock[0])
    limiter = RateLimiter(limit=2, window=60)

    limiter.check("idle")
    clock[0] += 30
    limiter.check("busy")
    clock[0] += 31
    result = limiter.check("busy")

    assert limiter.tracked_clients == 1
    assert result["remaining"] == 0


def _chunks(size: int, chunk_size: int = 1024):
    """Yield a JSON body of roughly ``size`` bytes without a Content-Length."""
    yield b'{"name": "'
    for _ in range(size // chunk_size):
        yield b"x" * chunk_size
    yield b'"}'


@pytest.fixture
def capped_client() -> TestClient:
    """Client for a small app whose bodies are capped at 10 bytes."""
    app = FastAPI()
    register_error_handlers(app)
    app.add_middleware(BodySizeLimitMiddleware, max_bytes=10)

    @app.post("/echo")
    async def echo(body: dict) -> dict:
        return body

    @app.get("/ping")
    async def ping() -> dict[str, str]:
        return {"status": "ok"}

    return TestClient(app)


def test_body_size_limit(capped_client: TestClient):
    """Test that declared bodies over the cap are rejected with 413."""
    assert capped_client.post("/echo", json={"a": 1}).status_code == 200

    response = capped_client.post("/echo", json={"name": "x" * 50})
    assert response.status_code == 413
    assert response.json()["status"] == "fail"


def test_body_size_limit_counts_chunked_bodies(capped_client: TestClient):
    """Test that a body without Content-Length is measured as it arrives."""
    response = capped_client.post("/echo", content=_chunks(2048), headers={"Content-Type": "application/json"})

    assert response.status_code == 413
    assert response.json() == {"status": "fail", "message": "Request body is larger than 10 bytes"}


def test_body_size_limit_ignores_requests_without_body(capped_client: TestClient):
    assert capped_client.get("/ping").status_code == 200


def test_body_size_limit_on_api(test_client: TestClient):
    """Test that the application caps request bodies at 10 kB."""
    response = test_client.post(
        "/api/v1/users/login",
        json={"email": "someone@example.com", "password": "x" * 20_000},
    )

    assert response.status_code == 413


def test_chunked_body_size_limit_on_api(test_client: TestClient, create_user):
    """Test that a chunked 50 kB body is refused even for an authenticated route."""
    _, token = create_user()

    response = test_client.patch(
        "/api/v1/users/updateMe",
        content=_chunks(50 * 1024),
        headers={"Authorization": f"Bearer {token}", "Content-Type": "application/json"},
    )

    assert response.status_code == 413
    assert response.json()["status"] == "fail"
