import asyncio

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from slotwise.api.dependencies import create_access_token
from slotwise.api.middleware.rate_limit_middleware import RateLimitMiddleware, RateLimitRule, default_rules
from slotwise.services.rate_limit.rate_limit_store import InMemoryRateLimitStore


class FakeClock:
    def __init__(self, now=1_000_000.0):
        self.now = now

    def __call__(self):
        return self.now


def hit(store, key="ip:1.2.3.4", max_requests=2, window_seconds=60):
    return asyncio.run(store.hit(key, max_requests, window_seconds))


# ============================================================================
# Store
# ============================================================================

def test_memory_store_limits_within_window():
    store = InMemoryRateLimitStore(clock=FakeClock())

    first = hit(store)
    second = hit(store)
    third = hit(store)

    assert (first.limited, first.remaining) == (False, 1)
    assert (second.limited, second.remaining) == (False, 0)
    assert third.limited
    assert third.reset_at == 1_000_060.0


def test_memory_store_window_resets():
    clock = FakeClock()
    store = InMemoryRateLimitStore(clock=clock)
    for _ in range(3):
        hit(store)

    clock.now += 61

    assert not hit(store).limited


def test_memory_store_keys_are_independent_and_purged():
    clock = FakeClock()
    store = InMemoryRateLimitStore(clock=clock)
    hit(store, key="a", max_requests=1)
    hit(store, key="a", max_requests=1)

    assert not hit(store, key="b", max_requests=1).limited

    clock.now += 120
    assert store.purge() == 2


def test_memory_store_sweeps_expired_windows_on_hit():
    clock = FakeClock()
    store = InMemoryRateLimitStore(clock=clock)
    for i in range(1000):
        hit(store, key=f"ip:10.0.{i // 256}.{i % 256}")
    assert len(store._windows) == 1000

    clock.now += 61
    hit(store, key="ip:192.168.0.1")

    assert list(store._windows) == ["ip:192.168.0.1"]


def test_memory_store_sweep_waits_for_cleanup_interval():
    clock = FakeClock()
    store = InMemoryRateLimitStore(clock=clock, cleanup_interval=300)
    hit(store, key="a", window_seconds=10)

    clock.now += 60
    hit(store, key="b", window_seconds=10)
    assert set(store._windows) == {"a", "b"}

    clock.now += 300
    hit(store, key="c", window_seconds=10)
    assert set(store._windows) == {"c"}


# ============================================================================
# Middleware
# ============================================================================

@pytest.fixture
def limited_app():
    app = FastAPI()
    rules = (
        RateLimitRule("auth", "/api/v1/auth/login", 2, 60, methods=frozenset({"POST"})),
        RateLimitRule("api", "/api/v1/", 3, 60),
    )
    app.add_middleware(RateLimitMiddleware, store=InMemoryRateLimitStore(), rules=rules)

    @app.post("/api/v1/auth/login")
    async def login():
        return {"ok": True}

    @app.get("/api/v1/things")
    async def things():
        return {"ok": True}

    @app.get("/health")
    async def health():
        return {"ok": True}

    return TestClient(app)


def test_limit_returns_429_with_headers(limited_app):
    ok = limited_app.post("/api/v1/auth/login")
    assert ok.status_code == 200
    assert ok.headers["X-RateLimit-Limit"] == "2"
    assert ok.headers["X-RateLimit-Remaining"] == "1"

    limited_app.post("/api/v1/auth/login")
    blocked = limited_app.post("/api/v1/auth/login")

    assert blocked.status_code == 429
    assert int(blocked.headers["Retry-After"]) >= 1
    assert blocked.headers["X-RateLimit-Remaining"] == "0"
    assert "X-RateLimit-Reset" in blocked.headers
    assert blocked.json()["detail"] == "Rate limit exceeded. Please try again later."


def test_rules_have_separate_budgets(limited_app):
    for _ in range(3):
        limited_app.post("/api/v1/auth/login")

    assert limited_app.get("/api/v1/things").status_code == 200


def test_unmatched_paths_are_not_limited(limited_app):
    for _ in range(10):
        response = limited_app.get("/health")
        assert response.status_code == 200
        assert "X-RateLimit-Limit" not in response.headers


def test_forwarded_ip_is_the_identifier(limited_app):
    for _ in range(3):
        limited_app.get("/api/v1/things", headers={"X-Forwarded-For": "10.0.0.1, 10.0.0.2"})

    assert limited_app.get("/api/v1/things", headers={"X-Forwarded-For": "10.0.0.1"}).status_code == 429
    assert limited_app.get("/api/v1/things", headers={"X-Real-IP": "10.0.0.9"}).status_code == 200


def test_authenticated_user_is_the_identifier(limited_app):
    token = create_access_token({"sub": "user-1"})
    headers = {"Authorization": f"Bearer {token}"}

    for _ in range(3):
        limited_app.get("/api/v1/things", headers=headers)

    assert limited_app.get("/api/v1/things", headers=headers).status_code == 429
    assert limited_app.get("/api/v1/things").status_code == 200


def test_default_rules_order():
    rules = default_rules()

    def rule_for(method, path):
        return next(r.name for r in rules if r.matches(method, path))

    assert rule_for("POST", "/api/v1/auth/login") == "auth"
    assert rule_for("POST", "/api/v1/auth/forgot-password") == "auth"
    assert rule_for("POST", "/api/v1/auth/reset-password") == "auth"
    assert rule_for("GET", "/api/v1/auth/me") == "api"
    assert rule_for("POST", "/api/v1/public/bookings") == "api"
    assert rule_for("GET", "/api/v1/public/availability") == "public"
    assert rule_for("GET", "/api/v1/dashboard/services") == "api"
