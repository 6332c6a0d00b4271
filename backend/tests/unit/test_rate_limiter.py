"""Sliding-window limiter and its ASGI middleware, with Redis mocked out."""

from unittest.mock import MagicMock

from fastapi import FastAPI
from fastapi.testclient import TestClient
import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from app.core.config import settings
from app.middleware.rate_limiter import RateLimiter
from app.middleware.rate_limiter_asgi import RateLimitMiddlewareASGI


@pytest.fixture
def limiter_enabled(monkeypatch):
    monkeypatch.setattr(settings, "rate_limit_enabled", True)


def _redis_with_count(count: int, oldest_score: float = 0.0) -> MagicMock:
    redis_client = MagicMock()
    pipe = MagicMock()
    pipe.execute.return_value = [0, count, 1, True]
    redis_client.pipeline.return_value = pipe
    redis_client.zrange.return_value = [("member", oldest_score)]
    return redis_client


class TestRateLimiter:
    def test_allows_under_limit(self, limiter_enabled):
        limiter = RateLimiter(redis_client=_redis_with_count(3))
        allowed, count, retry_after = limiter.check_rate_limit("1.2.3.4", 100, 900)
        assert allowed is True
        assert count == 4
        assert retry_after == 0

    def test_rejects_at_limit_and_reports_retry_after(self, limiter_enabled, monkeypatch):
        monkeypatch.setattr("app.middleware.rate_limiter.time.time", lambda: 1000.0)
        redis_client = _redis_with_count(100, oldest_score=400.0)
        limiter = RateLimiter(redis_client=redis_client)

        allowed, count, retry_after = limiter.check_rate_limit("1.2.3.4", 100, 900)

        assert allowed is False
        assert count == 100
        # Oldest entry leaves the window at 400 + 900
        assert retry_after == 300
        redis_client.zrem.assert_called_once()

    def test_redis_errors_allow_the_request(self, limiter_enabled):
        redis_client = MagicMock()
        redis_client.pipeline.return_value.execute.side_effect = RedisConnectionError("down")
        limiter = RateLimiter(redis_client=redis_client)
        assert limiter.check_rate_limit("1.2.3.4", 1, 60) == (True, 0, 0)

    def test_disabled_limiter_skips_redis(self, monkeypatch):
        monkeypatch.setattr(settings, "rate_limit_enabled", False)
        redis_client = MagicMock()
        limiter = RateLimiter(redis_client=redis_client)
        assert limiter.check_rate_limit("1.2.3.4", 1, 60) == (True, 0, 0)
        redis_client.pipeline.assert_not_called()

    def test_long_identifiers_are_hashed(self, limiter_enabled):
        limiter = RateLimiter(redis_client=MagicMock())
        key = limiter._get_cache_key("x" * 64, "general")
        assert key.startswith("rate_limit:general:")
        assert len(key.split(":")[-1]) == 16


def _app_with_limiter(limiter: MagicMock) -> FastAPI:
    app = FastAPI()

    @app.get("/ping")
    def ping():
        return {"ok": True}

    @app.get("/health")
    def health():
        return {"status": "OK"}

    app.add_middleware(RateLimitMiddlewareASGI, rate_limiter=limiter)
    return app


class TestRateLimitMiddleware:
    def test_rejected_request_gets_429_envelope(self, limiter_enabled):
        limiter = MagicMock()
        limiter.check_rate_limit.return_value = (False, 100, 42)
        client = TestClient(_app_with_limiter(limiter))

        response = client.get("/ping")

        assert response.status_code == 429
        assert response.headers["Retry-After"] == "42"
        body = response.json()
        assert body["status"] == "fail"
        assert body["message"] == "Too many requests, please try again later."
        assert body["code"] == "RATE_LIMIT_EXCEEDED"

    def test_allowed_request_passes_through(self, limiter_enabled):
        limiter = MagicMock()
        limiter.check_rate_limit.return_value = (True, 1, 0)
        client = TestClient(_app_with_limiter(limiter))

        assert client.get("/ping").json() == {"ok": True}
        limiter.check_rate_limit.assert_called_once()

    def test_forwarded_for_header_identifies_client(self, limiter_enabled):
        limiter = MagicMock()
        limiter.check_rate_limit.return_value = (True, 1, 0)
        client = TestClient(_app_with_limiter(limiter))

        client.get("/ping", headers={"X-Forwarded-For": "203.0.113.9, 10.0.0.1"})

        assert limiter.check_rate_limit.call_args.kwargs["identifier"] == "203.0.113.9"

    def test_health_probe_is_exempt(self, limiter_enabled):
        limiter = MagicMock()
        limiter.check_rate_limit.return_value = (False, 100, 42)
        client = TestClient(_app_with_limiter(limiter))

        assert client.get("/health").status_code == 200
        limiter.check_rate_limit.assert_not_called()

    def test_disabled_setting_bypasses_limiter(self, monkeypatch):
        monkeypatch.setattr(settings, "rate_limit_enabled", False)
        limiter = MagicMock()
        client = TestClient(_app_with_limiter(limiter))

        assert client.get("/ping").status_code == 200
        limiter.check_rate_limit.assert_not_called()


def test_requests_with_the_same_timestamp_are_counted_separately(limiter_enabled, monkeypatch):
    monkeypatch.setattr("app.middleware.rate_limiter.time.time", lambda: 1000.0)
    redis_client = _redis_with_count(0)
    limiter = RateLimiter(redis_client=redis_client)

    limiter.check_rate_limit("1.2.3.4", 100, 900)
    limiter.check_rate_limit("1.2.3.4", 100, 900)

    pipe = redis_client.pipeline.return_value
    members = [list(call.args[1])[0] for call in pipe.zadd.call_args_list]
    assert len(members) == 2
    assert members[0] != members[1]
    assert all(member.startswith("1000.0:") for member in members)
    assert [list(call.args[1].values())[0] for call in pipe.zadd.call_args_list] == [1000.0, 1000.0]
