"""Tests for the rate limiting pure function and middleware integration."""

import pytest

from portfolio_cms.middleware.request_context import check_rate_limit


class TestCheckRateLimit:
    """Unit tests for the pure function, no middleware or HTTP involved."""

    def test_allows_within_limit(self):
        bucket: dict = {}
        allowed, retry = check_rate_limit(bucket, "client-a", max_per_minute=60, now=0.0)
        assert allowed is True
        assert retry == 0.0

    def test_denies_after_exhaustion(self):
        bucket: dict = {}
        now = 0.0
        # Exhaust all tokens
        for _ in range(60):
            check_rate_limit(bucket, "client-a", max_per_minute=60, now=now)

        allowed, retry = check_rate_limit(bucket, "client-a", max_per_minute=60, now=now)
        assert allowed is False
        assert retry > 0

    def test_refills_over_time(self):
        bucket: dict = {}
        # Exhaust tokens at t=0
        for _ in range(60):
            check_rate_limit(bucket, "client-a", max_per_minute=60, now=0.0)

        # 2 seconds later: should have refilled ~2 tokens
        allowed, _ = check_rate_limit(bucket, "client-a", max_per_minute=60, now=2.0)
        assert allowed is True

    def test_separate_keys_independent(self):
        bucket: dict = {}
        for _ in range(60):
            check_rate_limit(bucket, "client-a", max_per_minute=60, now=0.0)

        # Different client should still have tokens
        allowed, _ = check_rate_limit(bucket, "client-b", max_per_minute=60, now=0.0)
        assert allowed is True

    def test_zero_limit_always_allows(self):
        bucket: dict = {}
        allowed, _ = check_rate_limit(bucket, "any", max_per_minute=0, now=0.0)
        assert allowed is True

    def test_retry_after_reflects_refill_rate(self):
        bucket: dict = {}
        check_rate_limit(bucket, "client-a", max_per_minute=1, now=0.0)
        allowed, retry = check_rate_limit(bucket, "client-a", max_per_minute=1, now=30.0)
        assert allowed is False
        assert retry == pytest.approx(30.0)


class TestRateLimitMiddleware:

    def test_returns_429_with_error_body(self, client, monkeypatch):
        from portfolio_cms.core.config import settings

        monkeypatch.setattr(settings, "rate_limit_per_minute", 2)
        for _ in range(2):
            assert client.get("/api/public/portfolios/nobody").status_code == 404

        resp = client.get("/api/public/portfolios/nobody")
        assert resp.status_code == 429
        assert resp.json()["error"] == "RATE_LIMITED"
        assert "retry-after" in resp.headers

    def test_health_is_never_throttled(self, client, monkeypatch):
        from portfolio_cms.core.config import settings

        monkeypatch.setattr(settings, "rate_limit_per_minute", 1)
        for _ in range(5):
            assert client.get("/health").status_code == 200
