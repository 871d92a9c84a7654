"""Tests for /health and / endpoints."""


class TestHealth:

    def test_health_returns_200(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] in ("healthy", "degraded")
        assert "db" in data
        assert "uptime_seconds" in data
        assert "version" in data
        assert "portfolio_count" in data

    def test_health_counts_portfolios(self, client, owner, other_owner):
        assert client.get("/health").json()["portfolio_count"] == 2

    def test_root_returns_api_info(self, client):
        resp = client.get("/")
        assert resp.status_code == 200
        assert resp.json()["name"] == "Portfolio CMS API"


class TestResponseHeaders:

    def test_response_includes_middleware_headers(self, client):
        resp = client.get("/health")
        assert "x-request-id" in resp.headers
        assert "x-response-time" in resp.headers

    def test_request_id_is_propagated(self, client):
        resp = client.get("/health", headers={"X-Request-ID": "abc123"})
        assert resp.headers["x-request-id"] == "abc123"

    def test_admin_responses_are_not_cacheable(self, client):
        resp = client.get("/api/admin/session")
        assert resp.status_code == 401
        assert resp.headers["cache-control"] == "no-store"
        assert resp.headers["x-frame-options"] == "DENY"
        assert resp.headers["x-robots-tag"] == "noindex, nofollow"

    def test_public_responses_have_no_admin_headers(self, client):
        resp = client.get("/api/public/portfolios/nobody")
        assert "x-frame-options" not in resp.headers
