"""Tests for SecurityHeadersMiddleware."""

from __future__ import annotations

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.middleware.security_headers import (
    API_CONTENT_SECURITY_POLICY,
    SecurityHeadersMiddleware,
)


@pytest.fixture
def app_with_headers() -> FastAPI:
    app = FastAPI()
    app.add_middleware(SecurityHeadersMiddleware)

    @app.get("/health")
    def health():
        return {"status": "ok"}

    @app.get("/api/subscription")
    def subscription():
        return {"status": "trial"}

    return app


@pytest.fixture
def client(app_with_headers: FastAPI) -> TestClient:
    return TestClient(app_with_headers)


class TestSecurityHeaders:
    def test_basic_headers(self, client: TestClient) -> None:
        resp = client.get("/health")
        assert resp.headers["X-Content-Type-Options"] == "nosniff"
        assert resp.headers["X-Frame-Options"] == "DENY"
        assert resp.headers["Referrer-Policy"] == "no-referrer"

    def test_content_security_policy_locks_down_json(self, client: TestClient) -> None:
        resp = client.get("/health")
        assert resp.headers["Content-Security-Policy"] == API_CONTENT_SECURITY_POLICY
        assert "default-src 'none'" in API_CONTENT_SECURITY_POLICY

    def test_api_responses_not_cached(self, client: TestClient) -> None:
        assert client.get("/api/subscription").headers["Cache-Control"] == "no-store"
        assert "Cache-Control" not in client.get("/health").headers

    def test_no_hsts_without_https(self, client: TestClient) -> None:
        resp = client.get("/health")
        assert "Strict-Transport-Security" not in resp.headers

    def test_hsts_with_https_proxy(self, client: TestClient) -> None:
        resp = client.get("/health", headers={"X-Forwarded-Proto": "https"})
        assert "max-age=31536000" in resp.headers["Strict-Transport-Security"]

    def test_does_not_overwrite_existing_headers(self) -> None:
        app = FastAPI()
        app.add_middleware(SecurityHeadersMiddleware)

        @app.get("/api/receipt")
        def receipt():
            from starlette.responses import JSONResponse

            resp = JSONResponse({"ok": True})
            resp.headers["Cache-Control"] = "private, max-age=60"
            return resp

        resp = TestClient(app).get("/api/receipt")
        assert resp.headers["Cache-Control"] == "private, max-age=60"
