"""Unit tests for the FastAPI gateway application."""

import hashlib
import hmac

import pytest
from fastapi.testclient import TestClient

from src.webhook_gateway import main
from src.webhook_gateway.main import _redact_secret, app


PAYLOAD = b'{"a":1}'


def _signature(payload: bytes, secret: bytes = b"s3cr3t") -> str:
    return "sha256=" + hmac.new(secret, payload, hashlib.sha256).hexdigest()


def _headers(**overrides):
    headers = {
        "User-Agent": "git-gitcode-hook",
        "Content-Type": "application/json",
        "X-GitCode-Event": "Push Hook",
        "X-GitCode-Delivery": "delivery-1",
        "X-GitCode-Signature-256": _signature(PAYLOAD),
    }
    headers.update(overrides)
    return {k: v for k, v in headers.items() if v is not None}


@pytest.fixture
def client(gateway_env):
    with TestClient(app) as test_client:
        yield test_client


class TestWebhookEndpoint:

    def test_signed_delivery_accepted(self, client):
        response = client.post("/webhooks/gitcode", content=PAYLOAD, headers=_headers())

        assert response.status_code == 202
        assert response.json() == {
            "status": "accepted",
            "event_type": "Push Hook",
            "delivery": "delivery-1",
            "payload_bytes": len(PAYLOAD),
        }

    def test_missing_signature_returns_401(self, client):
        response = client.post(
            "/webhooks/gitcode",
            content=PAYLOAD,
            headers=_headers(**{"X-GitCode-Signature-256": None}),
        )

        assert response.status_code == 401
        assert response.text == "401 Unauthorized: Missing X-GitCode-Token"
        assert response.headers["content-type"] == "text/plain; charset=utf-8"

    def test_wrong_signature_returns_403(self, client):
        response = client.post(
            "/webhooks/gitcode",
            content=PAYLOAD,
            headers=_headers(
                **{"X-GitCode-Signature-256": _signature(PAYLOAD, b"other")}
            ),
        )

        assert response.status_code == 403
        assert response.text == "403 Forbidden: Invalid X-GitCode-Token"

    def test_text_plain_returns_400(self, client):
        response = client.post(
            "/webhooks/gitcode",
            content=PAYLOAD,
            headers=_headers(**{"Content-Type": "text/plain"}),
        )

        assert response.status_code == 400
        assert response.text == (
            "400 Bad Request: Hook only accepts content-type: application/json"
        )

    def test_get_returns_405(self, client):
        response = client.get("/webhooks/gitcode", headers=_headers())

        assert response.status_code == 405
        assert response.text == "Method Not Allowed"

    def test_empty_body_accepted(self, client):
        response = client.post(
            "/webhooks/gitcode",
            content=b"",
            headers=_headers(**{"X-GitCode-Signature-256": _signature(b"")}),
        )

        assert response.status_code == 202
        assert response.json()["payload_bytes"] == 0

    def test_rejections_exposed_as_metrics(self, client):
        client.post(
            "/webhooks/gitcode",
            content=PAYLOAD,
            headers=_headers(**{"X-GitCode-Signature-256": None}),
        )

        response = client.get("/metrics")

        assert response.status_code == 200
        assert 'webhook_deliveries_total{outcome="missing_signature"}' in response.text


class TestLifecycle:

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}

    def test_rest_client_created_when_token_set(self, gateway_env, monkeypatch):
        monkeypatch.setenv("GATEWAY_GITCODE_TOKEN", "token-123")

        with TestClient(app):
            assert main.gitcode_client is not None
            assert main.gitcode_client.token == "token-123"

        assert main.gitcode_client is None

    def test_rest_client_absent_without_token(self, client):
        assert main.gitcode_client is None

    def test_uninitialized_gateway_returns_503(self):
        # No lifespan: the authenticator is never built.
        response = TestClient(app).post(
            "/webhooks/gitcode", content=PAYLOAD, headers=_headers()
        )

        assert response.status_code == 503


class TestRedactSecret:

    def test_long_secret(self):
        assert _redact_secret("abcdefgh") == "abcd****"

    def test_short_secret(self):
        assert _redact_secret("abc") == "***"

    def test_unset(self):
        assert _redact_secret(None) == "<unset>"
