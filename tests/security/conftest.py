"""HTTP-level fixtures for webhook handler tests.

- Builds the FastAPI `app` from create_app() with test settings
- Routes the app's Shopify traffic to the shared fake_shopify recorder
- Provides `client` (TestClient that never raises server exceptions) and
  `signed_headers` for building valid Shopify webhook requests
"""

from __future__ import annotations

import base64
import hashlib
import hmac

import pytest
from fastapi.testclient import TestClient

from src.app import create_app

WEBHOOK_SECRET = "shopify-test-secret"


@pytest.fixture
def app(settings, make_client):
    return create_app(settings, shopify_client=make_client())


@pytest.fixture
def client(app):
    """TestClient from the webhook sender's perspective."""
    with TestClient(app, raise_server_exceptions=False) as c:
        yield c


@pytest.fixture
def signed_headers():
    """Factory for a full set of Shopify webhook headers over a body."""

    def _make(body: bytes, topic: str = "orders/updated", secret: str = WEBHOOK_SECRET) -> dict:
        sig = base64.b64encode(hmac.new(secret.encode(), body, hashlib.sha256).digest()).decode()
        return {
            "X-Shopify-Hmac-SHA256": sig,
            "X-Shopify-Topic": topic,
            "X-Shopify-Shop-Domain": "test-shop.myshopify.com",
            "Content-Type": "application/json",
        }

    return _make
