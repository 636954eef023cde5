"""Shared fixtures for the sales-donated webhook test suite."""

from __future__ import annotations

import json
from typing import Any, Callable

import httpx
import pytest
from pydantic import SecretStr

from src.config import Settings
from src.shopify.client import ShopifyGraphQLClient

WEBHOOK_SECRET = "shopify-test-secret"
METAOBJECT_ID = "123456789"


@pytest.fixture()
def settings() -> Settings:
    """Fully configured settings, independent of the process environment."""
    return Settings(
        _env_file=None,
        shopify_webhook_secret=SecretStr(WEBHOOK_SECRET),
        shopify_shop_name="test-shop",
        shopify_api_version="2025-01",
        shopify_access_token=SecretStr("shpat_test_token"),
        shopify_metaobject_sales_donated_id=METAOBJECT_ID,
    )


class FakeShopify:
    """Records GraphQL requests and answers from a queue of JSON bodies."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.responses: list[httpx.Response] = []

    def queue(self, body: Any, status_code: int = 200) -> None:
        self.responses.append(httpx.Response(status_code, json=body))

    def queue_counter(self, value: str, key: str = "sales_donated") -> None:
        self.queue(
            {
                "data": {
                    "metaobject": {
                        "handle": "sales-donated",
                        "type": "sales_donated",
                        "fields": [{"key": key, "value": value, "type": "number_integer"}],
                    }
                }
            }
        )

    def queue_update_ok(self) -> None:
        self.queue(
            {
                "data": {
                    "metaobjectUpdate": {
                        "metaobject": {"handle": "sales-donated"},
                        "userErrors": [],
                    }
                }
            }
        )

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.responses.pop(0)

    def sent_json(self, index: int) -> dict[str, Any]:
        return json.loads(self.requests[index].content)


@pytest.fixture()
def fake_shopify() -> FakeShopify:
    return FakeShopify()


@pytest.fixture()
def make_client(fake_shopify: FakeShopify) -> Callable[[], ShopifyGraphQLClient]:
    """Factory for a client whose HTTP traffic goes to fake_shopify."""

    def _make() -> ShopifyGraphQLClient:
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(fake_shopify.handler))
        return ShopifyGraphQLClient(
            "test-shop", "2025-01", "shpat_test_token", http_client=http_client
        )

    return _make
