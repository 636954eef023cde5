"""Shopify GraphQL Admin API client.

POSTs ``{query, variables}`` documents to the shop's Admin GraphQL endpoint
with the X-Shopify-Access-Token header. Requests are not retried; a failed
call surfaces to the webhook caller, and Shopify's own redelivery recovers.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from src.config import Settings
from src.shopify.errors import ShopifyError, ShopifyGraphQLError, ShopifyHTTPError

logger = logging.getLogger(__name__)

_ERROR_BODY_PREVIEW = 200


class ShopifyGraphQLClient:
    """Async client for one shop's Admin GraphQL endpoint."""

    def __init__(
        self,
        shop_name: str,
        api_version: str,
        access_token: str,
        *,
        timeout: float = 30.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._endpoint = (
            f"https://{shop_name}.myshopify.com/admin/api/{api_version}/graphql.json"
        )
        self._access_token = access_token
        self._owns_http = http_client is None
        self._http = http_client or httpx.AsyncClient(timeout=timeout)

    @classmethod
    def from_settings(
        cls, settings: Settings, http_client: httpx.AsyncClient | None = None
    ) -> ShopifyGraphQLClient:
        if not settings.shopify_shop_name:
            raise ShopifyError("SHOPIFY_SHOP_NAME is not set")
        access_token = settings.shopify_access_token.get_secret_value()
        if not access_token:
            raise ShopifyError("SHOPIFY_ACCESS_TOKEN is not set")
        return cls(
            settings.shopify_shop_name,
            settings.shopify_api_version,
            access_token,
            timeout=settings.shopify_http_timeout,
            http_client=http_client,
        )

    @property
    def endpoint(self) -> str:
        return self._endpoint

    async def execute(self, query: str, variables: dict[str, Any] | None = None) -> dict[str, Any]:
        """Execute a GraphQL document and return the decoded JSON response.

        Raises:
            ShopifyHTTPError: non-2xx status
            ShopifyGraphQLError: top-level ``errors`` in the response body
            ShopifyError: response body is not a JSON object
            httpx.TransportError: connection or timeout failure
        """
        logger.debug("shopify_graphql: starting request to %s", self._endpoint)

        response = await self._http.post(
            self._endpoint,
            json={"query": query, "variables": variables or {}},
            headers={
                "X-Shopify-Access-Token": self._access_token,
                "Content-Type": "application/json",
            },
        )

        if not response.is_success:
            logger.error(
                "shopify_graphql: HTTP %d from %s", response.status_code, self._endpoint
            )
            raise ShopifyHTTPError(response.status_code, response.text[:_ERROR_BODY_PREVIEW])

        try:
            body = response.json()
        except ValueError as err:
            raise ShopifyError("Shopify returned a non-JSON response") from err
        if not isinstance(body, dict):
            raise ShopifyError("Shopify returned a non-object JSON response")

        errors = body.get("errors")
        if isinstance(errors, str):
            errors = [{"message": errors}]
        if errors:
            logger.error("shopify_graphql: %d GraphQL error(s) from %s", len(errors), self._endpoint)
            raise ShopifyGraphQLError(errors)

        logger.debug("shopify_graphql: request to %s completed", self._endpoint)
        return body

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    async def __aenter__(self) -> ShopifyGraphQLClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()
