"""Shopify remote-call errors.

HTTP status failures are kept apart from application-level errors that
arrive inside a 200 response (top-level ``errors`` or mutation
``userErrors``).
"""

from __future__ import annotations

from typing import Any


class ShopifyError(Exception):
    """Base class for Shopify remote-call failures."""


class ShopifyHTTPError(ShopifyError):
    """Admin API answered with a non-2xx status."""

    def __init__(self, status_code: int, message: str = "") -> None:
        self.status_code = status_code
        super().__init__(f"Shopify HTTP error {status_code}: {message}".rstrip(": "))


class ShopifyGraphQLError(ShopifyError):
    """Response body carried a non-empty top-level ``errors`` list."""

    def __init__(self, errors: list[dict[str, Any]]) -> None:
        self.errors = errors
        messages = "; ".join(
            str(e.get("message", e)) if isinstance(e, dict) else str(e) for e in errors
        )
        super().__init__(f"Shopify GraphQL errors: {messages}")


class ShopifyUserError(ShopifyError):
    """Mutation returned ``userErrors``."""

    def __init__(self, user_errors: list[dict[str, Any]]) -> None:
        self.user_errors = user_errors
        messages = "; ".join(
            f"{e.get('field')}: {e.get('message')} ({e.get('code')})" for e in user_errors
        )
        super().__init__(f"Shopify userErrors: {messages}")


class CounterError(ShopifyError):
    """Counter metaobject or field missing, or its value is not an integer."""


class CounterLockError(ShopifyError):
    """Timed out waiting for the sales counter lock."""
