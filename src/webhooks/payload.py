"""Webhook envelope and verified payload types.

WebhookEnvelope holds what arrived on the wire: the unparsed body plus the
three required Shopify headers. VerifiedPayload is only produced by
verify_envelope(), after the signature has been checked, and exposes typed
accessors for the few fields this service reads.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Mapping

from src.webhooks.verification import verify_shopify

SIGNATURE_HEADER = "x-shopify-hmac-sha256"
TOPIC_HEADER = "x-shopify-topic"
SHOP_DOMAIN_HEADER = "x-shopify-shop-domain"

REQUIRED_HEADERS = (SIGNATURE_HEADER, TOPIC_HEADER, SHOP_DOMAIN_HEADER)

ORDERS_UPDATED_TOPIC = "orders/updated"


class PayloadError(ValueError):
    """Verified body is not a JSON object, or lacks a usable field."""


def read_required_headers(headers: Mapping[str, str]) -> tuple[str, str, str] | None:
    """Return (signature, topic, shop_domain), or None if any is missing or empty."""
    lowered = {k.lower(): v for k, v in headers.items()}
    values = tuple(lowered.get(name) or "" for name in REQUIRED_HEADERS)
    if not all(values):
        return None
    return values  # type: ignore[return-value]


@dataclass(frozen=True)
class WebhookEnvelope:
    """Unverified webhook as received."""

    raw_body: bytes
    signature: str
    topic: str
    shop_domain: str


@dataclass(frozen=True)
class VerifiedPayload:
    """Signature-checked webhook with its parsed JSON body."""

    topic: str
    shop_domain: str
    data: Mapping[str, Any]

    @property
    def current_total_price(self) -> str:
        """Order total as the string Shopify sends (e.g. "25.00")."""
        value = self.data.get("current_total_price")
        # bool is an int subclass; reject it explicitly
        if isinstance(value, bool) or value is None:
            raise PayloadError("current_total_price missing from payload")
        if isinstance(value, (int, float)):
            return str(value)
        if isinstance(value, str):
            return value
        raise PayloadError(
            f"current_total_price has unsupported type {type(value).__name__}"
        )

    @property
    def order_id(self) -> str:
        value = self.data.get("id")
        return "" if value is None else str(value)

    @property
    def currency(self) -> str:
        value = self.data.get("currency")
        return "" if value is None else str(value)


def verify_envelope(envelope: WebhookEnvelope, secret: bytes | str) -> VerifiedPayload | None:
    """Verify the envelope's signature and parse its body.

    Returns:
        VerifiedPayload, or None if the signature does not verify

    Raises:
        PayloadError: signature is valid but the body is not a JSON object
    """
    if not verify_shopify(envelope.raw_body, envelope.signature, secret):
        return None

    try:
        data = json.loads(envelope.raw_body)
    except (json.JSONDecodeError, UnicodeDecodeError) as err:
        raise PayloadError("Webhook body is not valid JSON") from err

    if not isinstance(data, dict):
        raise PayloadError(f"Webhook body is a JSON {type(data).__name__}, expected an object")

    return VerifiedPayload(
        topic=envelope.topic,
        shop_domain=envelope.shop_domain,
        data=MappingProxyType(data),
    )
