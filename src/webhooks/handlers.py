"""Webhook HTTP handler: Shopify order updates -> sales-donated counter.

Request flow:
1. Reject anything but POST (405) before the body is touched
2. Require the signature, topic and shop-domain headers (400)
3. Read the raw body as bytes (no framework JSON parsing)
4. Verify the HMAC signature over those bytes (401)
5. Parse the payload and add current_total_price to the counter
6. 200 on success, 500 on any other failure

Security contract:
- Response bodies are fixed plain-text phrases; no error details leak
- The secret and the computed HMAC are never logged
- Failures are not retried here; Shopify redelivers on non-2xx
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse

from src.config import Settings
from src.shopify.sales_counter import add_to_sales_counter
from src.webhooks.intake import capture_raw_body
from src.webhooks.payload import (
    ORDERS_UPDATED_TOPIC,
    WebhookEnvelope,
    read_required_headers,
    verify_envelope,
)

logger = logging.getLogger(__name__)

SALES_DONATED_PATH = "/api/shopify/webhooks/order/updateSalesDonated"


def _log_webhook(topic: str, shop: str, status: str, body_len: int = 0) -> None:
    """Audit log for webhook activity."""
    logger.info(
        "WEBHOOK_AUDIT topic=%s shop=%s status=%s bytes=%d",
        topic or "unknown",
        shop or "unknown",
        status,
        body_len,
    )


async def handle_sales_donated(request: Request) -> PlainTextResponse:
    """Process one orders webhook against the sales-donated counter."""
    if request.method != "POST":
        return PlainTextResponse(
            "Method Not Allowed", status_code=405, headers={"Allow": "POST"}
        )

    settings: Settings = request.app.state.settings
    topic, shop, body_len = "", "", 0

    try:
        required = read_required_headers(request.headers)
        if required is None:
            logger.error("Missing required Shopify headers")
            _log_webhook(
                request.headers.get("x-shopify-topic", ""),
                request.headers.get("x-shopify-shop-domain", ""),
                "missing_headers",
            )
            return PlainTextResponse("Missing required headers", status_code=400)

        signature, topic, shop = required
        raw_body = await capture_raw_body(request.stream())
        body_len = len(raw_body)

        envelope = WebhookEnvelope(
            raw_body=raw_body, signature=signature, topic=topic, shop_domain=shop
        )
        payload = verify_envelope(
            envelope, settings.shopify_webhook_secret.get_secret_value()
        )
        if payload is None:
            logger.error(
                "Webhook verification failed (topic=%s shop=%s bytes=%d signature_len=%d)",
                topic,
                shop,
                body_len,
                len(signature),
            )
            _log_webhook(topic, shop, "signature_failed", body_len)
            return PlainTextResponse("Webhook verification failed", status_code=401)

        if payload.topic != ORDERS_UPDATED_TOPIC:
            logger.warning("Unexpected topic %s on %s; processing anyway", topic, SALES_DONATED_PATH)

        logger.info(
            "Webhook verified: topic=%s shop=%s order=%s total=%s %s",
            topic,
            shop,
            payload.order_id,
            payload.current_total_price,
            payload.currency,
        )

        await add_to_sales_counter(
            payload.current_total_price,
            client=request.app.state.shopify_client,
            settings=settings,
        )
    except Exception:
        logger.exception("Error processing webhook: topic=%s shop=%s", topic, shop)
        _log_webhook(topic, shop, "error", body_len)
        return PlainTextResponse("Internal Server Error", status_code=500)

    _log_webhook(topic, shop, "processed", body_len)
    return PlainTextResponse("Webhook received and processed", status_code=200)


def register_webhook_routes(app: FastAPI) -> None:
    """Register the sales-donated webhook route on the FastAPI app.

    Registered as a plain route with no method list, so every method,
    including ones FastAPI does not enumerate (TRACE, PROPFIND, ...), reaches
    the handler and gets the same plain-text 405.
    """
    app.router.add_route(SALES_DONATED_PATH, handle_sales_donated, include_in_schema=False)

    logger.info("Webhook route registered: %s", SALES_DONATED_PATH)
