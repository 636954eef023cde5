"""FastAPI application for the sales-donated webhook.

Run with ``sales-donated-webhook`` (or ``uvicorn src.app:app``).
"""

from __future__ import annotations

import logging
import os

import uvicorn
from fastapi import FastAPI

from src.config import Settings, get_settings
from src.logging_config import configure_logging
from src.shopify.client import ShopifyGraphQLClient
from src.webhooks.handlers import register_webhook_routes

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    shopify_client: ShopifyGraphQLClient | None = None,
) -> FastAPI:
    """Build the app.

    When ``shopify_client`` is None each request opens (and closes) its own
    client from settings.
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Sales Donated Webhook",
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.settings = settings
    app.state.shopify_client = shopify_client

    register_webhook_routes(app)
    return app


app = create_app()


def main() -> None:
    host = os.environ.get("HOST", "0.0.0.0")
    port = int(os.environ.get("PORT", "8000"))
    logger.info("Starting sales-donated webhook on %s:%d", host, port)
    uvicorn.run(app, host=host, port=port, log_config=None)


if __name__ == "__main__":
    main()
