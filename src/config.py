"""Sales-donated webhook configuration.

All values are supplied out-of-band through the environment (or a local
.env file). Secrets are held as SecretStr so they never show up in reprs
or log lines.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import SecretStr
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Environment-driven settings for the sales-donated webhook."""

    # Inbound webhook verification
    shopify_webhook_secret: SecretStr = SecretStr("")

    # Admin GraphQL API
    shopify_shop_name: str = ""
    shopify_api_version: str = "2025-01"
    shopify_access_token: SecretStr = SecretStr("")
    shopify_http_timeout: float = 30.0

    # Counter metaobject
    shopify_metaobject_sales_donated_id: str = ""
    sales_counter_field_key: str = "sales_donated"

    # Optional Redis lock around the read-modify-write (empty = disabled)
    sales_counter_lock_url: str = ""

    log_level: str = "INFO"

    model_config = {"env_file": ".env", "extra": "ignore"}


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return Settings()
