"""Sales-donated counter held in a Shopify metaobject.

The counter is a single string-encoded integer field on a fixed metaobject.
Each order update adds the order total to it:

1. Read the metaobject and parse the counter field
2. Compute current + delta (fractional cents truncated, see parse_int)
3. Write the new value back with metaobjectUpdate

The read and the write are independent calls with no compare-and-swap, so
two concurrent updates can both read the same value and one increment is
lost (last writer wins). sales_counter_lock() narrows this when a Redis URL
is configured; it is off by default.
"""

from __future__ import annotations

import logging
import math
import re
from typing import Any

from src.config import Settings, get_settings
from src.shopify.client import ShopifyGraphQLClient
from src.shopify.counter_lock import sales_counter_lock
from src.shopify.errors import CounterError, ShopifyUserError

logger = logging.getLogger(__name__)

GET_METAOBJECT_QUERY = """
query GetMetaobjectByHandle($id: ID!) {
  metaobject(id: $id) {
    handle
    type
    fields {
      key
      value
      type
    }
  }
}
"""

UPDATE_METAOBJECT_MUTATION = """
mutation UpdateMetaobject($id: ID!, $metaobject: MetaobjectUpdateInput!) {
  metaobjectUpdate(id: $id, metaobject: $metaobject) {
    metaobject {
      handle
    }
    userErrors {
      field
      message
      code
    }
  }
}
"""

DEFAULT_FIELD_KEY = "sales_donated"

# Base-10 leading integer, as JavaScript's parseInt reads it
_LEADING_INT = re.compile(r"\s*([+-]?[0-9]+)")


def metaobject_gid(object_id: str) -> str:
    return f"gid://shopify/Metaobject/{object_id}"


def parse_int(value: str | int) -> int:
    """Parse the leading base-10 integer of value.

    Anything after the leading digits is ignored, so "50.9" -> 50 and
    "-3.7" -> -3. Prices therefore lose their cents. This truncation is
    kept deliberately; rounding would change the running total.

    Raises:
        ValueError: value has no leading digits
    """
    if isinstance(value, bool):
        raise ValueError(f"Not an integer: {value!r}")
    if isinstance(value, int):
        return value
    match = _LEADING_INT.match(str(value))
    if match is None:
        raise ValueError(f"Not an integer: {value!r}")
    return int(match.group(1))


def compute_new_value(current_value: int, delta: str | int) -> int:
    """Return floor(current_value + delta), delta parsed with parse_int."""
    return math.floor(current_value + parse_int(delta))


def _field_value(fields: list[dict[str, Any]], field_key: str) -> Any:
    for field in fields:
        if field.get("key") == field_key:
            return field.get("value")
    # Single-field counter objects are read positionally
    if len(fields) == 1:
        return fields[0].get("value")
    raise CounterError(f"Field {field_key!r} not found on metaobject")


async def fetch_counter(
    client: ShopifyGraphQLClient, object_id: str, field_key: str = DEFAULT_FIELD_KEY
) -> int:
    """Read the counter's current integer value."""
    result = await client.execute(GET_METAOBJECT_QUERY, {"id": metaobject_gid(object_id)})

    metaobject = (result.get("data") or {}).get("metaobject")
    if not metaobject:
        raise CounterError(f"Metaobject {object_id} not found")

    value = _field_value(metaobject.get("fields") or [], field_key)
    if value is None:
        raise CounterError(f"Field {field_key!r} on metaobject {object_id} has no value")
    try:
        return parse_int(value)
    except ValueError as err:
        raise CounterError(
            f"Field {field_key!r} on metaobject {object_id} is not numeric: {value!r}"
        ) from err


async def write_counter(
    client: ShopifyGraphQLClient,
    object_id: str,
    new_value: int,
    field_key: str = DEFAULT_FIELD_KEY,
) -> None:
    """Set the counter field to str(new_value)."""
    variables = {
        "id": metaobject_gid(object_id),
        "metaobject": {"fields": [{"key": field_key, "value": str(new_value)}]},
    }
    result = await client.execute(UPDATE_METAOBJECT_MUTATION, variables)

    update = (result.get("data") or {}).get("metaobjectUpdate")
    if update is None:
        raise CounterError(f"metaobjectUpdate returned no payload for {object_id}")

    user_errors = update.get("userErrors") or []
    if user_errors:
        raise ShopifyUserError(user_errors)


async def add_to_sales_counter(
    delta: str | int,
    *,
    client: ShopifyGraphQLClient | None = None,
    settings: Settings | None = None,
) -> int:
    """Add delta to the sales-donated counter and return the value written.

    Issues exactly one read and one write. delta is parsed before any remote
    call, so an unusable price never touches the counter.
    """
    settings = settings or get_settings()
    object_id = settings.shopify_metaobject_sales_donated_id
    if not object_id:
        raise CounterError("SHOPIFY_METAOBJECT_SALES_DONATED_ID is not set")
    field_key = settings.sales_counter_field_key

    delta_value = parse_int(delta)

    owns_client = client is None
    if client is None:
        client = ShopifyGraphQLClient.from_settings(settings)

    try:
        async with sales_counter_lock(settings.sales_counter_lock_url, object_id):
            current_value = await fetch_counter(client, object_id, field_key)
            new_value = compute_new_value(current_value, delta_value)
            await write_counter(client, object_id, new_value, field_key)
    finally:
        if owns_client:
            await client.aclose()

    logger.info(
        "Sales counter %s updated: %d + %d -> %d",
        object_id,
        current_value,
        delta_value,
        new_value,
    )
    return new_value
