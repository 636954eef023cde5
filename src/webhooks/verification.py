"""Webhook signature verification: constant-time HMAC-SHA256 over the raw body.

Security contract:
- The HMAC is computed over the exact bytes received, never a re-serialized form
- The X-Shopify-Hmac-SHA256 header is base64-decoded and compared as raw digest
  bytes with hmac.compare_digest() (constant-time, no timing attacks)
- A header that is not valid base64, or decodes to the wrong digest length, is
  rejected at the format stage; content is only ever compared in constant time
- Missing secret -> verification always fails (fail-closed)
- Never raises; every failure is a plain False
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import logging

from src.config import get_settings

logger = logging.getLogger(__name__)

_DIGEST = hashlib.sha256
_DIGEST_SIZE = _DIGEST().digest_size


def _as_bytes(secret: bytes | str) -> bytes:
    if isinstance(secret, str):
        return secret.encode("utf-8")
    return secret


def compute_signature(raw_body: bytes, secret: bytes | str) -> str:
    """Return the base64-encoded HMAC-SHA256 of raw_body, as Shopify sends it."""
    digest = hmac.new(_as_bytes(secret), raw_body, _DIGEST).digest()
    return base64.b64encode(digest).decode("ascii")


def _decode_signature(provided_signature: str) -> bytes | None:
    try:
        decoded = base64.b64decode(provided_signature, validate=True)
    except (binascii.Error, ValueError):
        return None
    if len(decoded) != _DIGEST_SIZE:
        return None
    return decoded


def verify(raw_body: bytes, provided_signature: str | None, secret: bytes | str) -> bool:
    """Verify a webhook HMAC-SHA256 signature.

    Args:
        raw_body: Request body exactly as received
        provided_signature: Value of the X-Shopify-Hmac-SHA256 header (base64)
        secret: Shared webhook secret

    Returns:
        True if signature is valid
    """
    if not secret:
        return False
    if not provided_signature:
        return False

    provided = _decode_signature(provided_signature)
    if provided is None:
        return False

    computed = hmac.new(_as_bytes(secret), raw_body, _DIGEST).digest()
    return hmac.compare_digest(computed, provided)


def verify_shopify(
    raw_body: bytes, provided_signature: str | None, secret: bytes | str | None = None
) -> bool:
    """Verify a Shopify webhook against the configured secret.

    ``secret`` overrides SHOPIFY_WEBHOOK_SECRET when given.
    """
    if secret is None:
        secret = get_settings().shopify_webhook_secret.get_secret_value()
    if not secret:
        logger.warning("SHOPIFY_WEBHOOK_SECRET not set; rejecting webhook")
        return False
    return verify(raw_body, provided_signature, secret)
