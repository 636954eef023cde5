"""Optional Redis lock around the sales counter read-modify-write.

The counter update is two independent remote calls (read, then write) with
no version check, so concurrent webhooks can lose increments. When
SALES_COUNTER_LOCK_URL is set, updates from every process sharing that Redis
are serialized per metaobject.

Contract:
- Lock URL empty -> no lock, update runs exactly as without this module
- Key pattern: lock:sales_counter:{object_id}
- Redis unreachable -> fail open (update proceeds unlocked, warning logged)
- Lock held elsewhere past the blocking timeout -> CounterLockError (the
  webhook returns 500 and Shopify redelivers)
- Release or disconnect failures after the update -> logged, never raised
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import redis.asyncio as aioredis
from redis.asyncio.lock import Lock
from redis.exceptions import LockError, RedisError

from src.shopify.errors import CounterLockError

logger = logging.getLogger(__name__)

_KEY_PREFIX = "lock:sales_counter"

# Lock auto-expires if the holder dies mid-update
_LOCK_TIMEOUT_SECONDS = 30
_BLOCKING_TIMEOUT_SECONDS = 10


def _get_redis(redis_url: str) -> aioredis.Redis:
    return aioredis.from_url(redis_url)


async def _release(lock: Lock, name: str) -> None:
    # The counter write already happened; a failed release must not fail it
    try:
        await lock.release()
    except LockError:
        logger.warning("Counter lock %s expired before release", name)
    except (RedisError, OSError):
        logger.warning("Failed to release counter lock %s", name, exc_info=True)


async def _close(client: aioredis.Redis) -> None:
    try:
        await client.aclose()
    except (RedisError, OSError):
        logger.warning("Failed to close Redis client for counter lock", exc_info=True)


@asynccontextmanager
async def sales_counter_lock(redis_url: str, object_id: str) -> AsyncIterator[None]:
    """Hold the per-counter lock for the duration of the block."""
    if not redis_url:
        yield
        return

    name = f"{_KEY_PREFIX}:{object_id}"
    client = None
    lock = None
    try:
        client = _get_redis(redis_url)
        candidate = client.lock(
            name,
            timeout=_LOCK_TIMEOUT_SECONDS,
            blocking_timeout=_BLOCKING_TIMEOUT_SECONDS,
        )
        acquired = await candidate.acquire()
    except (RedisError, OSError):
        logger.warning(
            "Redis unavailable for counter lock; updating %s unlocked",
            object_id,
            exc_info=True,
        )
        acquired = None

    if acquired is False:
        await _close(client)
        raise CounterLockError(f"Timed out waiting for {name}")
    if acquired:
        lock = candidate

    try:
        yield
    finally:
        try:
            if lock is not None:
                await _release(lock, name)
        finally:
            if client is not None:
                await _close(client)
