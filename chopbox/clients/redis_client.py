"""
Redis client wrapper.

Responsibilities:
  • Expanded-link cache — STRING keyed by expand:{hash}, value = long URL

The cache is an optimisation only: callers treat any Redis failure as a
miss and fall through to the bit.ly API.
"""
import logging
from typing import Optional

import redis.asyncio as aioredis

from chopbox.config import settings

logger = logging.getLogger(__name__)

_redis: Optional[aioredis.Redis] = None


async def init_redis() -> None:
    global _redis
    _redis = aioredis.Redis(
        host=settings.redis_host,
        port=settings.redis_port,
        decode_responses=True,
    )
    try:
        await _redis.ping()
        logger.info("Redis connected at %s:%s", settings.redis_host, settings.redis_port)
    except aioredis.RedisError as exc:
        logger.warning("Redis unavailable at startup: %s — link cache disabled until it recovers", exc)


async def close_redis() -> None:
    global _redis
    if _redis is not None:
        await _redis.aclose()
        _redis = None


def set_redis(client: Optional[aioredis.Redis]) -> None:
    """Install an already-built client (used by tests)."""
    global _redis
    _redis = client


# ─────────────────────── Expanded-link cache ──────────────────────────────

EXPAND_KEY = "expand:{hash}"


async def get_expanded_url(short_hash: str) -> Optional[str]:
    if _redis is None:
        return None
    try:
        return await _redis.get(EXPAND_KEY.format(hash=short_hash))
    except aioredis.RedisError as exc:
        logger.warning("Redis read failed for %s: %s", short_hash, exc)
        return None


async def set_expanded_url(short_hash: str, long_url: str) -> None:
    if _redis is None:
        return
    try:
        await _redis.set(
            EXPAND_KEY.format(hash=short_hash), long_url, ex=settings.expand_cache_ttl
        )
    except aioredis.RedisError as exc:
        logger.warning("Redis write failed for %s: %s", short_hash, exc)
