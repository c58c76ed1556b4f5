"""Redis connection management.

Mirrors engine.py: when REDIS_URL is configured a shared connection pool
is created; otherwise redis_pool is None and the rate limiter uses its
in-memory backend.  Redis only holds rate-limit buckets, so losing it
degrades throttling across replicas but never affects deletions.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import redis.asyncio as aioredis

from courseware.core.config import SETTINGS

logger = logging.getLogger(__name__)

if SETTINGS.redis_url:
    redis_pool: aioredis.Redis | None = aioredis.from_url(  # type: ignore[type-arg]
        SETTINGS.redis_url,
        decode_responses=True,
        max_connections=20,
    )
else:
    redis_pool = None


@asynccontextmanager
async def lifespan_redis():
    """Startup/shutdown hook for Redis; mirrors lifespan_db()."""
    if redis_pool is None:
        logger.info("No REDIS_URL configured, rate limiting is per-process")
        yield
        return

    try:
        await redis_pool.ping()  # type: ignore[misc]
        logger.info("Redis connected")
    except Exception:
        # Start anyway: the rate limiter is the only consumer and the
        # deletion endpoints still work without it.
        logger.exception("Redis connection failed on startup")
        yield
        return

    yield

    await redis_pool.aclose()
    logger.info("Redis connection pool closed")
