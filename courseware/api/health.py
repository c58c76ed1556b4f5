"""Liveness and readiness probes.

/health answers "is the process alive" and reports each backing service;
it returns 200 even when degraded so the orchestrator does not restart a
process that is merely waiting on its database.

/ready answers "should traffic come here".  The database is the only hard
dependency: without it no deletion can run.  Redis only backs the rate
limiter (which fails open) and storage failures surface per request.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Response, status
from redis.exceptions import RedisError
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from courseware.core.config import SETTINGS
from courseware.db.engine import engine
from courseware.db.redis import redis_pool

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


async def _check_database() -> str:
    if engine is None:
        return "not_configured"
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as e:
        logger.warning("Database health check failed: %s", e)
        return "degraded"
    return "ok"


async def _check_redis() -> str:
    if redis_pool is None:
        return "not_configured"
    try:
        await redis_pool.ping()  # type: ignore[misc]
    except (RedisError, OSError) as e:
        logger.warning("Redis health check failed: %s", e)
        return "degraded"
    return "ok"


@router.get("/health")
async def health() -> dict:
    checks = {
        "database": await _check_database(),
        "redis": await _check_redis(),
        "storage": "configured" if SETTINGS.storage_configured else "in_memory",
    }
    overall = "degraded" if "degraded" in checks.values() else "ok"
    return {"status": overall, "checks": checks}


@router.get("/ready")
async def ready() -> Response:
    if await _check_database() == "degraded":
        return Response(status_code=status.HTTP_503_SERVICE_UNAVAILABLE)
    return Response(status_code=status.HTTP_200_OK)
