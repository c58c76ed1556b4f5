"""Rate limiting dependency for the privileged routes.

A dependency rather than middleware so each route opts in with its own
budget, and /health, /ready and /metrics are never throttled.

Keys are per user when the bearer token verifies, and per client IP
otherwise.  User ids are visible in public storage URLs, so an unverified
sub must never select a bucket: a forged token would drain the real
user's budget.

The limiter fails open: if Redis is unreachable the request proceeds and a
warning is logged.  Throttling is protection against load, and refusing
every deletion because the throttle store is down would be worse.
"""

from __future__ import annotations

import logging

import jwt as pyjwt
from fastapi import HTTPException, Request, status
from redis.exceptions import RedisError

from courseware.core.metrics import RATE_LIMIT_HITS
from courseware.db.redis import redis_pool
from courseware.services import token_service
from courseware.services.rate_limiter import (
    InMemoryRateLimiter,
    RateLimitConfig,
    RateLimiter,
    RedisRateLimiter,
)

logger = logging.getLogger(__name__)

_rate_limiter: RateLimiter
if redis_pool is not None:
    _rate_limiter = RedisRateLimiter(redis_pool)
else:
    _rate_limiter = InMemoryRateLimiter()

# Deletions: bursts of 10, then one every 6 seconds.
DELETE_LIMIT = RateLimitConfig(capacity=10, refill_rate=1 / 6)
# Checkpoints fire while a learner watches a video: more generous.
CHECKPOINT_LIMIT = RateLimitConfig(capacity=60, refill_rate=1.0)


def require_rate_limit(config: RateLimitConfig = CHECKPOINT_LIMIT):
    """Dependency factory.

    Usage:
        @router.post("/v1/delete-video",
                     dependencies=[Depends(require_rate_limit(DELETE_LIMIT))])
    """

    async def _check(request: Request) -> None:
        key = _build_key(request)
        try:
            result = await _rate_limiter.check(key, config)
        except RedisError as e:
            logger.warning("Rate limiter unavailable, allowing request: %s", e)
            return

        if not result.allowed:
            RATE_LIMIT_HITS.labels(
                key_type="user" if key.startswith("user:") else "ip"
            ).inc()
            logger.warning("Rate limit exceeded key=%s", key)
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail="Rate limit exceeded",
                headers={
                    "Retry-After": str(int(result.retry_after) + 1),
                    "X-RateLimit-Limit": str(result.limit),
                    "X-RateLimit-Remaining": "0",
                },
            )

    return _check


def _build_key(request: Request) -> str:
    auth_header = request.headers.get("authorization", "")
    if auth_header.startswith("Bearer "):
        try:
            claims = token_service.decode_access_token(auth_header[7:])
        except pyjwt.InvalidTokenError:
            claims = {}
        sub = claims.get("sub")
        if sub:
            return f"user:{sub}"

    client_ip = request.client.host if request.client else "unknown"
    return f"ip:{client_ip}"
