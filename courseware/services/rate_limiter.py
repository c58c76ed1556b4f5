"""Token-bucket rate limiting for the privileged endpoints.

Each deletion fans out into a dozen data-layer round trips and storage
calls, so a client hammering delete-course costs far more than its request
count suggests.  A token bucket allows short bursts (a teacher clearing a
few drafts) while holding the sustained rate down.

The bucket is two numbers per key: tokens left and the time of the last
refill.  On each check the bucket is topped up by elapsed * refill_rate
(capped at capacity) and one token is taken if available.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@dataclass(frozen=True, slots=True)
class RateLimitResult:
    """Outcome of one check.

    retry_after is the number of seconds until the next token (0 when allowed).
    """

    allowed: bool
    remaining: int
    limit: int
    retry_after: float


@dataclass(frozen=True, slots=True)
class RateLimitConfig:
    """capacity is the burst size, refill_rate the tokens added per second."""

    capacity: int = 30
    refill_rate: float = 0.5


@runtime_checkable
class RateLimiter(Protocol):
    async def check(self, key: str, config: RateLimitConfig) -> RateLimitResult: ...
    async def reset(self, key: str) -> None: ...


class InMemoryRateLimiter:
    """Per-process buckets.  Each API instance counts separately."""

    def __init__(self) -> None:
        # key -> (tokens_remaining, last_refill_timestamp)
        self._buckets: dict[str, tuple[float, float]] = {}

    def clear(self) -> None:
        self._buckets.clear()

    async def check(self, key: str, config: RateLimitConfig) -> RateLimitResult:
        now = time.monotonic()
        tokens, last_refill = self._buckets.get(key, (float(config.capacity), now))

        tokens = min(config.capacity, tokens + (now - last_refill) * config.refill_rate)

        if tokens >= 1:
            tokens -= 1
            self._buckets[key] = (tokens, now)
            return RateLimitResult(
                allowed=True,
                remaining=int(tokens),
                limit=config.capacity,
                retry_after=0,
            )

        self._buckets[key] = (tokens, now)
        return RateLimitResult(
            allowed=False,
            remaining=0,
            limit=config.capacity,
            retry_after=(1 - tokens) / config.refill_rate,
        )

    async def reset(self, key: str) -> None:
        self._buckets.pop(key, None)


class RedisRateLimiter:
    """Buckets shared by all API instances.

    The read-refill-take-write sequence runs as one Lua script, which Redis
    executes atomically, so concurrent requests cannot spend the same token.
    """

    # KEYS[1] = bucket key
    # ARGV = capacity, refill_rate, now (seconds)
    # Returns {allowed (0/1), remaining, retry_after_ms}
    _LUA_SCRIPT = """
    local key = KEYS[1]
    local capacity = tonumber(ARGV[1])
    local refill_rate = tonumber(ARGV[2])
    local now = tonumber(ARGV[3])
    local ttl = math.ceil(capacity / refill_rate) + 60

    local bucket = redis.call('HMGET', key, 'tokens', 'last_refill')
    local tokens = tonumber(bucket[1])
    local last_refill = tonumber(bucket[2])

    if tokens == nil then
        tokens = capacity
        last_refill = now
    end

    tokens = math.min(capacity, tokens + (now - last_refill) * refill_rate)

    if tokens >= 1 then
        tokens = tokens - 1
        redis.call('HSET', key, 'tokens', tokens, 'last_refill', now)
        redis.call('EXPIRE', key, ttl)
        return {1, math.floor(tokens), 0}
    end

    redis.call('HSET', key, 'tokens', tokens, 'last_refill', now)
    redis.call('EXPIRE', key, ttl)
    return {0, 0, math.ceil((1 - tokens) / refill_rate * 1000)}
    """

    def __init__(self, redis_client) -> None:
        self._redis = redis_client
        self._script = None

    def _get_script(self):
        if self._script is None:
            self._script = self._redis.register_script(self._LUA_SCRIPT)
        return self._script

    async def check(self, key: str, config: RateLimitConfig) -> RateLimitResult:
        script = self._get_script()
        allowed, remaining, retry_after_ms = await script(
            keys=[f"ratelimit:{key}"],
            args=[config.capacity, config.refill_rate, time.time()],
        )
        return RateLimitResult(
            allowed=bool(allowed),
            remaining=int(remaining),
            limit=config.capacity,
            retry_after=retry_after_ms / 1000,
        )

    async def reset(self, key: str) -> None:
        await self._redis.delete(f"ratelimit:{key}")
