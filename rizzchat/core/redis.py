"""Redis client lifecycle management."""

import redis.asyncio as redis
import structlog

from rizzchat.core.config import settings

logger = structlog.get_logger()

redis_client: redis.Redis | None = None  # type: ignore[type-arg]


async def init_redis() -> redis.Redis:  # type: ignore[type-arg]
    """Open the shared Redis connection used for token revocation."""
    global redis_client  # noqa: PLW0603
    redis_client = redis.from_url(settings.redis.url, decode_responses=True)
    await redis_client.ping()
    logger.info("Redis connected", url=settings.redis.url)
    return redis_client


async def close_redis() -> None:
    """Close the shared Redis connection if it is open."""
    global redis_client  # noqa: PLW0603
    if redis_client is not None:
        await redis_client.aclose()
        redis_client = None


def get_redis() -> redis.Redis:  # type: ignore[type-arg]
    """Return the active Redis client or fail loudly before first use."""
    if redis_client is None:
        raise RuntimeError("Redis client not initialized")
    return redis_client
