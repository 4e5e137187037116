import logging
from typing import Any

import redis.asyncio as redis
from redis.exceptions import RedisError

from .core.settings import settings

logger = logging.getLogger(__name__)

redis_client = redis.from_url(settings.REDIS_URL, decode_responses=True)


async def redis_health_check() -> dict[str, Any]:
    try:
        await redis_client.ping()
    except (RedisError, OSError) as e:
        logger.error(f"Redis health check failed: {e}")
        return {"status": "error", "message": str(e)}
    return {"status": "healthy"}


async def close_redis() -> None:
    await redis_client.aclose()
