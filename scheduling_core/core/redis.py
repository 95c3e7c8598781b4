from typing import Optional

import redis.asyncio as redis
import structlog

from scheduling_core.core.config import settings
from scheduling_core.core.exceptions import StoreError

logger = structlog.get_logger(__name__)

# Delete the key only while it still holds our token.
_RELEASE_SCRIPT = """
if redis.call("get", KEYS[1]) == ARGV[1] then
    return redis.call("del", KEYS[1])
else
    return 0
end
"""


class RedisClient:
    """Redis client used for cross-process slot locks."""

    def __init__(self, url: Optional[str] = None):
        self.url = url or settings.REDIS_URL
        self.redis_pool = None

    async def init_redis(self):
        """Initialize Redis connection pool."""
        if not self.url:
            raise StoreError("REDIS_URL is not configured")
        try:
            self.redis_pool = redis.ConnectionPool.from_url(
                self.url,
                decode_responses=True,
                retry_on_timeout=True,
                socket_keepalive=True,
            )

            async with redis.Redis(connection_pool=self.redis_pool) as r:
                await r.ping()
                logger.info("Redis connection established")

        except redis.RedisError as e:
            logger.error("Failed to connect to Redis", exc_info=e)
            raise StoreError("Failed to connect to Redis") from e

    async def get_redis(self) -> redis.Redis:
        """Get Redis client instance."""
        if not self.redis_pool:
            await self.init_redis()
        return redis.Redis(connection_pool=self.redis_pool)

    async def acquire_lock(self, key: str, token: str, expire: int) -> bool:
        """Set ``key`` to ``token`` only if it is free. Returns True on success."""
        try:
            client = await self.get_redis()
            return bool(await client.set(key, token, nx=True, ex=expire))
        except redis.RedisError as e:
            logger.error("Redis lock acquire error", key=key, exc_info=e)
            raise StoreError("Failed to acquire slot lock") from e

    async def release_lock(self, key: str, token: str) -> bool:
        """Release ``key`` if we still own it."""
        try:
            client = await self.get_redis()
            return bool(await client.eval(_RELEASE_SCRIPT, 1, key, token))
        except redis.RedisError as e:
            # The lock expires on its own; a failed release only delays the next booker.
            logger.error("Redis lock release error", key=key, exc_info=e)
            return False

    async def close(self):
        if self.redis_pool:
            await self.redis_pool.disconnect()
            self.redis_pool = None
