import json
import pickle
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Optional

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from schema_engine.cache.base import BaseBackend
from schema_engine.config import settings
from schema_engine.exceptions import CacheError, LockTimeoutError
from schema_engine.logging import get_logger

logger = get_logger(__name__)


class RedisBackend(BaseBackend):
    """Redis-backed store shared by every resolver process.

    The named lock is a redis-py ``Lock``: a SET NX key with a lease, so a
    crashed holder releases it after ``lease`` seconds.
    """

    def __init__(self) -> None:
        self.redis: Optional[aioredis.Redis] = None
        self._connection_pool: Optional[aioredis.ConnectionPool] = None

    async def _get_redis(self) -> aioredis.Redis:
        if not settings.CACHE_ENABLED:
            raise RuntimeError("Cache is disabled in configuration")

        if self.redis is None:
            try:
                self._connection_pool = aioredis.ConnectionPool.from_url(
                    settings.REDIS_URL,
                    max_connections=settings.CACHE_MAX_CONNECTIONS,
                    retry_on_timeout=settings.CACHE_RETRY_ON_TIMEOUT,
                )
                self.redis = aioredis.Redis(connection_pool=self._connection_pool)
                await self.redis.ping()
                logger.info("redis_connection_established", redis_url=settings.REDIS_URL)
            except Exception as e:
                logger.error("redis_connection_failed", error=str(e))
                self.redis = None
                self._connection_pool = None
                raise

        return self.redis

    async def get(self, key: str) -> Any:
        client = await self._get_redis()
        result = await client.get(key)
        if not result:
            return None

        try:
            return json.loads(result.decode("utf8"))
        except (UnicodeDecodeError, json.JSONDecodeError):
            return pickle.loads(result)

    async def set(self, response: Any, key: str, ttl: Optional[int] = 60) -> None:
        client = await self._get_redis()
        try:
            value = json.dumps(response)
        except TypeError:
            value = pickle.dumps(response)

        # ex=None keeps the key until it is explicitly removed
        await client.set(name=key, value=value, ex=ttl)

    async def has(self, key: str) -> bool:
        client = await self._get_redis()
        return bool(await client.exists(key))

    async def delete_startswith(self, value: str) -> None:
        client = await self._get_redis()
        async for key in client.scan_iter(f"{value}::*"):
            await client.delete(key)

    @asynccontextmanager
    async def lock(self, key: str, timeout: float, lease: Optional[float] = None) -> AsyncIterator[None]:
        try:
            client = await self._get_redis()
            redis_lock = client.lock(key, timeout=lease, sleep=0.05, blocking=True, blocking_timeout=timeout)
            acquired = await redis_lock.acquire()
        except Exception as e:
            logger.error("cache_lock_backend_error", lock_key=key, error=str(e))
            raise CacheError(f"Could not acquire lock: {e}", operation="lock") from e

        if not acquired:
            logger.warning("cache_lock_timeout", lock_key=key, timeout=timeout)
            raise LockTimeoutError(lock_key=key, timeout=timeout)

        try:
            yield
        finally:
            try:
                await redis_lock.release()
            except RedisError as e:
                # Lease expired or the connection dropped; the key expires on its own.
                logger.warning("cache_lock_release_failed", lock_key=key, error=str(e))

    async def close(self) -> None:
        if self.redis is not None:
            await self.redis.aclose()
            self.redis = None
        if self._connection_pool is not None:
            await self._connection_pool.aclose()
            self._connection_pool = None
