from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Optional

from schema_engine.cache.base import BaseBackend
from schema_engine.exceptions import CacheError
from schema_engine.logging import get_logger

logger = get_logger(__name__)


class CacheManager:
    """Front for whichever backend the process was initialised with.

    Backend failures on reads and writes surface as ``CacheError`` so callers
    can decide whether to degrade. Lock acquisition failures are raised by the
    backend itself as ``LockTimeoutError`` or ``CacheError``.
    """

    def __init__(self) -> None:
        self.backend: Optional[BaseBackend] = None

    def init(self, backend: type[BaseBackend]) -> None:
        self.backend = backend()
        logger.info("cache_initialized", backend=backend.__name__)

    def _require_backend(self) -> BaseBackend:
        if self.backend is None:
            raise ValueError("Backend not initialized")
        return self.backend

    async def has(self, key: str) -> bool:
        backend = self._require_backend()
        try:
            return await backend.has(key)
        except Exception as e:
            logger.warning("cache_has_failed", cache_key=key, error=str(e))
            raise CacheError(str(e), operation="has") from e

    async def get(self, key: str) -> Any:
        backend = self._require_backend()
        try:
            return await backend.get(key)
        except Exception as e:
            logger.warning("cache_get_failed", cache_key=key, error=str(e))
            raise CacheError(str(e), operation="get") from e

    async def set(self, key: str, value: Any, ttl: Optional[int] = 60) -> None:
        backend = self._require_backend()
        try:
            await backend.set(response=value, key=key, ttl=ttl)
        except Exception as e:
            logger.warning("cache_set_failed", cache_key=key, error=str(e))
            raise CacheError(str(e), operation="set") from e

    async def put_forever(self, key: str, value: Any) -> None:
        await self.set(key, value, ttl=None)

    @asynccontextmanager
    async def lock(self, key: str, timeout: float, lease: Optional[float] = None) -> AsyncIterator[None]:
        backend = self._require_backend()
        async with backend.lock(key, timeout=timeout, lease=lease):
            yield

    async def remove_by_prefix(self, prefix: str) -> None:
        backend = self._require_backend()
        try:
            await backend.delete_startswith(value=prefix)
        except Exception as e:
            logger.warning("cache_remove_by_prefix_failed", prefix=prefix, error=str(e))
            raise CacheError(str(e), operation="delete") from e

    async def close(self) -> None:
        if self.backend is not None:
            await self.backend.close()
