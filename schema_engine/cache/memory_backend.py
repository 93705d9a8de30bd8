import asyncio
import copy
import time
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Optional

from schema_engine.cache.base import BaseBackend
from schema_engine.exceptions import LockTimeoutError
from schema_engine.logging import get_logger

logger = get_logger(__name__)


class InMemoryBackend(BaseBackend):
    """Process-local backend for single-worker deployments and tests.

    Values are deep-copied on the way in and out so callers never share
    mutable state with the store.
    """

    def __init__(self) -> None:
        self._storage: dict[str, tuple[Any, Optional[float]]] = {}
        self._locks: dict[str, asyncio.Lock] = {}
        self._lock_users: dict[str, int] = {}

    def _expired(self, expires_at: Optional[float]) -> bool:
        return expires_at is not None and time.monotonic() >= expires_at

    async def get(self, key: str) -> Any:
        entry = self._storage.get(key)
        if entry is None:
            return None

        value, expires_at = entry
        if self._expired(expires_at):
            del self._storage[key]
            return None
        return copy.deepcopy(value)

    async def set(self, response: Any, key: str, ttl: Optional[int] = 60) -> None:
        expires_at = time.monotonic() + ttl if ttl is not None else None
        self._storage[key] = (copy.deepcopy(response), expires_at)

    async def has(self, key: str) -> bool:
        return await self.get(key) is not None

    async def delete_startswith(self, value: str) -> None:
        namespace = f"{value}::"
        for key in [k for k in self._storage if k.startswith(namespace)]:
            del self._storage[key]

    @asynccontextmanager
    async def lock(self, key: str, timeout: float, lease: Optional[float] = None) -> AsyncIterator[None]:
        named_lock = self._checkout_lock(key)
        acquire = asyncio.ensure_future(named_lock.acquire())
        try:
            done, _ = await asyncio.wait({acquire}, timeout=timeout)
        except asyncio.CancelledError:
            self._abandon(acquire, named_lock)
            self._checkin_lock(key)
            raise

        if not done:
            self._abandon(acquire, named_lock)
            self._checkin_lock(key)
            logger.warning("cache_lock_timeout", lock_key=key, timeout=timeout)
            raise LockTimeoutError(lock_key=key, timeout=timeout)

        try:
            yield
        finally:
            named_lock.release()
            self._checkin_lock(key)

    def _checkout_lock(self, key: str) -> asyncio.Lock:
        named_lock = self._locks.setdefault(key, asyncio.Lock())
        self._lock_users[key] = self._lock_users.get(key, 0) + 1
        return named_lock

    def _checkin_lock(self, key: str) -> None:
        users = self._lock_users.get(key, 0) - 1
        if users > 0:
            self._lock_users[key] = users
        else:
            self._lock_users.pop(key, None)
            self._locks.pop(key, None)

    @staticmethod
    def _abandon(acquire: asyncio.Future, named_lock: asyncio.Lock) -> None:
        # The acquire may have completed as the wait gave up; hand the lock back.
        if not acquire.done():
            acquire.cancel()
        elif not acquire.cancelled() and acquire.exception() is None:
            named_lock.release()

    async def close(self) -> None:
        self._storage.clear()
        self._locks.clear()
        self._lock_users.clear()
