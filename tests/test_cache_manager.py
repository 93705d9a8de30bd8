import asyncio
from unittest.mock import AsyncMock, patch

import pytest

from schema_engine.cache import (
    Cache,
    CacheManager,
    InMemoryBackend,
    schema_cache_key,
    schema_lock_key,
    tenant_cache_prefix,
)
from schema_engine.exceptions import CacheError, LockTimeoutError


class TestCacheManager:
    """Test cases for CacheManager."""

    def setup_method(self):
        """Setup for each test method."""
        self.cache_manager = CacheManager()

    def test_init(self):
        """Test cache manager initialization."""
        assert self.cache_manager.backend is None

        self.cache_manager.init(InMemoryBackend)

        assert isinstance(self.cache_manager.backend, InMemoryBackend)

    async def test_operations_require_backend(self):
        with pytest.raises(ValueError, match="Backend not initialized"):
            await self.cache_manager.get("key")

    async def test_put_forever_stores_without_ttl(self):
        self.cache_manager.init(InMemoryBackend)

        with patch.object(self.cache_manager.backend, "set", new_callable=AsyncMock) as mock_set:
            await self.cache_manager.put_forever("key", {"fields": []})

        mock_set.assert_called_once_with(response={"fields": []}, key="key", ttl=None)

    async def test_get_and_has(self):
        self.cache_manager.init(InMemoryBackend)

        assert await self.cache_manager.has("key") is False
        await self.cache_manager.set("key", {"value": 1})

        assert await self.cache_manager.has("key") is True
        assert await self.cache_manager.get("key") == {"value": 1}

    async def test_backend_failures_become_cache_errors(self):
        self.cache_manager.init(InMemoryBackend)
        self.cache_manager.backend.get = AsyncMock(side_effect=ConnectionError("down"))
        self.cache_manager.backend.set = AsyncMock(side_effect=ConnectionError("down"))

        with pytest.raises(CacheError) as get_error:
            await self.cache_manager.get("key")
        with pytest.raises(CacheError) as set_error:
            await self.cache_manager.put_forever("key", {})

        assert get_error.value.details["operation"] == "get"
        assert set_error.value.details["operation"] == "set"

    async def test_remove_by_prefix(self):
        self.cache_manager.init(InMemoryBackend)
        await self.cache_manager.put_forever(schema_cache_key(1, None, None, "image"), {"fields": []})
        await self.cache_manager.put_forever(schema_cache_key(1, 10, 100, "video"), {"fields": []})
        await self.cache_manager.put_forever(schema_cache_key(2, None, None, "image"), {"fields": []})

        await self.cache_manager.remove_by_prefix(tenant_cache_prefix(1))

        assert await self.cache_manager.get(schema_cache_key(1, None, None, "image")) is None
        assert await self.cache_manager.get(schema_cache_key(1, 10, 100, "video")) is None
        assert await self.cache_manager.get(schema_cache_key(2, None, None, "image")) is not None

    async def test_close(self):
        self.cache_manager.init(InMemoryBackend)
        await self.cache_manager.put_forever("key", 1)

        await self.cache_manager.close()

        assert await self.cache_manager.get("key") is None


class TestInMemoryBackend:
    """Test cases for InMemoryBackend."""

    def setup_method(self):
        self.backend = InMemoryBackend()

    async def test_get_missing(self):
        assert await self.backend.get("missing") is None

    async def test_values_are_copied(self):
        value = {"fields": [{"key": "tags"}]}
        await self.backend.set(value, "key", ttl=None)

        value["fields"].clear()
        stored = await self.backend.get("key")
        stored["fields"].append({"key": "other"})

        assert await self.backend.get("key") == {"fields": [{"key": "tags"}]}

    async def test_ttl_expiry(self):
        await self.backend.set("value", "key", ttl=0)

        assert await self.backend.get("key") is None

    async def test_delete_startswith_only_matches_namespace(self):
        await self.backend.set(1, "prefix::a", ttl=None)
        await self.backend.set(2, "prefix_other::b", ttl=None)

        await self.backend.delete_startswith("prefix")

        assert await self.backend.get("prefix::a") is None
        assert await self.backend.get("prefix_other::b") == 2

    async def test_lock_is_exclusive(self):
        order = []

        async def worker(name):
            async with self.backend.lock("build", timeout=1):
                order.append(f"{name}-in")
                await asyncio.sleep(0.01)
                order.append(f"{name}-out")

        await asyncio.gather(worker("a"), worker("b"))

        assert order == ["a-in", "a-out", "b-in", "b-out"]

    async def test_lock_timeout(self):
        async with self.backend.lock("build", timeout=1):
            with pytest.raises(LockTimeoutError) as exc_info:
                async with self.backend.lock("build", timeout=0.01):
                    pass

        assert exc_info.value.details == {"lock_key": "build", "timeout_seconds": 0.01}

    async def test_lock_released_on_error(self):
        with pytest.raises(RuntimeError):
            async with self.backend.lock("build", timeout=1):
                raise RuntimeError("boom")

        async with self.backend.lock("build", timeout=0.01):
            pass

    async def test_distinct_keys_do_not_contend(self):
        async with self.backend.lock("a", timeout=1):
            async with self.backend.lock("b", timeout=0.01):
                pass

    async def test_idle_locks_are_dropped(self):
        async with self.backend.lock("build", timeout=1):
            with pytest.raises(LockTimeoutError):
                async with self.backend.lock("build", timeout=0.01):
                    pass
            assert list(self.backend._locks) == ["build"]

        assert self.backend._locks == {}
        assert self.backend._lock_users == {}

    async def test_cancelled_waiter_does_not_keep_lock(self):
        async with self.backend.lock("build", timeout=1):
            waiter = asyncio.create_task(self._hold("build"))
            await asyncio.sleep(0.01)
            waiter.cancel()
            with pytest.raises(asyncio.CancelledError):
                await waiter

        async with self.backend.lock("build", timeout=0.01):
            pass

    async def test_abandon_releases_completed_acquire(self):
        named_lock = asyncio.Lock()
        acquire = asyncio.ensure_future(named_lock.acquire())
        await asyncio.sleep(0)
        assert named_lock.locked()

        InMemoryBackend._abandon(acquire, named_lock)

        assert not named_lock.locked()

    async def test_abandon_cancels_pending_acquire(self):
        named_lock = asyncio.Lock()
        await named_lock.acquire()
        acquire = asyncio.ensure_future(named_lock.acquire())
        await asyncio.sleep(0)

        InMemoryBackend._abandon(acquire, named_lock)
        named_lock.release()
        await asyncio.sleep(0)

        assert acquire.cancelled()
        assert not named_lock.locked()

    async def _hold(self, key):
        async with self.backend.lock(key, timeout=5):
            pass


class TestCacheKeys:
    """Test cache key construction."""

    def test_schema_cache_key(self):
        assert (
            schema_cache_key(1, None, None, "image", prefix="metadata_schema")
            == "metadata_schema::tenant:1::brand:none:category:none:asset_type:image"
        )
        assert (
            schema_cache_key(1, 10, 100, "video", prefix="metadata_schema")
            == "metadata_schema::tenant:1::brand:10:category:100:asset_type:video"
        )

    def test_schema_lock_key(self):
        assert schema_lock_key("abc") == "metadata_schema_build:abc"

    def test_tenant_prefix_does_not_match_other_tenants(self):
        key = schema_cache_key(12, None, None, "image", prefix="p")

        assert key.startswith(tenant_cache_prefix(12, prefix="p") + "::")
        assert not key.startswith(tenant_cache_prefix(1, prefix="p") + "::")


class TestGlobalCacheInstance:
    """Test cases for the global Cache instance."""

    def test_global_cache_instance_exists(self):
        assert Cache is not None
        assert isinstance(Cache, CacheManager)
