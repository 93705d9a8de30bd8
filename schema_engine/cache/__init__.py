from .base import BaseBackend
from .cache_manager import CacheManager
from .keys import schema_cache_key, schema_lock_key, tenant_cache_prefix
from .memory_backend import InMemoryBackend
from .redis_backend import RedisBackend

Cache = CacheManager()

__all__ = [
    "BaseBackend",
    "Cache",
    "CacheManager",
    "InMemoryBackend",
    "RedisBackend",
    "schema_cache_key",
    "schema_lock_key",
    "tenant_cache_prefix",
]
