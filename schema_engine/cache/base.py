from abc import ABC, abstractmethod
from typing import Any, AsyncContextManager, Optional


class BaseBackend(ABC):
    """Key/value store plus a named lock, shared by every resolver process."""

    @abstractmethod
    async def get(self, key: str) -> Any:
        """Return the stored value, or None on a miss."""

    @abstractmethod
    async def set(self, response: Any, key: str, ttl: Optional[int] = 60) -> None:
        """Store a value; ``ttl=None`` stores it until explicitly removed."""

    @abstractmethod
    async def has(self, key: str) -> bool:
        ...

    @abstractmethod
    async def delete_startswith(self, value: str) -> None:
        """Delete every key under the ``value::`` namespace."""

    @abstractmethod
    def lock(self, key: str, timeout: float, lease: Optional[float] = None) -> AsyncContextManager[None]:
        """Hold the named lock for the duration of an ``async with`` block.

        Waits at most ``timeout`` seconds and raises ``LockTimeoutError``
        when the lock is not acquired in time. ``lease`` bounds how long a
        crashed holder can keep it, on backends that support leases.
        """

    async def close(self) -> None:
        return None
