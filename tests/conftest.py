from typing import AsyncGenerator, Optional

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession

from schema_engine.cache import CacheManager, InMemoryBackend
from schema_engine.config import Environment, LogLevel, Settings
from schema_engine.database import Base, DatabaseSessionManager
from schema_engine.services import MetadataSchemaResolver
from tests.fakes import InMemoryFieldCatalog, InMemoryOptionCatalog, InMemoryVisibilityStore


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """Create test settings."""
    return Settings(
        ENVIRONMENT=Environment.TESTING,
        DATABASE_URL="sqlite+aiosqlite:///:memory:",
        DEBUG=True,
        LOG_LEVEL=LogLevel.DEBUG,
        LOG_FORMAT="text",
        CACHE_ENABLED=False,
    )


@pytest.fixture
def cache_manager() -> CacheManager:
    """Cache manager backed by a fresh in-memory store."""
    manager = CacheManager()
    manager.init(InMemoryBackend)
    return manager


@pytest.fixture
def build_resolver(cache_manager: CacheManager):
    """Factory for a schema resolver over in-memory stores."""

    def _build(
        fields,
        visibility_rows=(),
        options=(),
        option_rows=(),
        cache: Optional[CacheManager] = None,
        lock_timeout: float = 5.0,
        delay: float = 0.0,
    ) -> MetadataSchemaResolver:
        return MetadataSchemaResolver(
            field_catalog=InMemoryFieldCatalog(fields, delay=delay),
            option_catalog=InMemoryOptionCatalog(options),
            visibility_store=InMemoryVisibilityStore(visibility_rows, option_rows),
            cache=cache or cache_manager,
            lock_timeout=lock_timeout,
        )

    return _build


@pytest_asyncio.fixture
async def session_manager() -> AsyncGenerator[DatabaseSessionManager, None]:
    """In-memory SQLite session manager with every table created."""
    manager = DatabaseSessionManager("sqlite+aiosqlite:///:memory:")
    await manager.initialize()

    async with manager.engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield manager
    await manager.close()


@pytest_asyncio.fixture
async def db_session(session_manager: DatabaseSessionManager) -> AsyncGenerator[AsyncSession, None]:
    async with session_manager.get_session() as session:
        yield session
