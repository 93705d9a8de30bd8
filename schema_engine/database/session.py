from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from schema_engine.config import settings
from schema_engine.exceptions import DatabaseError
from schema_engine.logging import get_logger

logger = get_logger(__name__)


class Base(DeclarativeBase):
    """Declarative base for all engine tables."""


class DatabaseSessionManager:
    """Owns the async engine and hands out sessions for store reads."""

    def __init__(self, database_url: str, echo: bool = False) -> None:
        self._database_url = database_url
        self._echo = echo
        self._engine: Optional[AsyncEngine] = None
        self._session_factory: Optional[async_sessionmaker[AsyncSession]] = None

    async def initialize(self) -> None:
        """Create the engine and session factory."""
        try:
            self._engine = create_async_engine(self._database_url, echo=self._echo, pool_pre_ping=True)
            self._session_factory = async_sessionmaker(
                bind=self._engine,
                class_=AsyncSession,
                expire_on_commit=False,
                autoflush=False,
            )
            logger.info("database_session_manager_initialized", echo=self._echo)
        except Exception as e:
            logger.error("database_session_manager_init_failed", error=str(e), exc_info=True)
            raise DatabaseError("Failed to initialize database engine", operation="initialize") from e

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            raise RuntimeError("Database session manager not initialized")
        return self._engine

    @asynccontextmanager
    async def get_session(self) -> AsyncGenerator[AsyncSession, None]:
        """Yield a session; rolls back on error and always closes."""
        if self._session_factory is None:
            raise RuntimeError("Database session manager not initialized")

        session = self._session_factory()
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

    async def close(self) -> None:
        """Dispose of the engine and its pool."""
        if self._engine is not None:
            await self._engine.dispose()
            logger.info("database_session_manager_closed")
        self._engine = None
        self._session_factory = None


_session_manager: Optional[DatabaseSessionManager] = None


def initialize_database(database_url: Optional[str] = None, echo: Optional[bool] = None) -> DatabaseSessionManager:
    """Create the process-wide session manager (call ``initialize()`` on it afterwards)."""
    global _session_manager
    _session_manager = DatabaseSessionManager(
        database_url or settings.DATABASE_URL,
        echo=settings.DATABASE_ECHO if echo is None else echo,
    )
    return _session_manager


def get_session_manager() -> DatabaseSessionManager:
    """Return the process-wide session manager."""
    if _session_manager is None:
        raise RuntimeError("Database not initialized. Call initialize_database() first.")
    return _session_manager
