"""Async SQLite persistence of the key-value store (SQLModel + SQLAlchemy 2.0)."""

import time
from typing import Optional
from contextlib import asynccontextmanager

from sqlalchemy import delete
from sqlalchemy.dialects.sqlite import insert
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel, select

from core.config import Settings
from core.logging import get_logger
from models.cache import CacheEntry

logger = get_logger(__name__)


class Database:
    """Owns the async engine and the cache_entries table."""

    def __init__(self, settings: Settings):
        self.settings = settings
        self.engine = None
        self.async_session = None

    async def startup(self):
        """Create the engine and the tables."""
        try:
            self.engine = create_async_engine(
                self.settings.database_url,
                echo=self.settings.database_echo,
            )
            self.async_session = async_sessionmaker(
                bind=self.engine,
                class_=AsyncSession,
                expire_on_commit=False
            )
            async with self.engine.begin() as conn:
                await conn.run_sync(SQLModel.metadata.create_all)

            logger.info("Database initialized", url=self.settings.database_url)

        except Exception as e:
            logger.error("Database startup failed", error=str(e))
            raise

    async def shutdown(self):
        if self.engine:
            await self.engine.dispose()
            self.engine = None
            self.async_session = None
            logger.info("Database connections closed")

    @asynccontextmanager
    async def get_session(self):
        if not self.async_session:
            raise RuntimeError("Database not initialized")

        async with self.async_session() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    # ============================================================================
    # Key-value entries
    # ============================================================================

    async def get_cache_entry(self, key: str) -> Optional[str]:
        """Stored value for `key`, None when absent or unreadable."""
        try:
            async with self.get_session() as session:
                result = await session.execute(
                    select(CacheEntry.value).where(CacheEntry.key == key)
                )
                return result.scalar_one_or_none()

        except Exception as e:
            logger.error("Failed to read cache entry", key=key, error=str(e))
            return None

    async def set_cache_entry(self, key: str, value: str) -> bool:
        """Upsert `key` in a single statement."""
        now = time.time()
        stmt = insert(CacheEntry).values(key=key, value=value, updated_at=now)
        stmt = stmt.on_conflict_do_update(
            index_elements=[CacheEntry.key],
            set_={"value": value, "updated_at": now},
        )
        try:
            async with self.get_session() as session:
                await session.execute(stmt)
                await session.commit()
                return True

        except Exception as e:
            logger.error("Failed to write cache entry", key=key, error=str(e))
            return False

    async def delete_cache_entry(self, key: str) -> bool:
        """Returns whether a row was removed."""
        try:
            async with self.get_session() as session:
                result = await session.execute(delete(CacheEntry).where(CacheEntry.key == key))
                await session.commit()
                return result.rowcount > 0

        except Exception as e:
            logger.error("Failed to delete cache entry", key=key, error=str(e))
            return False
