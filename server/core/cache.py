"""Key-value string store with SQLite or in-memory backend.

The store is deliberately TTL-free: entries live until overwritten or deleted.
Expiry policy belongs to whoever reads the value (see services.acquisition).
"""

from typing import Dict, Optional, TYPE_CHECKING

from core.config import Settings
from core.logging import get_logger, log_cache_operation

if TYPE_CHECKING:
    from core.database import Database

logger = get_logger(__name__)


class CacheService:
    """Async key-value store.

    Backend selection:
    - SQLite: when CACHE_BACKEND=sqlite and a database is available
    - Memory: otherwise (process lifetime only)
    """

    def __init__(self, settings: Settings, database: Optional["Database"] = None):
        self.settings = settings
        self.database = database
        self.memory_cache: Dict[str, str] = {}
        self.use_sqlite = settings.cache_backend == "sqlite" and database is not None

    async def startup(self):
        """Initialize the backend."""
        if self.use_sqlite:
            try:
                await self.database.startup()
                logger.info("Using SQLite key-value store")
            except Exception as e:
                logger.warning("SQLite store unavailable, falling back to memory", error=str(e))
                self.use_sqlite = False
        else:
            logger.info("Using in-memory key-value store", backend=self.settings.cache_backend)

    async def shutdown(self):
        """Close backend connections."""
        if self.use_sqlite and self.database:
            await self.database.shutdown()
        self.memory_cache.clear()

    async def get(self, key: str) -> Optional[str]:
        """Get raw string value, None on miss or backend failure."""
        try:
            if self.use_sqlite:
                value = await self.database.get_cache_entry(key)
            else:
                value = self.memory_cache.get(key)
            log_cache_operation(logger, "get", key, hit=value is not None)
            return value

        except Exception as e:
            logger.error("Cache get failed", key=key, error=str(e))
            return None

    async def set(self, key: str, value: str) -> bool:
        """Store a raw string value."""
        try:
            if self.use_sqlite:
                stored = await self.database.set_cache_entry(key, value)
            else:
                self.memory_cache[key] = value
                stored = True
            log_cache_operation(logger, "set", key, size=len(value))
            return stored

        except Exception as e:
            logger.error("Cache set failed", key=key, error=str(e))
            return False

    async def delete(self, key: str) -> bool:
        """Delete a stored value."""
        try:
            if self.use_sqlite:
                deleted = await self.database.delete_cache_entry(key)
            else:
                deleted = self.memory_cache.pop(key, None) is not None
            log_cache_operation(logger, "delete", key, deleted=deleted)
            return deleted

        except Exception as e:
            logger.error("Cache delete failed", key=key, error=str(e))
            return False
