"""SQLite-backed key-value model for persisted strings.

The store carries no TTL of its own; freshness is decided by the caller.
"""

import time
from sqlmodel import SQLModel, Field


class CacheEntry(SQLModel, table=True):
    """Generic key-value string entry."""

    __tablename__ = "cache_entries"

    key: str = Field(primary_key=True, max_length=512)
    value: str = Field(max_length=10000000)  # JSON serialized
    updated_at: float = Field(default_factory=time.time)
