"""Project acquisition: static snapshot, live Baserow call, or time-boxed cache.

The strategy is chosen from settings once per call and never mixed:

    static_mode            -> fetch_static()
    cache_enabled          -> fetch_cached()   (wraps fetch_live)
    otherwise              -> fetch_live()
"""

import asyncio
import time
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import httpx
import orjson
from pydantic import ValidationError

from core.cache import CacheService
from core.config import Settings
from core.exceptions import ConfigurationError, StaticSnapshotError
from core.logging import get_logger, log_execution_time
from models.records import CachedProjects, ProjectRecord, TableField
from services.baserow import BaserowClient
from services.fields import decode_records

logger = get_logger(__name__)

# Static snapshots must never come from an intermediate HTTP cache
NO_STORE_HEADERS = {"Cache-Control": "no-cache, no-store", "Pragma": "no-cache"}


def _rows_from_snapshot(data: Any) -> List[Dict[str, Any]]:
    """Accept a top-level array or {"results": [...]}; anything else is empty."""
    if isinstance(data, list):
        return data
    if isinstance(data, dict) and isinstance(data.get("results"), list):
        return data["results"]
    return []


class ProjectSource:
    """Fetches the project rows and memoizes the table's field definitions."""

    def __init__(
        self,
        settings: Settings,
        baserow: BaserowClient,
        cache: CacheService,
        http_client: Optional[httpx.AsyncClient] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.settings = settings
        self.baserow = baserow
        self.cache = cache
        self._http_client = http_client
        self._clock = clock
        self._table_fields: Optional[List[TableField]] = None

    @property
    def mode(self) -> str:
        if self.settings.static_mode:
            return "static"
        return "cached" if self.settings.cache_enabled else "live"

    # =========================================================================
    # STRATEGIES
    # =========================================================================

    async def fetch_live(self) -> List[Dict[str, Any]]:
        if not self.settings.projects_table_id:
            raise ConfigurationError("PROJECTS_TABLE_ID is not set")
        return await self.baserow.fetch_table_records(self.settings.projects_table_id)

    async def fetch_cached(self) -> List[Dict[str, Any]]:
        """Serve from cache while fresh, otherwise fetch live and rewrite the entry."""
        cache_key = self.settings.cache_key
        cache_raw = await self.cache.get(cache_key)

        if cache_raw:
            try:
                entry = CachedProjects.model_validate(orjson.loads(cache_raw))
                ttl_ms = (self.settings.cache_ttl or 0) * 1000
                if ttl_ms > 0 and self._now_ms() - entry.timestamp < ttl_ms:
                    logger.debug("Using local cache", cache_key=cache_key)
                    return entry.data or []
            except (ValueError, ValidationError) as e:
                logger.warning("Corrupt cache entry, reloading", cache_key=cache_key, error=str(e))

        data = await self.fetch_live()
        entry = CachedProjects(timestamp=self._now_ms(), data=data)
        await self.cache.set(cache_key, entry.model_dump_json())
        return data

    async def fetch_static(self) -> List[Dict[str, Any]]:
        """Read the JSON snapshot from a URL or a local file."""
        path = self.settings.static_path
        if path.startswith(("http://", "https://")):
            text = await self._download_snapshot(path)
        else:
            loop = asyncio.get_running_loop()
            try:
                text = await loop.run_in_executor(None, Path(path).read_text, "utf-8")
            except OSError as e:
                raise StaticSnapshotError(path, f"Cannot read snapshot: {e}")

        try:
            data = orjson.loads(text)
        except ValueError as e:
            raise StaticSnapshotError(path, f"Invalid JSON: {e}")
        return _rows_from_snapshot(data)

    async def _download_snapshot(self, url: str) -> str:
        client = self._http_client
        owns_client = client is None
        if owns_client:
            client = httpx.AsyncClient(timeout=self.settings.baserow_timeout)
        try:
            response = await client.get(url, headers=NO_STORE_HEADERS)
        except httpx.RequestError as e:
            raise StaticSnapshotError(url, f"Network error: {e}")
        finally:
            if owns_client:
                await client.aclose()

        if response.status_code >= 400:
            raise StaticSnapshotError(url, f"HTTP {response.status_code}")
        return response.text

    # =========================================================================
    # ENTRY POINTS
    # =========================================================================

    async def fetch_projects(self) -> List[Dict[str, Any]]:
        """Raw rows using the configured strategy."""
        mode = self.mode
        if mode == "static":
            return await self.fetch_static()
        if mode == "cached":
            return await self.fetch_cached()
        return await self.fetch_live()

    async def load(self) -> List[ProjectRecord]:
        """Fetch and decode the project list."""
        start_time = time.time()
        rows = await self.fetch_projects()
        records = decode_records(rows, [self.settings.project_fields.image])
        log_execution_time(logger, "load_projects", start_time, time.time(),
                           mode=self.mode, count=len(records))
        return records

    async def table_fields(self) -> Optional[List[TableField]]:
        """Field definitions, fetched at most once. None in static mode."""
        if self.settings.static_mode:
            return None
        if self._table_fields is None:
            self._table_fields = await self.baserow.fetch_table_fields(
                self.settings.projects_table_id
            )
        return self._table_fields

    def reset(self) -> None:
        self._table_fields = None

    def _now_ms(self) -> float:
        return self._clock() * 1000
