"""Baserow REST client for table fields and rows.

API Reference: https://api.baserow.io/api/redoc/
"""

import time
from typing import Any, Dict, List, Optional

import httpx

from core.config import Settings
from core.exceptions import BaserowError
from core.logging import get_logger, log_api_call
from models.records import TableField

logger = get_logger(__name__)


class BaserowClient:
    """Async client over httpx for the two read endpoints the site needs."""

    def __init__(self, settings: Settings, client: Optional[httpx.AsyncClient] = None):
        self.settings = settings
        self._client = client
        self._owns_client = client is None

    def _headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.settings.baserow_token:
            headers["Authorization"] = f"Token {self.settings.baserow_token}"
        return headers

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.settings.baserow_api_url.rstrip("/"),
                timeout=self.settings.baserow_timeout,
            )
        return self._client

    async def close(self):
        """Close the underlying client if this instance created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def _get_json(self, table_id: int, url: str, params: Dict[str, Any] = None) -> Any:
        start_time = time.time()
        try:
            response = await self._get_client().get(url, params=params, headers=self._headers())
        except httpx.TimeoutException:
            log_api_call(logger, "baserow", url, False, table_id=table_id, reason="timeout")
            raise BaserowError(table_id, f"Request timed out after {self.settings.baserow_timeout} seconds")
        except httpx.RequestError as e:
            log_api_call(logger, "baserow", url, False, table_id=table_id, reason=str(e))
            raise BaserowError(table_id, f"Network error: {e}")

        success = response.status_code < 400
        log_api_call(logger, "baserow", url, success, table_id=table_id,
                     status=response.status_code,
                     execution_time=round(time.time() - start_time, 4))
        if not success:
            raise BaserowError(table_id, f"HTTP {response.status_code}: {response.text[:200]}",
                               status_code=response.status_code)
        try:
            return response.json()
        except ValueError as e:
            raise BaserowError(table_id, f"Invalid JSON response: {e}")

    async def fetch_table_fields(self, table_id: int) -> List[TableField]:
        """Column definitions of a table, in table order."""
        data = await self._get_json(table_id, f"/api/database/fields/table/{table_id}/")
        if not isinstance(data, list):
            raise BaserowError(table_id, "Unexpected fields payload")
        return [TableField.model_validate(field) for field in data]

    async def fetch_table_records(self, table_id: int) -> List[Dict[str, Any]]:
        """All rows of a table keyed by field name, following pagination."""
        rows: List[Dict[str, Any]] = []
        url = f"/api/database/rows/table/{table_id}/"
        params: Optional[Dict[str, Any]] = {
            "user_field_names": "true",
            "size": self.settings.baserow_page_size,
        }

        while url:
            data = await self._get_json(table_id, url, params)
            if not isinstance(data, dict):
                raise BaserowError(table_id, "Unexpected rows payload")
            rows.extend(data.get("results") or [])
            # `next` is an absolute URL that already carries the query string
            url = data.get("next")
            params = None

        logger.debug("Fetched table rows", table_id=table_id, count=len(rows))
        return rows
