"""Shared fixtures for the portfolio tests."""

import asyncio
from typing import Any, Dict, List, Optional

import pytest

from core.cache import CacheService
from core.config import Settings
from models.records import TableField


def make_settings(tmp_path, **overrides) -> Settings:
    """Settings isolated from the host environment and .env files."""
    values = {
        "projects_table_id": 101,
        "site_table_id": 0,
        "cache_enabled": False,
        "cache_backend": "memory",
        "database_url": f"sqlite+aiosqlite:///{tmp_path}/test.db",
        "static_mode": False,
        "static_path": str(tmp_path / "projects.json"),
        "reload_interval": 0,
        "search_debounce_seconds": 0.05,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


class FakeBaserow:
    """In-memory stand-in for BaserowClient.

    `gate` (an asyncio.Event) lets a test hold fetches in flight.
    """

    def __init__(self, tables: Optional[Dict[int, List[Dict[str, Any]]]] = None,
                 fields: Optional[List[TableField]] = None):
        self.tables = tables or {}
        self.fields = fields or []
        self.record_calls: List[int] = []
        self.field_calls: List[int] = []
        self.fail_with: Optional[Exception] = None
        self.gate: Optional[asyncio.Event] = None

    async def fetch_table_records(self, table_id: int) -> List[Dict[str, Any]]:
        self.record_calls.append(table_id)
        if self.gate is not None:
            await self.gate.wait()
        if self.fail_with is not None:
            raise self.fail_with
        return [dict(row) for row in self.tables.get(table_id, [])]

    async def fetch_table_fields(self, table_id: int) -> List[TableField]:
        self.field_calls.append(table_id)
        return list(self.fields)

    async def close(self):
        pass


class Clock:
    """Manually advanced clock in seconds."""

    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


@pytest.fixture
def settings(tmp_path):
    return make_settings(tmp_path)


@pytest.fixture
def memory_cache(settings):
    return CacheService(settings)


@pytest.fixture
def clock():
    return Clock()


@pytest.fixture
def projects():
    return [
        {"id": 1, "Titulo": "Casa Árbol", "Descripcion": "Cabaña en el bosque",
         "Imagen": [{"url": "https://files.test/a.png",
                     "thumbnails": {"small": {"url": "https://files.test/a-small.png"}},
                     "name": "a.png"}],
         "Enlace": "https://example.test/casa",
         "Etiquetas": [{"id": 3, "value": "Madera"}, {"id": 4, "value": "Diseño"}]},
        {"id": 2, "Titulo": "Puente", "Descripcion": None,
         "Imagen": [], "Enlace": "",
         "Estado": {"id": 7, "value": "Terminado", "color": "green"}},
        {"id": 3, "Titulo": "Lámpara", "Descripcion": "Iluminación LED",
         "Imagen": "https://files.test/lampara.jpg", "Enlace": None,
         "Precio": 120.0, "Publicado": True},
    ]
