"""Tests for the project acquisition strategies and the TTL cache."""

import json

import httpx
import pytest

from core.cache import CacheService
from core.exceptions import ConfigurationError, StaticSnapshotError
from models.records import TableField
from services.acquisition import ProjectSource

from conftest import FakeBaserow, make_settings

ROWS = [{"id": 1, "Titulo": "A"}, {"id": 2, "Titulo": "B"}]


def build_source(settings, baserow=None, clock=None, http_client=None):
    baserow = baserow or FakeBaserow({settings.projects_table_id: ROWS})
    kwargs = {"http_client": http_client}
    if clock is not None:
        kwargs["clock"] = clock
    return ProjectSource(settings, baserow, CacheService(settings), **kwargs), baserow


class TestStaticMode:

    @pytest.mark.asyncio
    async def test_results_object(self, tmp_path):
        settings = make_settings(tmp_path, static_mode=True)
        (tmp_path / "projects.json").write_text(json.dumps({"results": ROWS}), encoding="utf-8")
        source, baserow = build_source(settings)

        rows = await source.fetch_projects()

        assert rows == ROWS
        assert baserow.record_calls == []

    @pytest.mark.asyncio
    async def test_top_level_array(self, tmp_path):
        settings = make_settings(tmp_path, static_mode=True)
        (tmp_path / "projects.json").write_text(json.dumps(ROWS), encoding="utf-8")
        source, _ = build_source(settings)

        assert await source.fetch_projects() == ROWS

    @pytest.mark.asyncio
    @pytest.mark.parametrize("payload", ['{"items": []}', '"text"', "42", "null", '{"results": "x"}'])
    async def test_other_shapes_are_empty(self, tmp_path, payload):
        settings = make_settings(tmp_path, static_mode=True)
        (tmp_path / "projects.json").write_text(payload, encoding="utf-8")
        source, _ = build_source(settings)

        assert await source.fetch_projects() == []

    @pytest.mark.asyncio
    async def test_malformed_json_raises(self, tmp_path):
        settings = make_settings(tmp_path, static_mode=True)
        (tmp_path / "projects.json").write_text("{not json", encoding="utf-8")
        source, _ = build_source(settings)

        with pytest.raises(StaticSnapshotError):
            await source.fetch_projects()

    @pytest.mark.asyncio
    async def test_missing_file_raises(self, tmp_path):
        settings = make_settings(tmp_path, static_mode=True, static_path=str(tmp_path / "nope.json"))
        source, _ = build_source(settings)

        with pytest.raises(StaticSnapshotError):
            await source.fetch_projects()

    @pytest.mark.asyncio
    async def test_url_bypasses_http_cache(self, tmp_path):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"results": ROWS})

        settings = make_settings(tmp_path, static_mode=True,
                                 static_path="https://site.test/proyectos.json")
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        source, _ = build_source(settings, http_client=http_client)

        assert await source.fetch_projects() == ROWS
        assert "no-store" in seen[0].headers["Cache-Control"]

    @pytest.mark.asyncio
    async def test_fields_never_fetched(self, tmp_path):
        settings = make_settings(tmp_path, static_mode=True)
        source, baserow = build_source(settings)

        assert await source.table_fields() is None
        assert baserow.field_calls == []


class TestLiveMode:

    @pytest.mark.asyncio
    async def test_fetches_every_time(self, settings):
        source, baserow = build_source(settings)

        await source.fetch_projects()
        await source.fetch_projects()

        assert source.mode == "live"
        assert baserow.record_calls == [101, 101]

    @pytest.mark.asyncio
    async def test_missing_table_id_is_a_configuration_error(self, tmp_path):
        source, baserow = build_source(make_settings(tmp_path, projects_table_id=0))

        with pytest.raises(ConfigurationError):
            await source.fetch_projects()
        assert baserow.record_calls == []

    @pytest.mark.asyncio
    async def test_fields_memoized(self, settings):
        baserow = FakeBaserow({101: ROWS}, fields=[TableField(id=1, name="Titulo")])
        source, _ = build_source(settings, baserow=baserow)

        first = await source.table_fields()
        second = await source.table_fields()

        assert first == second
        assert baserow.field_calls == [101]

    @pytest.mark.asyncio
    async def test_load_decodes_records(self, settings):
        source, _ = build_source(settings)

        records = await source.load()

        assert [r.raw["Titulo"] for r in records] == ["A", "B"]
        assert records[0].full_text == "1 a"


class TestCachedMode:

    @pytest.mark.asyncio
    async def test_fresh_entry_is_reused(self, tmp_path, clock):
        settings = make_settings(tmp_path, cache_enabled=True, cache_ttl=60)
        source, baserow = build_source(settings, clock=clock)

        first = await source.fetch_projects()
        clock.advance(30)
        second = await source.fetch_projects()

        assert source.mode == "cached"
        assert first == second == ROWS
        assert baserow.record_calls == [101]

    @pytest.mark.asyncio
    async def test_expired_entry_refetches(self, tmp_path, clock):
        settings = make_settings(tmp_path, cache_enabled=True, cache_ttl=60)
        source, baserow = build_source(settings, clock=clock)

        await source.fetch_projects()
        clock.advance(60)
        await source.fetch_projects()

        assert baserow.record_calls == [101, 101]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("ttl", [0, -5])
    async def test_non_positive_ttl_always_refetches_but_still_writes(self, tmp_path, clock, ttl):
        settings = make_settings(tmp_path, cache_enabled=True, cache_ttl=ttl)
        source, baserow = build_source(settings, clock=clock)

        await source.fetch_projects()
        await source.fetch_projects()

        assert baserow.record_calls == [101, 101]
        stored = json.loads(await source.cache.get("baserow_cache_101"))
        assert stored["data"] == ROWS
        assert stored["timestamp"] == clock.now * 1000

    @pytest.mark.asyncio
    @pytest.mark.parametrize("raw", ["{broken", '{"data": []}', "[1, 2]", '{"timestamp": "x"}'])
    async def test_corrupt_entry_is_a_miss(self, tmp_path, clock, raw):
        settings = make_settings(tmp_path, cache_enabled=True, cache_ttl=60)
        source, baserow = build_source(settings, clock=clock)
        await source.cache.set("baserow_cache_101", raw)

        rows = await source.fetch_projects()

        assert rows == ROWS
        assert baserow.record_calls == [101]
        # overwritten with a valid entry
        assert json.loads(await source.cache.get("baserow_cache_101"))["data"] == ROWS

    @pytest.mark.asyncio
    async def test_entry_without_data_is_empty(self, tmp_path, clock):
        settings = make_settings(tmp_path, cache_enabled=True, cache_ttl=60)
        source, baserow = build_source(settings, clock=clock)
        await source.cache.set("baserow_cache_101", json.dumps({"timestamp": clock.now * 1000}))

        assert await source.fetch_projects() == []
        assert baserow.record_calls == []

    @pytest.mark.asyncio
    async def test_fetch_failure_propagates(self, tmp_path, clock):
        settings = make_settings(tmp_path, cache_enabled=True, cache_ttl=60)
        baserow = FakeBaserow()
        baserow.fail_with = RuntimeError("boom")
        source, _ = build_source(settings, baserow=baserow, clock=clock)

        with pytest.raises(RuntimeError):
            await source.fetch_projects()
        assert await source.cache.get("baserow_cache_101") is None
